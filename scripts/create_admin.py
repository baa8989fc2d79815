#!/usr/bin/env python3
"""
Create an administrator account
Usage: python scripts/create_admin.py <username> <email> [--first-name NAME] [--last-name NAME] [--super]
The password is read from ADMIN_PASSWORD or prompted for.
"""
import argparse
import getpass
import os
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from database.db_manager import DatabaseManager
from database.models import Admin
from staffing.auth import hash_password
from staffing.errors import ValidationError
import config
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

DEFAULT_PERMISSIONS = [
    'manage_employees',
    'manage_projects',
    'view_analytics',
    'manage_assessments'
]


def main():
    parser = argparse.ArgumentParser(description="Create an administrator account")
    parser.add_argument("username")
    parser.add_argument("email")
    parser.add_argument("--first-name", default="Admin")
    parser.add_argument("--last-name", default="User")
    parser.add_argument("--super", action="store_true", help="create a super_admin")
    args = parser.parse_args()

    password = os.getenv("ADMIN_PASSWORD") or getpass.getpass("Password: ")
    if len(password) < 6:
        logger.error("Password must be at least 6 characters")
        sys.exit(1)

    db = DatabaseManager(config.DATABASE_PATH)

    if db.get_admin_by_username(args.username):
        logger.error(f"Admin already exists: {args.username}")
        sys.exit(1)

    admin = Admin(
        username=args.username,
        first_name=args.first_name,
        last_name=args.last_name,
        email=args.email,
        password_hash=hash_password(password),
        role='super_admin' if args.super else 'admin',
        permissions=list(DEFAULT_PERMISSIONS)
    )

    try:
        admin_id = db.insert_admin(admin)
    except ValidationError as e:
        logger.error(e.message)
        sys.exit(1)

    logger.info(f"Created {admin.role} '{admin.username}' with id {admin_id}")


if __name__ == "__main__":
    main()

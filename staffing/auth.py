"""
Admin authentication: password hashing and access tokens
"""
import base64
import hmac
import logging
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

import config
from database.db_manager import DatabaseManager
from database.models import Admin
from .errors import AuthenticationError, PermissionDeniedError

logger = logging.getLogger(__name__)

HASH_SCHEME = 'pbkdf2_sha256'
HASH_ITERATIONS = 260000
SALT_BYTES = 16
JWT_ALGORITHM = 'HS256'


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode('utf-8'))


def hash_password(password: str, iterations: int = HASH_ITERATIONS) -> str:
    """Return 'pbkdf2_sha256$<iterations>$<salt>$<hash>' with base64 parts"""
    if not password:
        raise ValueError("Password must not be empty")
    salt = os.urandom(SALT_BYTES)
    digest = _derive(password, salt, iterations)
    return '$'.join([
        HASH_SCHEME,
        str(iterations),
        base64.b64encode(salt).decode('ascii'),
        base64.b64encode(digest).decode('ascii'),
    ])


def verify_password(password: str, stored: str) -> bool:
    try:
        scheme, iterations, salt, digest = stored.split('$')
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    candidate = _derive(password, base64.b64decode(salt), int(iterations))
    return hmac.compare_digest(candidate, base64.b64decode(digest))


def create_access_token(admin: Admin, expire_hours: Optional[int] = None,
                        now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        'adminId': admin.id,
        'role': 'admin',
        'email': admin.email,
        'iat': now,
        'exp': now + timedelta(hours=expire_hours or config.JWT_EXPIRE_HOURS),
    }
    return jwt.encode(payload, config.get_jwt_secret(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> Dict[str, Any]:
    try:
        return jwt.decode(token, config.get_jwt_secret(), algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("Invalid token")


class AdminAuthenticator:
    """Checks admin credentials and resolves tokens back to admins"""

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def login(self, username: str, password: str) -> Dict[str, Any]:
        admin = self.db.get_admin_by_username(username)
        if not admin or not verify_password(password, admin.password_hash):
            logger.info(f"Failed admin login for {username!r}")
            raise AuthenticationError("Invalid username or password")
        if not admin.is_active:
            raise AuthenticationError("Account is deactivated")

        self.db.record_admin_login(admin.id)
        admin = self.db.get_admin_by_id(admin.id)
        logger.info(f"Admin {admin.username} logged in")
        return {'token': create_access_token(admin), 'user': admin.to_dict()}

    def authenticate(self, token: str) -> Admin:
        payload = decode_access_token(token)
        if payload.get('role') != 'admin' or 'adminId' not in payload:
            raise PermissionDeniedError("Access denied. Admin privileges required.")

        admin = self.db.get_admin_by_id(payload['adminId'])
        if not admin or not admin.is_active:
            raise AuthenticationError("Invalid token. Admin not found or inactive.")
        return admin

#!/usr/bin/env python3
"""
Script to import employee data from Excel file
Usage: python scripts/import_employees.py <path_to_excel_file>
"""
import sys
import os
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from database.db_manager import DatabaseManager
from data_import.excel_importer import ExcelImporter
import config
import logging

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    if len(sys.argv) < 2:
        print("Usage: python scripts/import_employees.py <path_to_excel_file>")
        print("\nExpected Excel columns:")
        print("  - First Name")
        print("  - Last Name")
        print("  - Email")
        print("  - Position")
        print("  - Department")
        print("  - Phone, Hire Date, Availability, Performance Score, Bio (optional)")
        print("  - Skills (optional), e.g. 'Python:8; React:6; Figma'")
        sys.exit(1)

    excel_path = sys.argv[1]

    if not os.path.exists(excel_path):
        logger.error(f"File not found: {excel_path}")
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Staffing & Assessment - Employee Import")
    logger.info("=" * 60)

    logger.info("Initializing database...")
    db_manager = DatabaseManager(config.DATABASE_PATH)

    importer = ExcelImporter(db_manager)

    logger.info(f"Importing from: {excel_path}")
    stats = importer.import_from_excel(excel_path)

    logger.info("=" * 60)
    logger.info("Import Summary:")
    logger.info(f"  Total rows processed: {stats['total_rows']}")
    logger.info(f"  Employees imported: {stats['imported_employees']}")
    logger.info(f"  Skills imported: {stats['imported_skills']}")
    logger.info(f"  Errors: {stats['errors']}")
    logger.info("=" * 60)

    db_stats = db_manager.get_employee_statistics()
    logger.info("Database Statistics:")
    logger.info(f"  Total active employees: {db_stats['totalEmployees']}")
    logger.info(f"  Departments: {len(db_stats['departmentStats'])}")
    logger.info("=" * 60)

    if stats['errors']:
        logger.warning(f"Import finished with {stats['errors']} rejected rows")
    else:
        logger.info("Import completed successfully!")


if __name__ == "__main__":
    main()

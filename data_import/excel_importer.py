"""
Excel data importer for the Staffing & Assessment directory
Imports employees, with their skills, from a spreadsheet export
"""
import pandas as pd
from typing import Any, Dict, Optional
import logging

from database.db_manager import DatabaseManager
from staffing.errors import StaffingError, ValidationError
from staffing.service import StaffingService
from staffing.skills import parse_skill_list

logger = logging.getLogger(__name__)


class ExcelImporter:
    """Import employee data from Excel file"""

    REQUIRED_COLUMNS = ['First Name', 'Last Name', 'Email', 'Position', 'Department']

    # optional column -> employee field
    OPTIONAL_COLUMNS = {
        'Phone': 'phone',
        'Hire Date': 'hire_date',
        'Availability': 'availability',
        'Performance Score': 'performance_score',
        'Bio': 'bio',
    }

    def __init__(self, db_manager: DatabaseManager, service: Optional[StaffingService] = None):
        self.db = db_manager
        self.service = service or StaffingService(db_manager)

    def import_from_excel(self, excel_path: str) -> Dict[str, int]:
        """
        Import employees from Excel file

        Expected columns:
        - First Name, Last Name, Email, Position, Department (required)
        - Phone, Hire Date, Availability, Performance Score, Bio (optional)
        - Skills, e.g. "Python:8; React:6; Figma" (optional, bare names get level 5)
        """
        logger.info(f"Starting import from {excel_path}")
        df = pd.read_excel(excel_path)
        return self.import_dataframe(df)

    def import_dataframe(self, df: pd.DataFrame) -> Dict[str, int]:
        # Normalize column names
        df = df.copy()
        df.columns = df.columns.str.strip()

        # Validate required columns
        missing_cols = [col for col in self.REQUIRED_COLUMNS if col not in df.columns]
        if missing_cols:
            raise ValueError(f"Missing required columns: {missing_cols}")

        # Clean data
        df = df.fillna('')

        stats = {
            'total_rows': len(df),
            'imported_employees': 0,
            'imported_skills': 0,
            'errors': 0
        }

        for idx, row in df.iterrows():
            try:
                data = self._row_to_employee_data(row)
                employee = self.service.create_employee(data)
                stats['imported_employees'] += 1
                stats['imported_skills'] += len(employee.skills)

                if (stats['imported_employees']) % 100 == 0:
                    logger.info(f"Imported {stats['imported_employees']}/{len(df)} employees")

            except StaffingError as e:
                # spreadsheet rows are 1-based with a header row
                logger.error(f"Error importing row {idx + 2}: {e.message}")
                stats['errors'] += 1

        logger.info(f"Import completed: {stats}")
        return stats

    def _row_to_employee_data(self, row: pd.Series) -> Dict[str, Any]:
        """Convert Excel row to the fields StaffingService.create_employee expects"""
        data: Dict[str, Any] = {
            'first_name': self._text(row.get('First Name')),
            'last_name': self._text(row.get('Last Name')),
            'email': (self._text(row.get('Email')) or '').lower(),
            'position': self._text(row.get('Position')),
            'department': self._text(row.get('Department')),
        }

        for column, field_name in self.OPTIONAL_COLUMNS.items():
            value = row.get(column)
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            if field_name == 'performance_score':
                value = self._whole_number(value, 'performance_score')
            elif field_name == 'hire_date':
                try:
                    value = pd.to_datetime(value).to_pydatetime()
                except (TypeError, ValueError):
                    raise ValidationError(f"Invalid hire date: {value}", field=field_name)
            elif field_name == 'availability':
                value = str(value).strip().lower()
            else:
                value = str(value).strip()
            data[field_name] = value

        skills = row.get('Skills')
        if skills:
            data['skills'] = parse_skill_list(str(skills))

        return data

    def _text(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        return str(value).strip() or None

    def _whole_number(self, value: Any, field_name: str) -> int:
        try:
            number = float(value)
        except (TypeError, ValueError):
            raise ValidationError(f"Field '{field_name}' must be a number", field=field_name)
        if not number.is_integer():
            raise ValidationError(f"Field '{field_name}' must be a whole number", field=field_name)
        return int(number)

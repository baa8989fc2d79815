"""
Shared fixtures: every test gets its own SQLite file under tmp_path
"""
import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from database.db_manager import DatabaseManager
from database.models import Admin, Employee, Skill, Project, Requirement
from staffing.auth import hash_password
from staffing.service import StaffingService


@pytest.fixture
def db(tmp_path):
    return DatabaseManager(str(tmp_path / "staffing.db"))


@pytest.fixture
def service(db):
    return StaffingService(db)


@pytest.fixture
def admin(db):
    admin = Admin(
        username="admin",
        first_name="Ada",
        last_name="Admin",
        email="admin@example.com",
        # low iteration count keeps the suite fast
        password_hash=hash_password("secret123", iterations=1000),
        permissions=["manage_employees"]
    )
    admin.id = db.insert_admin(admin)
    return admin


def make_employee(email, skills=(), availability="available", **kwargs):
    return Employee(
        first_name=kwargs.pop("first_name", email.split("@")[0].title()),
        last_name=kwargs.pop("last_name", "Tester"),
        email=email,
        position=kwargs.pop("position", "Developer"),
        department=kwargs.pop("department", "Engineering"),
        skills=[Skill(name, level) for name, level in skills],
        availability=availability,
        **kwargs
    )


def make_project(requirements=(), title="Portal", **kwargs):
    return Project(
        title=title,
        description=kwargs.pop("description", "Build the thing"),
        company=kwargs.pop("company", "Acme"),
        category=kwargs.pop("category", "Web"),
        requirements=[Requirement(skill, level) for skill, level in requirements],
        **kwargs
    )


ALL_SEVENS = {
    "technicalSkills": 7,
    "communication": 7,
    "leadership": 7,
    "problemSolving": 7,
    "teamwork": 7,
    "adaptability": 7,
    "timeManagement": 7,
    "creativity": 7,
}

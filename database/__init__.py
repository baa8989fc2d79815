"""Database package for the Staffing & Assessment service"""
from .db_manager import DatabaseManager
from .models import (
    Skill, Requirement, Employee, ProjectInvolvement, Project,
    ProjectAssignment, ProjectComment, Assessment, Admin
)

__all__ = [
    'DatabaseManager',
    'Skill',
    'Requirement',
    'Employee',
    'ProjectInvolvement',
    'Project',
    'ProjectAssignment',
    'ProjectComment',
    'Assessment',
    'Admin'
]

"""Staffing core: skill matching, assessment scoring and their orchestration"""
from .errors import (
    StaffingError,
    ValidationError,
    NotFoundError,
    StateConflictError,
    AlreadyAssignedError,
    AuthenticationError,
    PermissionDeniedError,
)

__all__ = [
    'StaffingError',
    'ValidationError',
    'NotFoundError',
    'StateConflictError',
    'AlreadyAssignedError',
    'AuthenticationError',
    'PermissionDeniedError',
]

"""
Error types raised by the staffing core and its persistence layer
"""
from typing import Any, Optional


class StaffingError(Exception):
    """Base class for every error the service surfaces to callers"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(StaffingError):
    """Input failed validation; `field` names the offending key"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class NotFoundError(StaffingError):
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class StateConflictError(StaffingError):
    """Mutation attempted on an assessment that is locked by its status"""

    status_code = 409

    def __init__(self, entity_id: Any, status: str):
        super().__init__(
            f"Cannot update assessment {entity_id} that has been {status}"
        )
        self.entity_id = entity_id
        self.status = status


class AlreadyAssignedError(StaffingError):
    status_code = 409

    def __init__(self, project_id: Any, employee_id: Any):
        super().__init__(
            f"Employee {employee_id} already assigned to project {project_id}"
        )
        self.project_id = project_id
        self.employee_id = employee_id


class AuthenticationError(StaffingError):
    status_code = 401


class PermissionDeniedError(StaffingError):
    status_code = 403

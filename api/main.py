"""
FastAPI application for the Staffing & Assessment service
Admin-facing REST API: employees, projects, matching and assessments
"""
import logging
import math
from datetime import datetime
from typing import Optional, List, Dict, Any, Union

from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from database.db_manager import DatabaseManager
from database.models import Admin
from staffing.auth import AdminAuthenticator
from staffing.errors import StaffingError, ValidationError, AuthenticationError
from staffing.service import StaffingService
import config

logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# =====================================================
# App setup
# =====================================================

app = FastAPI(
    title="Staffing & Assessment API",
    description="Employee directory, skill-based project matching and performance assessments",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

bearer_scheme = HTTPBearer(auto_error=False)

_service: Optional[StaffingService] = None


def get_service() -> StaffingService:
    """Created on first use so importing the module has no side effects"""
    global _service
    if _service is None:
        config.validate_config()
        logger.info(f"Opening database at {config.DATABASE_PATH}")
        _service = StaffingService(
            DatabaseManager(config.DATABASE_PATH),
            enable_llm=config.ENABLE_LLM
        )
    return _service


def get_authenticator(service: StaffingService = Depends(get_service)) -> AdminAuthenticator:
    return AdminAuthenticator(service.db)


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: AdminAuthenticator = Depends(get_authenticator),
) -> Admin:
    if credentials is None:
        raise AuthenticationError("Access token required")
    return authenticator.authenticate(credentials.credentials)


# =====================================================
# Error handling
# =====================================================

@app.exception_handler(StaffingError)
async def staffing_error_handler(request: Request, exc: StaffingError):
    body: Dict[str, Any] = {"success": False, "message": exc.message}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    return JSONResponse(status_code=exc.status_code, content=body)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg', 'Invalid request')}" if location else first.get("msg", "Invalid request")
    return JSONResponse(status_code=400, content={"success": False, "message": message})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content={"success": False, "message": str(exc)})


def paginated(items: List[Any], total: int, page: int, limit: int) -> Dict[str, Any]:
    return {
        "success": True,
        "data": [item.to_dict() for item in items],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit)
        }
    }


# =====================================================
# Request models
# =====================================================

class CamelModel(BaseModel):
    """Accepts the dashboard's camelCase keys as well as snake_case"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


SkillInput = Union[str, Dict[str, Any]]


class LoginRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class EmployeeCreate(CamelModel):
    first_name: str
    last_name: str
    email: str
    position: str
    department: str
    phone: Optional[str] = None
    hire_date: Optional[datetime] = None
    skills: List[SkillInput] = []
    performance_score: Optional[int] = None
    availability: Optional[str] = None
    bio: Optional[str] = None
    strengths: List[str] = []
    weaknesses: List[str] = []
    assessment_answers: Optional[Dict[str, List[Optional[int]]]] = None


class EmployeeUpdate(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    hire_date: Optional[datetime] = None
    skills: Optional[List[SkillInput]] = None
    performance_score: Optional[int] = None
    availability: Optional[str] = None
    bio: Optional[str] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    assessment_answers: Optional[Dict[str, List[Optional[int]]]] = None


class SkillsUpdate(CamelModel):
    skills: List[SkillInput]


class ProjectCreate(CamelModel):
    title: str
    description: str
    company: str
    category: str
    requirements: List[Dict[str, Any]] = []
    budget: Optional[float] = None
    duration: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    priority: Optional[str] = None


class ProjectUpdate(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    company: Optional[str] = None
    category: Optional[str] = None
    requirements: Optional[List[Dict[str, Any]]] = None
    budget: Optional[float] = None
    duration: Optional[int] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[str] = None
    priority: Optional[str] = None


class AssignRequest(CamelModel):
    employee_id: int
    role: str


class MatchExplanationRequest(CamelModel):
    employee_id: int


class CommentRequest(CamelModel):
    text: str
    author: Optional[str] = None


class AssessmentCreate(CamelModel):
    employee_id: int
    scores: Dict[str, Any]
    project_id: Optional[int] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None
    comments: Optional[str] = None


class AssessmentUpdate(CamelModel):
    scores: Optional[Dict[str, Any]] = None
    project_id: Optional[int] = None
    strengths: Optional[List[str]] = None
    weaknesses: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None
    comments: Optional[str] = None


class AdvanceRequest(CamelModel):
    status: Optional[str] = None


# =====================================================
# Basic endpoints
# =====================================================

@app.get("/api/health")
def health_check():
    return {
        "status": "OK",
        "message": "Server is running!",
        "timestamp": datetime.now().isoformat()
    }


# =====================================================
# Auth
# =====================================================

@app.post("/api/auth/admin/login")
def admin_login(request: LoginRequest, authenticator: AdminAuthenticator = Depends(get_authenticator)):
    result = authenticator.login(request.username, request.password)
    return {
        "success": True,
        "message": "Admin login successful",
        "token": result["token"],
        "user": result["user"]
    }


@app.get("/api/auth/me")
def current_admin(admin: Admin = Depends(require_admin)):
    return {"success": True, "user": admin.to_dict()}


# =====================================================
# Employees
# =====================================================

@app.get("/api/employees")
def list_employees(
    search: Optional[str] = None,
    department: Optional[str] = None,
    position: Optional[str] = None,
    availability: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    admin: Admin = Depends(require_admin),
    service: StaffingService = Depends(get_service),
):
    employees, total = service.db.list_employees(
        search=search,
        department=department,
        position=position,
        availability=availability,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit
    )
    return paginated(employees, total, page, limit)


@app.get("/api/employees/stats/overview")
def employee_stats(admin: Admin = Depends(require_admin), service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.db.get_employee_statistics()}


@app.get("/api/employees/{employee_id}")
def get_employee(employee_id: int, admin: Admin = Depends(require_admin),
                 service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.get_employee(employee_id).to_dict()}


@app.get("/api/employees/{employee_id}/assessment-summary")
def employee_assessment_summary(employee_id: int, admin: Admin = Depends(require_admin),
                                service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.employee_score_summary(employee_id)}


@app.post("/api/employees", status_code=201)
def create_employee(request: EmployeeCreate, admin: Admin = Depends(require_admin),
                    service: StaffingService = Depends(get_service)):
    employee = service.create_employee(request.model_dump(exclude_none=True))
    return {"success": True, "data": employee.to_dict()}


@app.put("/api/employees/{employee_id}")
def update_employee(employee_id: int, request: EmployeeUpdate, admin: Admin = Depends(require_admin),
                    service: StaffingService = Depends(get_service)):
    employee = service.update_employee(employee_id, request.model_dump(exclude_unset=True))
    return {"success": True, "data": employee.to_dict()}


@app.patch("/api/employees/{employee_id}/skills")
def update_employee_skills(employee_id: int, request: SkillsUpdate, admin: Admin = Depends(require_admin),
                           service: StaffingService = Depends(get_service)):
    employee = service.update_employee_skills(employee_id, request.skills)
    return {"success": True, "data": employee.to_dict()}


@app.delete("/api/employees/{employee_id}")
def delete_employee(employee_id: int, admin: Admin = Depends(require_admin),
                    service: StaffingService = Depends(get_service)):
    service.delete_employee(employee_id)
    return {"success": True, "message": "Employee deleted successfully"}


# =====================================================
# Projects
# =====================================================

@app.get("/api/projects")
def list_projects(
    status: Optional[str] = None,
    priority: Optional[str] = None,
    category: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    admin: Admin = Depends(require_admin),
    service: StaffingService = Depends(get_service),
):
    projects, total = service.db.list_projects(
        status=status,
        priority=priority,
        category=category,
        sort_by=sort_by,
        sort_order=sort_order,
        page=page,
        limit=limit
    )
    return paginated(projects, total, page, limit)


@app.get("/api/projects/stats/overview")
def project_stats(admin: Admin = Depends(require_admin), service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.db.get_project_statistics()}


@app.get("/api/projects/{project_id}")
def get_project(project_id: int, admin: Admin = Depends(require_admin),
                service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.get_project(project_id).to_dict()}


@app.post("/api/projects", status_code=201)
def create_project(request: ProjectCreate, admin: Admin = Depends(require_admin),
                   service: StaffingService = Depends(get_service)):
    project = service.create_project(request.model_dump(exclude_none=True))
    return {"success": True, "data": project.to_dict()}


@app.put("/api/projects/{project_id}")
def update_project(project_id: int, request: ProjectUpdate, admin: Admin = Depends(require_admin),
                   service: StaffingService = Depends(get_service)):
    project = service.update_project(project_id, request.model_dump(exclude_unset=True))
    return {"success": True, "data": project.to_dict()}


@app.delete("/api/projects/{project_id}")
def delete_project(project_id: int, admin: Admin = Depends(require_admin),
                   service: StaffingService = Depends(get_service)):
    service.delete_project(project_id)
    return {"success": True, "message": "Project deleted successfully"}


@app.get("/api/projects/{project_id}/matches")
def project_matches(project_id: int, admin: Admin = Depends(require_admin),
                    service: StaffingService = Depends(get_service)):
    project, matches = service.find_matches(project_id)
    return {
        "success": True,
        "data": {
            "project": project.to_dict(),
            "matches": [m.to_dict() for m in matches]
        }
    }


@app.post("/api/projects/{project_id}/match-explanation")
def match_explanation(project_id: int, request: MatchExplanationRequest,
                      admin: Admin = Depends(require_admin),
                      service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.explain_match(project_id, request.employee_id)}


@app.post("/api/projects/{project_id}/assign")
def assign_employee(project_id: int, request: AssignRequest, admin: Admin = Depends(require_admin),
                    service: StaffingService = Depends(get_service)):
    project = service.assign_employee(project_id, request.employee_id, request.role)
    return {"success": True, "data": project.to_dict()}


@app.delete("/api/projects/{project_id}/assign/{employee_id}")
def remove_employee(project_id: int, employee_id: int, admin: Admin = Depends(require_admin),
                    service: StaffingService = Depends(get_service)):
    project = service.remove_employee(project_id, employee_id)
    return {"success": True, "message": "Employee removed from project", "data": project.to_dict()}


@app.post("/api/projects/{project_id}/comments", status_code=201)
def add_comment(project_id: int, request: CommentRequest, admin: Admin = Depends(require_admin),
                service: StaffingService = Depends(get_service)):
    comment = service.add_comment(project_id, request.text, request.author)
    return {"success": True, "data": comment.to_dict()}


# =====================================================
# Assessments
# =====================================================

@app.get("/api/assessments")
def list_assessments(
    employee_id: Optional[int] = Query(None, alias="employeeId"),
    project_id: Optional[int] = Query(None, alias="projectId"),
    status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    admin: Admin = Depends(require_admin),
    service: StaffingService = Depends(get_service),
):
    assessments, total = service.db.list_assessments(
        employee_id=employee_id,
        project_id=project_id,
        status=status,
        page=page,
        limit=limit
    )
    return paginated(assessments, total, page, limit)


@app.get("/api/assessments/stats/overview")
def assessment_stats(admin: Admin = Depends(require_admin), service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.db.get_assessment_statistics()}


@app.get("/api/assessments/employee/{employee_id}")
def employee_assessments(
    employee_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=100),
    admin: Admin = Depends(require_admin),
    service: StaffingService = Depends(get_service),
):
    assessments, total = service.db.list_assessments(employee_id=employee_id, page=page, limit=limit)
    return paginated(assessments, total, page, limit)


@app.get("/api/assessments/{assessment_id}")
def get_assessment(assessment_id: int, admin: Admin = Depends(require_admin),
                   service: StaffingService = Depends(get_service)):
    return {"success": True, "data": service.get_assessment(assessment_id).to_dict()}


@app.post("/api/assessments", status_code=201)
def create_assessment(request: AssessmentCreate, admin: Admin = Depends(require_admin),
                      service: StaffingService = Depends(get_service)):
    assessment = service.create_assessment(
        assessor_id=admin.id,
        employee_id=request.employee_id,
        scores=request.scores,
        project_id=request.project_id,
        strengths=request.strengths,
        weaknesses=request.weaknesses,
        recommendations=request.recommendations,
        comments=request.comments
    )
    return {"success": True, "message": "Assessment created successfully!", "data": assessment.to_dict()}


@app.put("/api/assessments/{assessment_id}")
def update_assessment(assessment_id: int, request: AssessmentUpdate, admin: Admin = Depends(require_admin),
                      service: StaffingService = Depends(get_service)):
    assessment = service.update_assessment(assessment_id, request.model_dump(exclude_unset=True))
    return {"success": True, "message": "Assessment updated successfully!", "data": assessment.to_dict()}


@app.post("/api/assessments/{assessment_id}/advance")
def advance_assessment(assessment_id: int, request: Optional[AdvanceRequest] = None,
                       admin: Admin = Depends(require_admin),
                       service: StaffingService = Depends(get_service)):
    target = request.status if request else None
    assessment = service.advance_assessment(assessment_id, target)
    return {"success": True, "data": assessment.to_dict()}


@app.delete("/api/assessments/{assessment_id}")
def delete_assessment(assessment_id: int, admin: Admin = Depends(require_admin),
                      service: StaffingService = Depends(get_service)):
    service.delete_assessment(assessment_id)
    return {"success": True, "message": "Assessment deleted successfully"}

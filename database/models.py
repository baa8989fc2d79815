"""
Data models for the Staffing & Assessment directory
"""
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from datetime import datetime


AVAILABILITY_STATES = ('available', 'busy', 'unavailable')
REQUIREMENT_PRIORITIES = ('low', 'medium', 'high')
PROJECT_STATUSES = ('open', 'in-progress', 'completed', 'cancelled')
PROJECT_PRIORITIES = ('low', 'medium', 'high', 'urgent')


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class Skill:
    """A named skill with a 1-10 proficiency level"""
    name: str
    level: int = 5
    category: str = 'General'

    def to_dict(self):
        return {'name': self.name, 'level': self.level, 'category': self.category}


@dataclass(frozen=True)
class Requirement:
    """A project's need for a skill at a minimum level"""
    skill: str
    level: int
    priority: str = 'medium'  # descriptive only, not used in scoring

    def to_dict(self):
        return {'skill': self.skill, 'level': self.level, 'priority': self.priority}


@dataclass
class ProjectInvolvement:
    """Employee-side record of a project assignment"""
    project_id: int
    role: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    performance: int = 5
    is_active: bool = True
    id: Optional[int] = None

    def to_dict(self):
        return {
            'projectId': self.project_id,
            'role': self.role,
            'startDate': _iso(self.start_date),
            'endDate': _iso(self.end_date),
            'performance': self.performance,
            'isActive': self.is_active
        }


@dataclass
class Employee:
    """Employee data model"""
    first_name: str
    last_name: str
    email: str
    position: str
    department: str
    phone: Optional[str] = None
    hire_date: Optional[datetime] = None
    skills: List[Skill] = field(default_factory=list)
    performance_score: int = 75
    availability: str = 'available'
    bio: Optional[str] = None
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    projects: List[ProjectInvolvement] = field(default_factory=list)
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @property
    def active_projects_count(self) -> int:
        return sum(1 for p in self.projects if p.is_active)

    def summary(self) -> Dict[str, Any]:
        """Short form used inside match results"""
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'fullName': self.full_name,
            'email': self.email,
            'position': self.position,
            'department': self.department,
            'availability': self.availability,
            'performanceScore': self.performance_score
        }

    def to_dict(self):
        """Convert to dictionary for JSON serialization"""
        data = self.summary()
        data.update({
            'phone': self.phone,
            'hireDate': _iso(self.hire_date),
            'skills': [s.to_dict() for s in self.skills],
            'bio': self.bio,
            'strengths': list(self.strengths),
            'weaknesses': list(self.weaknesses),
            'projects': [p.to_dict() for p in self.projects],
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at)
        })
        return data


@dataclass
class ProjectAssignment:
    """Project-side record of an assigned employee"""
    employee_id: int
    role: str
    assigned_date: Optional[datetime] = None

    def to_dict(self):
        return {
            'employeeId': self.employee_id,
            'role': self.role,
            'assignedDate': _iso(self.assigned_date)
        }


@dataclass
class ProjectComment:
    text: str
    author: str = 'Admin'
    created_at: Optional[datetime] = None
    id: Optional[int] = None

    def to_dict(self):
        return {
            'id': self.id,
            'text': self.text,
            'author': self.author,
            'createdAt': _iso(self.created_at)
        }


@dataclass
class Project:
    """Project brief with its skill requirements"""
    title: str
    description: str
    company: str
    category: str
    requirements: List[Requirement] = field(default_factory=list)
    budget: Optional[float] = None
    duration: Optional[int] = None  # weeks
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: str = 'open'
    priority: str = 'medium'
    assigned_employees: List[ProjectAssignment] = field(default_factory=list)
    comments: List[ProjectComment] = field(default_factory=list)
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def duration_days(self) -> Optional[int]:
        if self.start_date and self.end_date:
            delta = self.end_date - self.start_date
            return delta.days + (1 if delta.seconds or delta.microseconds else 0)
        if self.duration:
            return self.duration * 7
        return None

    @property
    def assigned_ids(self) -> List[int]:
        return [a.employee_id for a in self.assigned_employees]

    def to_dict(self):
        """Convert to dictionary for API response"""
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'company': self.company,
            'category': self.category,
            'requirements': [r.to_dict() for r in self.requirements],
            'budget': self.budget,
            'duration': self.duration,
            'durationDays': self.duration_days,
            'startDate': _iso(self.start_date),
            'endDate': _iso(self.end_date),
            'status': self.status,
            'priority': self.priority,
            'assignedEmployees': [a.to_dict() for a in self.assigned_employees],
            'comments': [c.to_dict() for c in self.comments],
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at)
        }


@dataclass
class Assessment:
    """Stored performance assessment; `scores` is a staffing.assessor.CategoryScores"""
    employee_id: int
    assessor_id: int
    scores: Any
    project_id: Optional[int] = None
    assessment_date: Optional[datetime] = None
    strengths: List[str] = field(default_factory=list)
    weaknesses: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    comments: Optional[str] = None
    status: str = 'draft'
    is_active: bool = True
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def overall_score(self) -> int:
        return self.scores.overall_score

    @property
    def score_level(self) -> str:
        return self.scores.score_level

    def to_dict(self):
        return {
            'id': self.id,
            'employeeId': self.employee_id,
            'assessorId': self.assessor_id,
            'projectId': self.project_id,
            'assessmentDate': _iso(self.assessment_date),
            'scores': self.scores.as_dict(),
            'overallScore': self.overall_score,
            'scoreLevel': self.score_level,
            'strengths': list(self.strengths),
            'weaknesses': list(self.weaknesses),
            'recommendations': list(self.recommendations),
            'comments': self.comments,
            'status': self.status,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at)
        }


@dataclass
class Admin:
    """Administrator account (the only authenticated principal)"""
    username: str
    first_name: str
    last_name: str
    email: str
    password_hash: str = ''
    role: str = 'admin'  # admin, super_admin
    permissions: List[str] = field(default_factory=list)
    is_active: bool = True
    last_login: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    def to_dict(self):
        """Password hash is never serialized"""
        return {
            'id': self.id,
            'username': self.username,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'role': 'admin',
            'adminRole': self.role,
            'permissions': list(self.permissions),
            'lastLogin': _iso(self.last_login)
        }

"""
Staffing service
Ties the matcher and assessor to persistence: every HTTP route and script
goes through here rather than talking to the database directly
"""
import logging
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Tuple

from database.db_manager import DatabaseManager
from database.models import (
    Employee, Project, Assessment, ProjectComment,
    AVAILABILITY_STATES, PROJECT_STATUSES, PROJECT_PRIORITIES
)
from .assessor import (
    CATEGORY_LABELS, ONBOARDING_CATEGORIES, CategoryScores, classify_score,
    rank_strengths_and_weaknesses, score_questionnaire
)
from .errors import NotFoundError, ValidationError
from .explanations import build_match_explanation
from .llm_integration import LLMManager
from .matcher import MatchResult, rank_candidates, exclude_assigned
from .skills import normalize_skills, normalize_requirements

logger = logging.getLogger(__name__)

EMPLOYEE_REQUIRED = ('first_name', 'last_name', 'email', 'position', 'department')
PROJECT_REQUIRED = ('title', 'description', 'company', 'category')


class StaffingService:
    """
    Matching, assignment and assessment workflows over one database
    """

    def __init__(
        self,
        db_manager: DatabaseManager,
        llm_manager: Optional[LLMManager] = None,
        enable_llm: bool = False
    ):
        self.db = db_manager
        self.enable_llm = enable_llm
        self._llm = llm_manager

    @property
    def llm(self) -> LLMManager:
        if self._llm is None:
            self._llm = LLMManager()
        return self._llm

    # ============================================
    # Employees
    # ============================================

    def create_employee(self, data: Dict[str, Any]) -> Employee:
        data = dict(data)
        self._apply_self_assessment(data)
        self._require(data, EMPLOYEE_REQUIRED)
        self._validate_employee_fields(data)
        data['skills'] = normalize_skills(data.get('skills') or [])

        employee_id = self.db.insert_employee(Employee(**data))
        logger.info(f"Created employee {employee_id} ({data['email']})")
        return self.db.get_employee_by_id(employee_id)

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.db.get_employee_by_id(employee_id)
        if not employee:
            raise NotFoundError('Employee', employee_id)
        return employee

    def update_employee(self, employee_id: int, changes: Dict[str, Any]) -> Employee:
        changes = dict(changes)
        self._apply_self_assessment(changes)
        self._require(changes, tuple(f for f in EMPLOYEE_REQUIRED if f in changes))
        self._validate_employee_fields(changes)
        if 'skills' in changes:
            changes['skills'] = normalize_skills(changes['skills'] or [])
        return self.db.update_employee(employee_id, changes)

    def update_employee_skills(self, employee_id: int, skills: List[Any]) -> Employee:
        """Replace the whole skill set"""
        return self.db.update_employee(employee_id, {'skills': normalize_skills(skills)})

    def delete_employee(self, employee_id: int):
        self.db.deactivate_employee(employee_id)
        logger.info(f"Deactivated employee {employee_id}")

    # ============================================
    # Projects
    # ============================================

    def create_project(self, data: Dict[str, Any]) -> Project:
        data = dict(data)
        self._require(data, PROJECT_REQUIRED)
        self._validate_project_fields(data)
        data['requirements'] = normalize_requirements(data.get('requirements') or [])

        project_id = self.db.insert_project(Project(**data))
        logger.info(f"Created project {project_id} ({data['title']})")
        return self.db.get_project_by_id(project_id)

    def get_project(self, project_id: int) -> Project:
        project = self.db.get_project_by_id(project_id)
        if not project:
            raise NotFoundError('Project', project_id)
        return project

    def update_project(self, project_id: int, changes: Dict[str, Any]) -> Project:
        changes = dict(changes)
        self._require(changes, tuple(f for f in PROJECT_REQUIRED if f in changes))
        self._validate_project_fields(changes)
        if 'requirements' in changes:
            changes['requirements'] = normalize_requirements(changes['requirements'] or [])
        return self.db.update_project(project_id, changes)

    def delete_project(self, project_id: int):
        self.db.deactivate_project(project_id)
        logger.info(f"Deactivated project {project_id}")

    def add_comment(self, project_id: int, text: str, author: Optional[str] = None) -> ProjectComment:
        if not text or not text.strip():
            raise ValidationError("Comment text is required", field='text')
        return self.db.add_project_comment(project_id, text.strip(), author or 'Admin')

    # ============================================
    # Matching and assignment
    # ============================================

    def find_matches(self, project_id: int) -> Tuple[Project, List[MatchResult]]:
        """
        Rank every active employee against the project's requirements,
        leaving out employees already assigned to it
        """
        project = self.get_project(project_id)
        pool = self.db.list_active_employees()
        matches = rank_candidates(project.requirements, pool)
        matches = exclude_assigned(matches, project.assigned_ids)
        logger.debug(f"Project {project_id}: {len(matches)} candidates from pool of {len(pool)}")
        return project, matches

    def explain_match(self, project_id: int, employee_id: int) -> Dict[str, Any]:
        project = self.get_project(project_id)
        employee = self.get_employee(employee_id)

        explanation = build_match_explanation(project, employee)
        if self.enable_llm:
            explanation = self.llm.rephrase_explanation(explanation, project.title)

        return {
            'explanation': explanation,
            'project': project.to_dict(),
            'employee': employee.to_dict()
        }

    def assign_employee(self, project_id: int, employee_id: int, role: str) -> Project:
        if not role or not role.strip():
            raise ValidationError("Role is required", field='role')
        project = self.db.assign_employee(project_id, employee_id, role.strip())
        logger.info(f"Assigned employee {employee_id} to project {project_id} as {role.strip()}")
        return project

    def remove_employee(self, project_id: int, employee_id: int) -> Project:
        project = self.db.remove_employee(project_id, employee_id)
        logger.info(f"Removed employee {employee_id} from project {project_id}")
        return project

    # ============================================
    # Assessments
    # ============================================

    def create_assessment(
        self,
        assessor_id: int,
        employee_id: int,
        scores: Dict[str, Any],
        project_id: Optional[int] = None,
        strengths: Optional[List[str]] = None,
        weaknesses: Optional[List[str]] = None,
        recommendations: Optional[List[str]] = None,
        comments: Optional[str] = None
    ) -> Assessment:
        """
        Record a new assessment in status 'submitted'.
        Without explicit strengths/weaknesses the top and bottom three
        categories are used.
        """
        if scores is None:
            raise ValidationError("Employee ID and scores are required", field='scores')
        category_scores = CategoryScores.from_mapping(scores)

        self.get_employee(employee_id)
        if project_id is not None:
            self.get_project(project_id)

        if strengths is None or weaknesses is None:
            top, bottom = rank_strengths_and_weaknesses(category_scores.as_dict())
            if strengths is None:
                strengths = [CATEGORY_LABELS[key] for key in top]
            if weaknesses is None:
                weaknesses = [CATEGORY_LABELS[key] for key in bottom]

        assessment = Assessment(
            employee_id=employee_id,
            assessor_id=assessor_id,
            project_id=project_id,
            scores=category_scores,
            strengths=list(strengths),
            weaknesses=list(weaknesses),
            recommendations=list(recommendations or []),
            comments=comments,
            status='submitted'
        )
        assessment_id = self.db.insert_assessment(assessment)
        logger.info(
            f"Assessment {assessment_id} for employee {employee_id}: "
            f"{category_scores.overall_score} ({category_scores.score_level})"
        )
        return self.db.get_assessment_by_id(assessment_id)

    def get_assessment(self, assessment_id: int) -> Assessment:
        assessment = self.db.get_assessment_by_id(assessment_id)
        if not assessment:
            raise NotFoundError('Assessment', assessment_id)
        return assessment

    def update_assessment(self, assessment_id: int, changes: Dict[str, Any]) -> Assessment:
        """Partial update; rejected once the assessment is reviewed or approved"""
        changes = dict(changes)
        score_changes = changes.pop('scores', None)
        if changes.get('project_id') is not None:
            self.get_project(changes['project_id'])
        return self.db.update_assessment(assessment_id, score_changes, changes)

    def advance_assessment(self, assessment_id: int, target: Optional[str] = None) -> Assessment:
        assessment = self.db.advance_assessment(assessment_id, target)
        logger.info(f"Assessment {assessment_id} moved to {assessment.status}")
        return assessment

    def delete_assessment(self, assessment_id: int):
        """Soft delete works in every status"""
        self.db.deactivate_assessment(assessment_id)
        logger.info(f"Deactivated assessment {assessment_id}")

    def employee_score_summary(self, employee_id: int) -> Dict[str, Any]:
        """Average category scores across an employee's active assessments"""
        employee = self.get_employee(employee_id)
        assessments, total = self.db.list_assessments(employee_id=employee_id, page=1, limit=1)
        averages = self.db.get_average_scores(employee_id)

        summary = {
            'employee': employee.summary(),
            'assessmentsCount': total,
            'averages': averages,
            'latest': assessments[0].to_dict() if assessments else None
        }
        if averages:
            summary['averageLevel'] = classify_score(averages['avgOverallScore'])
        return summary

    # ============================================
    # Helper Methods
    # ============================================

    def _require(self, data: Dict[str, Any], fields: Tuple[str, ...]):
        for name in fields:
            value = data.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Missing required field: {name}", field=name)

    def _apply_self_assessment(self, data: Dict[str, Any]):
        """
        Onboarding questionnaire answers ('assessment_answers': category ->
        list of 1-5 answers) set the performance score to the overall
        percentage and fill in strengths/weaknesses left empty.
        """
        answers = data.pop('assessment_answers', None)
        if answers is None:
            return
        if not isinstance(answers, Mapping):
            raise ValidationError("Assessment answers must be an object", field='assessment_answers')

        categories = list(ONBOARDING_CATEGORIES)
        result = score_questionnaire(answers, categories)
        data['performance_score'] = result['overall']

        top, bottom = rank_strengths_and_weaknesses(result, keys=categories)
        if not data.get('strengths'):
            data['strengths'] = [ONBOARDING_CATEGORIES[key] for key in top]
        if not data.get('weaknesses'):
            data['weaknesses'] = [ONBOARDING_CATEGORIES[key] for key in bottom]

    def _validate_employee_fields(self, data: Dict[str, Any]):
        if 'email' in data and '@' not in (data['email'] or ''):
            raise ValidationError("Please enter a valid email", field='email')
        if 'availability' in data and data['availability'] not in AVAILABILITY_STATES:
            raise ValidationError(
                f"Field 'availability' must be one of {', '.join(AVAILABILITY_STATES)}",
                field='availability'
            )
        if 'performance_score' in data:
            score = data['performance_score']
            if isinstance(score, bool) or not isinstance(score, Real) or not 0 <= score <= 100:
                raise ValidationError(
                    "Field 'performance_score' must be a number between 0 and 100",
                    field='performance_score'
                )

    def _validate_project_fields(self, data: Dict[str, Any]):
        if 'status' in data and data['status'] not in PROJECT_STATUSES:
            raise ValidationError(
                f"Field 'status' must be one of {', '.join(PROJECT_STATUSES)}", field='status'
            )
        if 'priority' in data and data['priority'] not in PROJECT_PRIORITIES:
            raise ValidationError(
                f"Field 'priority' must be one of {', '.join(PROJECT_PRIORITIES)}", field='priority'
            )
        if data.get('budget') is not None and data['budget'] < 0:
            raise ValidationError("Field 'budget' must not be negative", field='budget')
        if data.get('duration') is not None and data['duration'] < 1:
            raise ValidationError("Field 'duration' must be at least 1 week", field='duration')
        start, end = data.get('start_date'), data.get('end_date')
        if start and end and end < start:
            raise ValidationError("End date must be after start date", field='end_date')

"""
Tests for StaffingService workflows
"""
import pytest

from staffing.errors import (
    AlreadyAssignedError, NotFoundError, StateConflictError, ValidationError
)
from staffing.llm_integration import LLMError, LLMManager, LLMProvider
from staffing.service import StaffingService

from conftest import ALL_SEVENS


class StubProvider(LLMProvider):
    def __init__(self, content=None, error=None):
        self.content = content
        self.error = error
        self.calls = []

    def generate(self, messages):
        self.calls.append(messages)
        if self.error:
            raise self.error
        return {'content': self.content, 'finish_reason': 'stop'}


def employee_data(email, skills=None, **extra):
    data = {
        "first_name": "Sam",
        "last_name": email.split("@")[0].title(),
        "email": email,
        "position": "Developer",
        "department": "Engineering",
        "skills": skills or [],
    }
    data.update(extra)
    return data


def project_data(requirements, **extra):
    data = {
        "title": "Portal",
        "description": "Customer portal",
        "company": "Acme",
        "category": "Web",
        "requirements": requirements,
    }
    data.update(extra)
    return data


def test_create_employee_normalizes_skills(service):
    employee = service.create_employee(employee_data(
        "sam@example.com", ["Python", {"name": "React", "level": 8}, {"name": "Python", "level": 9}]
    ))

    assert [(s.name, s.level) for s in employee.skills] == [("Python", 9), ("React", 8)]
    assert employee.availability == "available"
    assert employee.performance_score == 75


def test_create_employee_validates_fields(service):
    with pytest.raises(ValidationError) as exc:
        service.create_employee(employee_data("sam@example.com", availability="on leave"))
    assert exc.value.field == "availability"

    with pytest.raises(ValidationError) as exc:
        service.create_employee(employee_data("not-an-email"))
    assert exc.value.field == "email"

    data = employee_data("sam@example.com")
    del data["department"]
    with pytest.raises(ValidationError) as exc:
        service.create_employee(data)
    assert exc.value.field == "department"


def test_update_cannot_blank_required_field(service):
    employee = service.create_employee(employee_data("sam@example.com"))
    with pytest.raises(ValidationError):
        service.update_employee(employee.id, {"first_name": " "})


def test_find_matches_ranks_and_excludes_assigned(service):
    strong = service.create_employee(employee_data("strong@example.com", [{"name": "Python", "level": 9}],
                                                   availability="busy"))
    partial = service.create_employee(employee_data("partial@example.com", [{"name": "Python", "level": 4}]))
    nobody = service.create_employee(employee_data("nobody@example.com"))
    assigned = service.create_employee(employee_data("assigned@example.com", [{"name": "Python", "level": 8}]))
    project = service.create_project(project_data([{"skill": "Python", "level": 8}]))
    service.assign_employee(project.id, assigned.id, "Developer")

    _, matches = service.find_matches(project.id)

    assert [(m.employee.id, m.match_score) for m in matches] == [
        (strong.id, 100), (partial.id, 70), (nobody.id, 20)
    ]


def test_find_matches_skips_inactive_employees(service):
    gone = service.create_employee(employee_data("gone@example.com", [{"name": "Python", "level": 8}]))
    service.delete_employee(gone.id)
    project = service.create_project(project_data([{"skill": "Python", "level": 8}]))

    _, matches = service.find_matches(project.id)
    assert matches == []


def test_find_matches_unknown_project(service):
    with pytest.raises(NotFoundError):
        service.find_matches(404)


def test_assign_twice_raises(service):
    employee = service.create_employee(employee_data("sam@example.com"))
    project = service.create_project(project_data([]))
    service.assign_employee(project.id, employee.id, "Developer")

    with pytest.raises(AlreadyAssignedError):
        service.assign_employee(project.id, employee.id, "Developer")


def test_assign_requires_role(service):
    with pytest.raises(ValidationError):
        service.assign_employee(1, 1, "  ")


def test_project_requirements_validated(service):
    with pytest.raises(ValidationError) as exc:
        service.create_project(project_data([{"skill": "Python", "level": 12}]))
    assert exc.value.field == "level"

    with pytest.raises(ValidationError) as exc:
        service.create_project(project_data([], status="paused"))
    assert exc.value.field == "status"


def test_create_assessment_derives_strengths(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    scores = dict(ALL_SEVENS, creativity=10, leadership=9, teamwork=2)

    assessment = service.create_assessment(admin.id, employee.id, scores)

    assert assessment.status == "submitted"
    assert assessment.overall_score == 70
    assert assessment.strengths == ["Creativity", "Leadership", "Technical Skills"]
    assert assessment.weaknesses == ["Teamwork", "Technical Skills", "Communication"]


def test_create_assessment_keeps_explicit_lists(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    assessment = service.create_assessment(admin.id, employee.id, ALL_SEVENS,
                                           strengths=["Mentoring"], weaknesses=[])
    assert assessment.strengths == ["Mentoring"]
    assert assessment.weaknesses == []


def test_create_assessment_rejects_bad_input(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))

    with pytest.raises(ValidationError) as exc:
        service.create_assessment(admin.id, employee.id, dict(ALL_SEVENS, teamwork=11))
    assert exc.value.field == "teamwork"

    with pytest.raises(NotFoundError):
        service.create_assessment(admin.id, 999, ALL_SEVENS)

    with pytest.raises(NotFoundError):
        service.create_assessment(admin.id, employee.id, ALL_SEVENS, project_id=999)


def test_update_assessment_lifecycle(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    assessment = service.create_assessment(admin.id, employee.id, ALL_SEVENS)

    updated = service.update_assessment(assessment.id, {"scores": {"leadership": 10, "teamwork": 10},
                                                        "recommendations": ["Lead a squad"]})
    assert updated.overall_score == 78
    assert updated.recommendations == ["Lead a squad"]

    assert service.advance_assessment(assessment.id).status == "reviewed"

    with pytest.raises(StateConflictError) as exc:
        service.update_assessment(assessment.id, {"comments": "late edit"})
    assert exc.value.message == f"Cannot update assessment {assessment.id} that has been reviewed"

    service.delete_assessment(assessment.id)
    with pytest.raises(NotFoundError):
        service.get_assessment(assessment.id)


def test_update_assessment_rejects_status_field(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    assessment = service.create_assessment(admin.id, employee.id, ALL_SEVENS)

    with pytest.raises(ValidationError):
        service.update_assessment(assessment.id, {"status": "approved"})


def test_employee_score_summary(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    service.create_assessment(admin.id, employee.id, ALL_SEVENS)
    service.create_assessment(admin.id, employee.id, {k: 9 for k in ALL_SEVENS})

    summary = service.employee_score_summary(employee.id)

    assert summary["assessmentsCount"] == 2
    assert summary["averages"]["avgOverallScore"] == 80
    assert summary["averageLevel"] == "Very Good"
    assert summary["latest"] is not None


def test_explain_match_uses_template_by_default(service):
    employee = service.create_employee(employee_data("sam@example.com", [{"name": "Python", "level": 6}]))
    project = service.create_project(project_data([{"skill": "Python", "level": 8}, {"skill": "SQL", "level": 5}]))

    result = service.explain_match(project.id, employee.id)

    assert result["explanation"].startswith("Sam Sam is a 50% match for this project.")
    assert result["employee"]["id"] == employee.id


def test_explain_match_rephrased_by_llm(db):
    provider = StubProvider(content="Sam knows Python and is free now.")
    service = StaffingService(db, llm_manager=LLMManager(provider), enable_llm=True)
    employee = service.create_employee(employee_data("sam@example.com"))
    project = service.create_project(project_data([{"skill": "Python", "level": 8}]))

    result = service.explain_match(project.id, employee.id)

    assert result["explanation"] == "Sam knows Python and is free now."
    assert "Portal" in provider.calls[0][1]["content"]


def test_explain_match_falls_back_when_llm_fails(db):
    provider = StubProvider(error=LLMError("connection refused"))
    service = StaffingService(db, llm_manager=LLMManager(provider), enable_llm=True)
    employee = service.create_employee(employee_data("sam@example.com"))
    project = service.create_project(project_data([{"skill": "Python", "level": 8}]))

    result = service.explain_match(project.id, employee.id)

    assert result["explanation"].startswith("Sam Sam is a 0% match")


def test_create_employee_from_onboarding_answers(service):
    answers = {
        "technical": [5, 5, 4, 4],
        "communication": [3, 3],
        "leadership": [4],
        "problemSolving": [5, None],
        "teamwork": [],
    }
    employee = service.create_employee(employee_data("sam@example.com", assessment_answers=answers))

    assert employee.performance_score == 66
    assert employee.strengths == ["Problem Solving", "Technical Skills", "Leadership"]
    assert employee.weaknesses == ["Teamwork", "Communication", "Leadership"]


def test_onboarding_answers_keep_explicit_strengths(service):
    employee = service.create_employee(employee_data(
        "sam@example.com", strengths=["Mentoring"], assessment_answers={"technical": [3]}
    ))

    assert employee.performance_score == 12
    assert employee.strengths == ["Mentoring"]
    assert employee.weaknesses[0] == "Communication"


def test_update_employee_rescores_onboarding_answers(service):
    employee = service.create_employee(employee_data("sam@example.com", performance_score=90))

    updated = service.update_employee(employee.id, {"assessment_answers": {"technical": [2]}})

    assert updated.performance_score == 8
    assert updated.strengths[0] == "Technical Skills"


def test_onboarding_answers_validated(service):
    with pytest.raises(ValidationError) as exc:
        service.create_employee(employee_data("sam@example.com", assessment_answers={"teamwork": [6]}))
    assert exc.value.field == "teamwork"

    with pytest.raises(ValidationError) as exc:
        service.create_employee(employee_data("sam@example.com", assessment_answers=[4, 5]))
    assert exc.value.field == "assessment_answers"


def test_approved_assessment_is_locked_but_deletable(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    assessment = service.create_assessment(admin.id, employee.id, ALL_SEVENS)
    service.advance_assessment(assessment.id)
    assert service.advance_assessment(assessment.id).status == "approved"

    with pytest.raises(StateConflictError):
        service.update_assessment(assessment.id, {"scores": {"leadership": 10}})
    with pytest.raises(StateConflictError):
        service.update_assessment(assessment.id, {"comments": "late edit"})
    assert service.get_assessment(assessment.id).overall_score == 70

    service.delete_assessment(assessment.id)
    deleted = service.db.get_assessment_by_id(assessment.id, include_inactive=True)
    assert deleted.is_active is False
    assert deleted.status == "approved"
    assert deleted.overall_score == 70


def test_score_summary_level_follows_average_overall(service, admin):
    employee = service.create_employee(employee_data("sam@example.com"))
    service.create_assessment(admin.id, employee.id, dict({k: 8 for k in ALL_SEVENS}, creativity=7.2))
    service.create_assessment(admin.id, employee.id, {k: 8 for k in ALL_SEVENS})

    summary = service.employee_score_summary(employee.id)

    assert summary["averages"]["avgOverallScore"] == 79.5
    assert summary["averageLevel"] == "Good"

"""
Tests for the SQLite persistence layer
"""
import pytest

from database.models import Assessment, Skill
from staffing.assessor import CategoryScores
from staffing.errors import (
    AlreadyAssignedError, NotFoundError, StateConflictError, ValidationError
)

from conftest import ALL_SEVENS, make_employee, make_project


def test_employee_round_trip(db):
    employee_id = db.insert_employee(make_employee(
        "Jane.Doe@Example.com", [("Python", 8), ("SQL", 6)], performance_score=91
    ))

    employee = db.get_employee_by_id(employee_id)

    assert employee.email == "jane.doe@example.com"
    assert [(s.name, s.level) for s in employee.skills] == [("Python", 8), ("SQL", 6)]
    assert employee.performance_score == 91
    assert employee.created_at is not None
    assert db.get_employee_by_email("JANE.DOE@example.com").id == employee_id


def test_duplicate_email_rejected(db):
    db.insert_employee(make_employee("dup@example.com"))
    with pytest.raises(ValidationError) as exc:
        db.insert_employee(make_employee("dup@example.com"))
    assert exc.value.field == "email"


def test_list_employees_filters_and_paginates(db):
    for i in range(5):
        db.insert_employee(make_employee(f"dev{i}@example.com", department="Engineering"))
    db.insert_employee(make_employee("ana@example.com", department="Analytics", position="Analyst"))

    page, total = db.list_employees(department="Engineering", sort_by="email", page=2, limit=2)
    assert total == 5
    assert [e.email for e in page] == ["dev2@example.com", "dev3@example.com"]

    found, total = db.list_employees(search="Analyst")
    assert total == 1
    assert found[0].email == "ana@example.com"


def test_unknown_sort_field_falls_back_to_newest_first(db):
    first = db.insert_employee(make_employee("a@example.com"))
    second = db.insert_employee(make_employee("b@example.com"))

    employees, _ = db.list_employees(sort_by="password")
    assert [e.id for e in employees] == [second, first]


def test_update_employee_replaces_skills(db):
    employee_id = db.insert_employee(make_employee("a@example.com", [("Python", 8)]))

    updated = db.update_employee(employee_id, {"availability": "busy",
                                               "skills": [Skill("Go", 7), Skill("Rust", 4)]})

    assert updated.availability == "busy"
    assert [s.name for s in updated.skills] == ["Go", "Rust"]


def test_update_employee_rejects_unknown_fields(db):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    with pytest.raises(ValidationError):
        db.update_employee(employee_id, {"password": "x"})


def test_soft_delete_hides_employee(db):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    db.deactivate_employee(employee_id)

    assert db.get_employee_by_id(employee_id) is None
    assert db.get_employee_by_id(employee_id, include_inactive=True).is_active is False
    assert db.list_active_employees() == []

    with pytest.raises(NotFoundError):
        db.deactivate_employee(999)


def test_active_pool_is_ordered_by_id(db):
    ids = [db.insert_employee(make_employee(f"{n}@example.com")) for n in ("c", "a", "b")]
    assert [e.id for e in db.list_active_employees()] == sorted(ids)


def test_project_round_trip(db):
    project_id = db.insert_project(make_project([("React", 7), ("React", 9)], budget=5000.0, duration=4))

    project = db.get_project_by_id(project_id)

    assert [(r.skill, r.level) for r in project.requirements] == [("React", 7), ("React", 9)]
    assert project.status == "open"
    assert project.duration_days == 28


def test_assign_and_remove_flip_status(db):
    project_id = db.insert_project(make_project([("Python", 5)]))
    first = db.insert_employee(make_employee("a@example.com"))
    second = db.insert_employee(make_employee("b@example.com"))

    project = db.assign_employee(project_id, first, "Developer")
    assert project.status == "in-progress"
    assert project.assigned_ids == [first]
    assert db.get_employee_by_id(first).active_projects_count == 1

    db.assign_employee(project_id, second, "Tester")

    project = db.remove_employee(project_id, first)
    assert project.status == "in-progress"
    assert project.assigned_ids == [second]

    involvement = db.get_employee_by_id(first).projects[0]
    assert involvement.is_active is False
    assert involvement.end_date is not None

    project = db.remove_employee(project_id, second)
    assert project.status == "open"
    assert project.assigned_ids == []


def test_assign_keeps_non_open_status(db):
    project_id = db.insert_project(make_project(status="completed"))
    employee_id = db.insert_employee(make_employee("a@example.com"))

    assert db.assign_employee(project_id, employee_id, "Dev").status == "completed"


def test_duplicate_assignment_rejected(db):
    project_id = db.insert_project(make_project())
    employee_id = db.insert_employee(make_employee("a@example.com"))
    db.assign_employee(project_id, employee_id, "Dev")

    with pytest.raises(AlreadyAssignedError):
        db.assign_employee(project_id, employee_id, "Lead")

    assert len(db.get_project_by_id(project_id).assigned_employees) == 1


def test_assign_unknown_entities(db):
    project_id = db.insert_project(make_project())
    with pytest.raises(NotFoundError) as exc:
        db.assign_employee(project_id, 42, "Dev")
    assert exc.value.entity == "Employee"

    with pytest.raises(NotFoundError):
        db.assign_employee(42, 1, "Dev")


def test_project_comments_and_stats(db):
    project_id = db.insert_project(make_project(budget=100.0, category="Web"))
    db.insert_project(make_project(title="Other", budget=300.0, category="Data"))

    comment = db.add_project_comment(project_id, "Kickoff on Monday")
    assert comment.author == "Admin"
    assert db.get_project_by_id(project_id).comments[0].text == "Kickoff on Monday"

    stats = db.get_project_statistics()
    assert stats["totalProjects"] == 2
    assert stats["openProjects"] == 2
    assert stats["avgBudget"] == 200.0
    assert stats["categoryStats"] == [{"category": "Data", "count": 1}, {"category": "Web", "count": 1}]


def _assessment(employee_id, assessor_id, status="submitted", **scores):
    values = dict(ALL_SEVENS)
    values.update(scores)
    return Assessment(
        employee_id=employee_id,
        assessor_id=assessor_id,
        scores=CategoryScores.from_mapping(values),
        status=status
    )


def test_assessment_round_trip(db, admin):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    assessment_id = db.insert_assessment(_assessment(employee_id, admin.id, teamwork=9.5))

    assessment = db.get_assessment_by_id(assessment_id)

    assert assessment.scores["teamwork"] == 9.5
    assert assessment.scores["communication"] == 7
    assert assessment.overall_score == 73
    assert assessment.status == "submitted"


def test_assessment_update_recomputes_overall(db, admin):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    assessment_id = db.insert_assessment(_assessment(employee_id, admin.id))

    updated = db.update_assessment(assessment_id, {"leadership": 10, "teamwork": 10},
                                   {"comments": "Strong quarter"})

    assert updated.overall_score == 78
    assert updated.comments == "Strong quarter"


def test_locked_assessment_is_not_modified(db, admin):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    assessment_id = db.insert_assessment(_assessment(employee_id, admin.id, status="reviewed"))

    with pytest.raises(StateConflictError):
        db.update_assessment(assessment_id, {"leadership": 1})

    assert db.get_assessment_by_id(assessment_id).overall_score == 70


def test_invalid_score_update_leaves_record_untouched(db, admin):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    assessment_id = db.insert_assessment(_assessment(employee_id, admin.id))

    with pytest.raises(ValidationError):
        db.update_assessment(assessment_id, {"leadership": 15}, {"comments": "nope"})

    stored = db.get_assessment_by_id(assessment_id)
    assert stored.scores["leadership"] == 7
    assert stored.comments is None


def test_advance_and_soft_delete(db, admin):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    assessment_id = db.insert_assessment(_assessment(employee_id, admin.id))

    assert db.advance_assessment(assessment_id).status == "reviewed"
    with pytest.raises(ValidationError):
        db.advance_assessment(assessment_id, "reviewed")
    assert db.advance_assessment(assessment_id, "approved").status == "approved"

    # deletion ignores the lock
    db.deactivate_assessment(assessment_id)
    assert db.get_assessment_by_id(assessment_id) is None


def test_average_scores_and_stats(db, admin):
    employee_id = db.insert_employee(make_employee("a@example.com"))
    other_id = db.insert_employee(make_employee("b@example.com"))
    db.insert_assessment(_assessment(employee_id, admin.id))
    db.insert_assessment(_assessment(employee_id, admin.id, status="approved", **{k: 9 for k in ALL_SEVENS}))
    db.insert_assessment(_assessment(other_id, admin.id, **{k: 1 for k in ALL_SEVENS}))

    averages = db.get_average_scores(employee_id)
    assert averages["avgTechnicalSkills"] == 8
    assert averages["avgOverallScore"] == 80

    assert db.get_average_scores(999) == {}

    stats = db.get_assessment_statistics()
    assert stats["totalAssessments"] == 3
    assert stats["submittedAssessments"] == 2
    assert stats["approvedAssessments"] == 1

    listed, total = db.list_assessments(employee_id=employee_id, status="approved")
    assert total == 1
    assert listed[0].overall_score == 90


def test_admin_lookup_and_login_stamp(db, admin):
    stored = db.get_admin_by_username("admin")
    assert stored.id == admin.id
    assert stored.last_login is None
    assert "passwordHash" not in stored.to_dict()

    db.record_admin_login(admin.id)
    assert db.get_admin_by_id(admin.id).last_login is not None

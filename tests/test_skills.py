"""
Tests for skill and requirement normalization
"""
import pytest

from database.models import Skill, Requirement
from staffing.errors import ValidationError
from staffing.skills import (
    normalize_skill, normalize_skills, normalize_requirement,
    normalize_requirements, parse_skill_list
)


def test_bare_name_gets_defaults():
    assert normalize_skill("Python") == Skill("Python", 5, "General")
    assert normalize_skill("  Go ") == Skill("Go", 5, "General")


def test_mapping_forms():
    assert normalize_skill({"name": "React", "level": 8, "category": "Frontend"}) == Skill("React", 8, "Frontend")
    assert normalize_skill({"name": "React"}) == Skill("React", 5, "General")
    assert normalize_skill({"name": "React", "level": 6.0}) == Skill("React", 6, "General")


@pytest.mark.parametrize("level", [0, 11, 5.5, True, "7"])
def test_bad_levels_rejected(level):
    with pytest.raises(ValidationError) as exc:
        normalize_skill({"name": "React", "level": level})
    assert exc.value.field == "level"


def test_empty_name_rejected():
    with pytest.raises(ValidationError) as exc:
        normalize_skill({"name": "  ", "level": 5})
    assert exc.value.field == "name"


def test_unsupported_type_rejected():
    with pytest.raises(ValidationError):
        normalize_skill(42)


def test_duplicates_keep_first_position_last_value():
    skills = normalize_skills([
        "Python",
        {"name": "React", "level": 7},
        {"name": "Python", "level": 9},
        "",
        None,
    ])
    assert skills == [Skill("Python", 9, "General"), Skill("React", 7, "General")]


def test_requirements_keep_order_and_duplicates():
    requirements = normalize_requirements([
        {"skill": "Python", "level": 4},
        {"skill": "SQL", "level": 6, "priority": "high"},
        {"skill": "Python", "level": 8},
    ])
    assert requirements == [
        Requirement("Python", 4, "medium"),
        Requirement("SQL", 6, "high"),
        Requirement("Python", 8, "medium"),
    ]


def test_requirement_needs_level():
    with pytest.raises(ValidationError) as exc:
        normalize_requirement({"skill": "Python"})
    assert exc.value.field == "level"


def test_requirement_priority_checked():
    with pytest.raises(ValidationError) as exc:
        normalize_requirement({"skill": "Python", "level": 5, "priority": "urgent"})
    assert exc.value.field == "priority"


def test_parse_skill_list():
    assert parse_skill_list("Python:8; React:6, Figma") == [
        Skill("Python", 8, "General"),
        Skill("React", 6, "General"),
        Skill("Figma", 5, "General"),
    ]
    assert parse_skill_list("") == []


def test_parse_skill_list_rejects_bad_level():
    with pytest.raises(ValidationError):
        parse_skill_list("Python:expert")

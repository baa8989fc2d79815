"""
Canonical skill and requirement representation

Skills arrive from the dashboard either as bare names ("Python") or as
{name, level, category} records. Everything is converted to Skill /
Requirement here, before it reaches the matcher.
"""
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Union

from database.models import Skill, Requirement, REQUIREMENT_PRIORITIES
from .errors import ValidationError

DEFAULT_SKILL_LEVEL = 5
DEFAULT_SKILL_CATEGORY = 'General'
MIN_LEVEL = 1
MAX_LEVEL = 10

RawSkill = Union[str, Mapping[str, Any], Skill]
RawRequirement = Union[Mapping[str, Any], Requirement]


def _clean_name(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Field '{field_name}' must be a non-empty string", field=field_name)
    return value.strip()


def _clean_level(value: Any, field_name: str) -> int:
    # bool is an int subclass; a checkbox value is never a level
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"Field '{field_name}' must be a number", field=field_name)
    if not MIN_LEVEL <= value <= MAX_LEVEL or value != int(value):
        raise ValidationError(
            f"Field '{field_name}' must be an integer between {MIN_LEVEL} and {MAX_LEVEL}",
            field=field_name
        )
    return int(value)


def normalize_skill(raw: RawSkill) -> Skill:
    """Convert a bare name, a mapping, or a Skill into a Skill"""
    if isinstance(raw, Skill):
        return Skill(
            name=_clean_name(raw.name, 'name'),
            level=_clean_level(raw.level, 'level'),
            category=raw.category or DEFAULT_SKILL_CATEGORY
        )

    if isinstance(raw, str):
        return Skill(name=_clean_name(raw, 'name'), level=DEFAULT_SKILL_LEVEL,
                     category=DEFAULT_SKILL_CATEGORY)

    if isinstance(raw, Mapping):
        level = raw.get('level')
        category = raw.get('category') or DEFAULT_SKILL_CATEGORY
        if not isinstance(category, str):
            raise ValidationError("Field 'category' must be a string", field='category')
        return Skill(
            name=_clean_name(raw.get('name'), 'name'),
            level=DEFAULT_SKILL_LEVEL if level is None else _clean_level(level, 'level'),
            category=category
        )

    raise ValidationError(f"Unsupported skill representation: {type(raw).__name__}", field='skills')


def normalize_skills(raws: Iterable[RawSkill]) -> List[Skill]:
    """
    Normalize a skill list into a set keyed by name.
    Later duplicates overwrite earlier ones but keep the first position.
    """
    by_name: Dict[str, Skill] = {}
    for raw in raws or []:
        if raw is None or raw == '':
            continue
        skill = normalize_skill(raw)
        by_name[skill.name] = skill
    return list(by_name.values())


def normalize_requirement(raw: RawRequirement) -> Requirement:
    if isinstance(raw, Requirement):
        raw = raw.to_dict()
    if not isinstance(raw, Mapping):
        raise ValidationError("Each requirement must be an object", field='requirements')

    priority = raw.get('priority') or 'medium'
    if priority not in REQUIREMENT_PRIORITIES:
        raise ValidationError(
            f"Field 'priority' must be one of {', '.join(REQUIREMENT_PRIORITIES)}",
            field='priority'
        )
    if raw.get('level') is None:
        raise ValidationError("Missing required field: level", field='level')

    return Requirement(
        skill=_clean_name(raw.get('skill'), 'skill'),
        level=_clean_level(raw.get('level'), 'level'),
        priority=priority
    )


def normalize_requirements(raws: Iterable[RawRequirement]) -> List[Requirement]:
    """Order is preserved and duplicates are kept"""
    return [normalize_requirement(r) for r in raws or []]


def parse_skill_list(text: str) -> List[Skill]:
    """
    Parse the spreadsheet form "Python:8; React:6; Figma".
    Entries without a level get the default level.
    """
    raws: List[RawSkill] = []
    for chunk in (text or '').replace(',', ';').split(';'):
        chunk = chunk.strip()
        if not chunk:
            continue
        if ':' in chunk:
            name, level = chunk.rsplit(':', 1)
            try:
                parsed_level = int(level.strip())
            except ValueError:
                raise ValidationError(f"Invalid level for skill '{name.strip()}': {level.strip()}",
                                      field='level')
            raws.append({'name': name, 'level': parsed_level})
        else:
            raws.append(chunk)
    return normalize_skills(raws)

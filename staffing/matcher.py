"""
Employee-to-project matching

Scores every employee in a pool against a project's skill requirements
and ranks them. Pure functions: nothing here touches the database or
mutates the records passed in.
"""
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence

from database.models import Employee, Requirement

AVAILABILITY_BONUS = 0.2


@dataclass(frozen=True)
class PresentSkill:
    name: str
    employee_level: int
    required_level: int

    def to_dict(self):
        return {
            'name': self.name,
            'employeeLevel': self.employee_level,
            'requiredLevel': self.required_level
        }


@dataclass(frozen=True)
class MissingSkill:
    name: str
    required_level: int

    def to_dict(self):
        return {'name': self.name, 'requiredLevel': self.required_level}


@dataclass(frozen=True)
class MatchResult:
    """How well one employee fits a project"""
    employee: Employee
    match_score: int                  # 0..100
    matched_skills: int
    total_required_skills: int
    present_skills: List[PresentSkill] = field(default_factory=list)
    missing_skills: List[MissingSkill] = field(default_factory=list)
    active_projects_count: int = 0

    def to_dict(self):
        return {
            'employee': self.employee.summary(),
            'matchScore': self.match_score,
            'matchedSkills': self.matched_skills,
            'totalRequiredSkills': self.total_required_skills,
            'presentSkills': [s.to_dict() for s in self.present_skills],
            'missingSkills': [s.to_dict() for s in self.missing_skills],
            'activeProjectsCount': self.active_projects_count
        }


def required_levels(requirements: Sequence[Requirement]) -> Dict[str, int]:
    """skill name -> required level; a later duplicate wins"""
    levels: Dict[str, int] = {}
    for req in requirements:
        levels[req.skill] = req.level
    return levels


def score_employee(requirements: Sequence[Requirement], employee: Employee) -> MatchResult:
    """
    Score one employee.

    average of min(employee level / required level, 1) over the matched
    skills, plus 0.2 when available, capped at 1 and reported as 0..100.
    An employee matching nothing scores the availability bonus alone.
    """
    levels = required_levels(requirements)

    match_sum = 0.0
    matched = 0
    present: List[PresentSkill] = []
    held = set()

    for skill in employee.skills:
        held.add(skill.name)
        if skill.name not in levels:
            continue
        required = levels[skill.name]
        match_sum += min(skill.level / required, 1.0)
        matched += 1
        present.append(PresentSkill(skill.name, skill.level, required))

    missing = [
        MissingSkill(req.skill, levels[req.skill])
        for req in requirements
        if req.skill not in held
    ]

    average = match_sum / matched if matched > 0 else 0.0
    bonus = AVAILABILITY_BONUS if employee.availability == 'available' else 0.0
    final = min(average + bonus, 1.0)

    return MatchResult(
        employee=employee,
        match_score=_round_half_up(final * 100),
        matched_skills=matched,
        total_required_skills=len(requirements),
        present_skills=present,
        missing_skills=missing,
        active_projects_count=employee.active_projects_count
    )


def rank_candidates(requirements: Sequence[Requirement], employees: Iterable[Employee]) -> List[MatchResult]:
    """
    Score the whole pool and sort best first.
    The sort is stable: equal scores keep the pool's order, which the
    database supplies by ascending employee id.
    """
    results = [score_employee(requirements, emp) for emp in employees]
    results.sort(key=lambda r: r.match_score, reverse=True)
    return results


def exclude_assigned(matches: Iterable[MatchResult], assigned_ids: Iterable[int]) -> List[MatchResult]:
    """Drop employees already on the project"""
    assigned = set(assigned_ids)
    return [m for m in matches if m.employee.id not in assigned]


def _round_half_up(value: float) -> int:
    # halves round up; inputs are never negative
    return int(value + 0.5)

"""
Assessment scoring

Eight category ratings (0-10 each) become one overall score (0-100) and a
qualitative band. The overall score only ever exists as a derived field
of CategoryScores, so a stored assessment cannot carry a score that
disagrees with its ratings.
"""
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import ValidationError, StateConflictError

CATEGORY_KEYS = (
    'technicalSkills',
    'communication',
    'leadership',
    'problemSolving',
    'teamwork',
    'adaptability',
    'timeManagement',
    'creativity',
)

CATEGORY_LABELS = {
    'technicalSkills': 'Technical Skills',
    'communication': 'Communication',
    'leadership': 'Leadership',
    'problemSolving': 'Problem Solving',
    'teamwork': 'Teamwork',
    'adaptability': 'Adaptability',
    'timeManagement': 'Time Management',
    'creativity': 'Creativity',
}

# onboarding questionnaire categories, in display order
ONBOARDING_CATEGORIES = {
    'technical': 'Technical Skills',
    'communication': 'Communication',
    'leadership': 'Leadership',
    'problemSolving': 'Problem Solving',
    'teamwork': 'Teamwork',
}

MIN_SCORE = 0
MAX_SCORE = 10

# (threshold, label), checked top-down
SCORE_BANDS = (
    (90, 'Excellent'),
    (80, 'Very Good'),
    (70, 'Good'),
    (60, 'Average'),
)
LOWEST_BAND = 'Needs Improvement'

STATUS_FLOW = ('draft', 'submitted', 'reviewed', 'approved')
LOCKED_STATUSES = frozenset({'reviewed', 'approved'})


def _round_half_up(value: float) -> int:
    return int(value + 0.5)


def validate_scores(scores: Mapping[str, Any]) -> Dict[str, float]:
    """
    Check that every category is present and numeric in [0, 10].
    Raises ValidationError naming the first bad key, in category order.
    """
    if not isinstance(scores, Mapping):
        raise ValidationError("Field 'scores' must be an object", field='scores')

    cleaned: Dict[str, float] = {}
    for key in CATEGORY_KEYS:
        if key not in scores or scores[key] is None:
            raise ValidationError(f"Missing score for {key}", field=key)
        value = scores[key]
        numeric = not isinstance(value, bool) and isinstance(value, Real)
        # NaN fails the range check since every comparison with it is False
        if not numeric or not MIN_SCORE <= value <= MAX_SCORE:
            raise ValidationError(
                f"Invalid score for {key}. Must be a number between {MIN_SCORE} and {MAX_SCORE}.",
                field=key
            )
        cleaned[key] = value
    return cleaned


def compute_overall_score(scores: Mapping[str, float]) -> int:
    """round((sum / 8) * 10), rounding halves up"""
    total = sum(scores[key] for key in CATEGORY_KEYS)
    return _round_half_up(total / len(CATEGORY_KEYS) * 10)


def classify_score(score: float) -> str:
    for threshold, label in SCORE_BANDS:
        if score >= threshold:
            return label
    return LOWEST_BAND


@dataclass(frozen=True)
class CategoryScores:
    """
    Validated category ratings plus the overall score derived from them.

    overall_score is not an init argument; it is computed from the ratings
    whenever an instance is built.
    """
    values: Tuple[Tuple[str, float], ...]
    overall_score: int = field(init=False)

    def __post_init__(self):
        cleaned = validate_scores(dict(self.values))
        object.__setattr__(self, 'values', tuple((key, cleaned[key]) for key in CATEGORY_KEYS))
        object.__setattr__(self, 'overall_score', compute_overall_score(cleaned))

    @classmethod
    def from_mapping(cls, scores: Mapping[str, Any]) -> 'CategoryScores':
        if not isinstance(scores, Mapping):
            raise ValidationError("Field 'scores' must be an object", field='scores')
        return cls(values=tuple(scores.items()))

    @property
    def score_level(self) -> str:
        return classify_score(self.overall_score)

    def as_dict(self) -> Dict[str, float]:
        return dict(self.values)

    def merged(self, changes: Mapping[str, Any]) -> 'CategoryScores':
        """Apply a partial update and re-derive the overall score"""
        if not isinstance(changes, Mapping):
            raise ValidationError("Field 'scores' must be an object", field='scores')
        unknown = [key for key in changes if key not in CATEGORY_KEYS]
        if unknown:
            raise ValidationError(f"Unknown score category: {unknown[0]}", field=unknown[0])
        combined = self.as_dict()
        combined.update(changes)
        return CategoryScores.from_mapping(combined)

    def __getitem__(self, key: str) -> float:
        return self.as_dict()[key]


def rank_strengths_and_weaknesses(
    scores: Mapping[str, float],
    n: int = 3,
    keys: Optional[Sequence[str]] = None,
) -> Tuple[List[str], List[str]]:
    """
    Top-n categories are strengths, bottom-n are weaknesses.
    Equal values keep category order in both lists.
    """
    keys = list(keys or [k for k in CATEGORY_KEYS if k in scores])
    order = {key: i for i, key in enumerate(keys)}

    strengths = sorted(keys, key=lambda k: (-scores[k], order[k]))[:n]
    weaknesses = sorted(keys, key=lambda k: (scores[k], order[k]))[:n]
    return strengths, weaknesses


def score_questionnaire(
    answers: Mapping[str, Sequence[Optional[int]]],
    categories: Sequence[str],
) -> Dict[str, int]:
    """
    Self-assessment variant used at onboarding.

    Each category has a list of 1-5 answers (None for unanswered). A
    category scores round(mean * 20) as a percentage; a category with no
    answers scores 0. 'overall' is the rounded mean of the categories.
    """
    result: Dict[str, int] = {}
    for category in categories:
        answered = []
        for value in answers.get(category) or []:
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, Real) or not 1 <= value <= 5:
                raise ValidationError(
                    f"Invalid answer for {category}. Must be a number between 1 and 5.",
                    field=category
                )
            answered.append(value)
        if answered:
            result[category] = _round_half_up(sum(answered) / len(answered) * 20)
        else:
            result[category] = 0

    if categories:
        result['overall'] = _round_half_up(sum(result[c] for c in categories) / len(categories))
    else:
        result['overall'] = 0
    return result


# ============================================
# Status lifecycle
# ============================================

def ensure_mutable(assessment_id: Any, status: str):
    """Reviewed and approved assessments are read-only"""
    if status in LOCKED_STATUSES:
        raise StateConflictError(assessment_id, status)


def next_status(status: str) -> str:
    if status not in STATUS_FLOW:
        raise ValidationError(f"Unknown assessment status: {status}", field='status')
    index = STATUS_FLOW.index(status)
    if index == len(STATUS_FLOW) - 1:
        raise ValidationError(f"Assessment is already {status}", field='status')
    return STATUS_FLOW[index + 1]


def validate_transition(current: str, target: str):
    """Only a single step forward along draft -> submitted -> reviewed -> approved"""
    if target not in STATUS_FLOW:
        raise ValidationError(f"Unknown assessment status: {target}", field='status')
    if next_status(current) != target:
        raise ValidationError(
            f"Cannot move assessment from {current} to {target}",
            field='status'
        )

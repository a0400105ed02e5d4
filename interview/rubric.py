"""Fixed three-criterion grading rubric and its scoring thresholds.

Every score, classification, grade and recommendation in the service is derived
from the constants in this module, so switching rubric versions means editing
this file only.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

CRITERIA: Tuple[str, ...] = ("migration_intent", "goal_understanding", "answer_length")

CRITERION_MIN = 1
CRITERION_MAX = 5

MIN_TOTAL = CRITERION_MIN * len(CRITERIA)
MAX_TOTAL = CRITERION_MAX * len(CRITERIA)

EXCELLENT = "Excellent"
GOOD = "Good"
AVERAGE = "Average"
WEAK = "Weak"

# (minimum total, classification, letter grade), highest band first
CLASSIFICATION_BANDS: List[Tuple[int, str, str]] = [
    (15, EXCELLENT, "A"),
    (13, GOOD, "B"),
    (11, AVERAGE, "C"),
    (MIN_TOTAL, WEAK, "D"),
]

STRONG_AT_LEAST = 4
WEAK_AT_MOST = 3
RED_FLAG_AT_MOST = 2

CRITERION_LABELS: Dict[str, str] = {
    "migration_intent": "No immigration intent",
    "goal_understanding": "Clear understanding of academic goals",
    "answer_length": "Appropriate answer length",
}

RED_FLAG_LABELS: Dict[str, str] = {
    "migration_intent": "Shows potential immigration intent",
    "goal_understanding": "Unclear academic goals",
    "answer_length": "Poor answer structure or length",
}

# (minimum average, recommendation), highest band first
RECOMMENDATION_BANDS: List[Tuple[float, str]] = [
    (
        15.0,
        "Excellent performance! You're well-prepared. Focus on maintaining confidence and "
        "natural delivery during the actual interview.",
    ),
    (
        13.0,
        "Good foundation. Review the specific feedback for each answer and practice the improved "
        "versions. Focus on being more specific and confident in your responses.",
    ),
    (
        11.0,
        "You need more practice. Focus on providing specific examples, showing strong ties to your "
        "home country, and demonstrating clear post-graduation plans.",
    ),
    (
        8.0,
        "Significant improvement needed. Consider working with an advisor to strengthen your answers "
        "and address visa officer concerns about immigrant intent.",
    ),
]
MAJOR_REVISION = (
    "Major revision required. Rebuild your answers from scratch around a clear study purpose, "
    "credible funding, and concrete plans to return home before your interview."
)

# Score adapter thresholds, as percentages of the rescaled total
FOLLOWUP_BELOW_PCT = 70
RISK_PENALTY_BELOW_PCT = 60
RISK_RELIEF_FROM_PCT = 80
RISK_PENALTY = 5
RISK_RELIEF = -3


def classify(total: int) -> str:
    """Return the classification label for a rubric total."""

    for minimum, label, _ in CLASSIFICATION_BANDS:
        if total >= minimum:
            return label
    return WEAK


def grade_for_total(total: int) -> str:
    """Return the letter grade for a (truncated) rubric total."""

    for minimum, _, grade in CLASSIFICATION_BANDS:
        if total >= minimum:
            return grade
    return CLASSIFICATION_BANDS[-1][2]


def grade_for_classification(label: str) -> str:
    wanted = (label or "").strip().lower()
    for _, name, grade in CLASSIFICATION_BANDS:
        if name.lower() == wanted:
            return grade
    return ""


def recommendation_for(average: float) -> str:
    for minimum, text in RECOMMENDATION_BANDS:
        if average >= minimum:
            return text
    return MAJOR_REVISION


__all__ = [
    "AVERAGE",
    "CLASSIFICATION_BANDS",
    "CRITERIA",
    "CRITERION_LABELS",
    "CRITERION_MAX",
    "CRITERION_MIN",
    "EXCELLENT",
    "FOLLOWUP_BELOW_PCT",
    "GOOD",
    "MAJOR_REVISION",
    "MAX_TOTAL",
    "MIN_TOTAL",
    "RECOMMENDATION_BANDS",
    "RED_FLAG_AT_MOST",
    "RED_FLAG_LABELS",
    "RISK_PENALTY",
    "RISK_PENALTY_BELOW_PCT",
    "RISK_RELIEF",
    "RISK_RELIEF_FROM_PCT",
    "STRONG_AT_LEAST",
    "WEAK",
    "WEAK_AT_MOST",
    "classify",
    "grade_for_classification",
    "grade_for_total",
    "recommendation_for",
]

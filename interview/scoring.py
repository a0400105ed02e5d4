"""Conversion of grader verdicts into session risk-bucket deltas."""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from . import rubric
from .models import AnalysisResponse, EvalResult, Question, ScoreDelta, Session
from .question_bank import ACADEMIC, FINANCIAL, IMMIGRATION, POST_GRADUATION

# Question category -> risk bucket on ScoreDelta; other categories only move overall_risk
CATEGORY_BUCKETS: Dict[str, str] = {
    ACADEMIC: "academic",
    FINANCIAL: "financial",
    IMMIGRATION: "intent_to_return",
    POST_GRADUATION: "intent_to_return",
}

# Heuristic follow-up classifier: first follow-up type whose keywords appear in the feedback wins
FOLLOWUP_KEYWORDS: List[Tuple[str, Tuple[str, ...]]] = [
    ("clarify_purpose", ("purpose", "study", "why", "goal")),
    ("clarify_university", ("university", "school", "college", "program")),
    ("clarify_financial", ("financial", "money", "fund", "sponsor", "income")),
    ("clarify_home_ties", ("home", "country", "return", "ties", "family")),
]


def to_percentage(total: int) -> float:
    """Rescale a rubric total onto 0-100, clamping out-of-range totals."""

    bounded = max(rubric.MIN_TOTAL, min(rubric.MAX_TOTAL, total))
    return (bounded - rubric.MIN_TOTAL) * 100.0 / (rubric.MAX_TOTAL - rubric.MIN_TOTAL)


def classify_followup(text: str) -> str:
    """Best-effort keyword match of grader feedback to a follow-up type."""

    lowered = (text or "").lower()
    for followup_type, keywords in FOLLOWUP_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return followup_type
    return ""


def score_delta(percentage: int, category: str) -> ScoreDelta:
    if percentage < rubric.RISK_PENALTY_BELOW_PCT:
        amount = rubric.RISK_PENALTY
    elif percentage >= rubric.RISK_RELIEF_FROM_PCT:
        amount = rubric.RISK_RELIEF
    else:
        return ScoreDelta()
    delta = ScoreDelta(overall_risk=amount)
    bucket = CATEGORY_BUCKETS.get(category)
    if bucket:
        setattr(delta, bucket, amount)
    return delta


def to_eval(analysis: AnalysisResponse, question: Question) -> EvalResult:
    """Translate a rubric verdict into the internal 0-10 scoring model.

    clarity and confidence are proxies (answer_length x2 and
    goal_understanding x2, capped at 10), not exact measures.
    """

    scores = analysis.scores
    percentage = int(to_percentage(scores.total_score))
    quality = min(10, percentage // 10)
    clarity = min(10, scores.answer_length * 2)
    confidence = min(10, scores.goal_understanding * 2)
    intent_risk = max(0, 10 - percentage // 10)

    needs_followup = percentage < rubric.FOLLOWUP_BELOW_PCT
    suggested = classify_followup(analysis.feedback.as_text()) if needs_followup else ""

    flags: List[str] = []
    if analysis.classification.strip():
        flags.append(f"classification:{analysis.classification}")
    if analysis.feedback.overall.strip():
        flags.append(f"feedback:{analysis.feedback.overall.strip()}")

    return EvalResult(
        quality=quality,
        clarity=clarity,
        confidence=confidence,
        flags=flags,
        intent_to_return_risk=intent_risk,
        suggested_followup=suggested,
        needs_followup=needs_followup,
        score_delta=score_delta(percentage, question.category),
    )


def apply_eval(session: Session, evaluation: Optional[EvalResult]) -> None:
    """Accumulate an evaluation's delta into the session buckets."""

    if evaluation is None:
        return
    delta = evaluation.score_delta
    session.scores.academic += delta.academic
    session.scores.financial += delta.financial
    session.scores.intent_to_return += delta.intent_to_return
    session.scores.overall_risk += delta.overall_risk


__all__ = [
    "CATEGORY_BUCKETS",
    "FOLLOWUP_KEYWORDS",
    "apply_eval",
    "classify_followup",
    "score_delta",
    "to_eval",
    "to_percentage",
]

"""End-of-session summary generation."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from . import rubric
from .errors import SummaryUnavailableError
from .models import AnalysisResponse, Session, SessionSummary, utcnow


def _recurring(analyses: Sequence[AnalysisResponse], matches) -> List[str]:
    """Criteria satisfying ``matches`` in at least half of the analyses."""

    labels: List[str] = []
    for criterion in rubric.CRITERIA:
        count = sum(1 for analysis in analyses if matches(analysis.scores.criterion(criterion)))
        if count and count * 2 >= len(analyses):
            labels.append(rubric.CRITERION_LABELS[criterion])
    return labels


def strong_areas(analyses: Sequence[AnalysisResponse]) -> List[str]:
    return _recurring(analyses, lambda score: score >= rubric.STRONG_AT_LEAST)


def weak_areas(analyses: Sequence[AnalysisResponse]) -> List[str]:
    return _recurring(analyses, lambda score: score <= rubric.WEAK_AT_MOST)


def red_flags(analyses: Sequence[AnalysisResponse]) -> List[str]:
    flags = {
        rubric.RED_FLAG_LABELS[criterion]
        for analysis in analyses
        for criterion in rubric.CRITERIA
        if analysis.scores.criterion(criterion) <= rubric.RED_FLAG_AT_MOST
    }
    return sorted(flags)


def summarize(session: Session, now: Optional[datetime] = None) -> SessionSummary:
    """Aggregate every analyzed answer of ``session`` into a summary.

    Answers recorded without an analysis (grader unavailable) are ignored.

    Raises:
        SummaryUnavailableError: If no answer carries an analysis.
    """

    if not session.answers:
        raise SummaryUnavailableError("no answers in session")
    analyses = [answer.analysis for answer in session.analyzed_answers() if answer.analysis is not None]
    if not analyses:
        raise SummaryUnavailableError("no analyses found in session")

    average = sum(analysis.scores.total_score for analysis in analyses) / len(analyses)
    return SessionSummary(
        session_id=session.id,
        total_questions=len(analyses),
        average_score=average,
        overall_grade=rubric.grade_for_total(int(average)),
        strong_areas=strong_areas(analyses),
        weak_areas=weak_areas(analyses),
        common_red_flags=red_flags(analyses),
        recommendation=rubric.recommendation_for(average),
        completed_at=now or utcnow(),
    )


__all__ = ["red_flags", "strong_areas", "summarize", "weak_areas"]

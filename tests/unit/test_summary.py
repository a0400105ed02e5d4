from datetime import datetime, timezone

import pytest

from interview import rubric
from interview.errors import SummaryUnavailableError
from interview.models import Answer, Session
from interview.summary import red_flags, strong_areas, summarize, weak_areas


def _session(analyses) -> Session:
    answers = [
        Answer(question_id=f"q{index}", question_text="Q?", text="A.", analysis=analysis)
        for index, analysis in enumerate(analyses)
    ]
    return Session(id="s1", answers=answers)


def test_average_grade_and_recommendation(analysis_factory):
    session = _session([analysis_factory(5, 4, 4) for _ in range(6)])
    summary = summarize(session, now=datetime(2024, 5, 1, tzinfo=timezone.utc))
    assert summary.total_questions == 6
    assert summary.average_score == 13.0
    assert summary.overall_grade == "B"
    assert summary.recommendation == rubric.RECOMMENDATION_BANDS[1][1]
    assert summary.completed_at.year == 2024


def test_grade_uses_truncated_average(analysis_factory):
    session = _session([analysis_factory(5, 5, 5), analysis_factory(5, 4, 4)])
    summary = summarize(session)
    assert summary.average_score == 14.0
    assert summary.overall_grade == "B"
    session = _session([analysis_factory(5, 5, 5), analysis_factory(5, 5, 4)])
    assert summarize(session).overall_grade == "B"


def test_unanalyzed_answers_are_ignored(analysis_factory):
    session = _session([analysis_factory(5, 5, 5), None, None])
    summary = summarize(session)
    assert summary.total_questions == 1
    assert summary.average_score == 15.0
    assert summary.overall_grade == "A"


def test_no_answers_or_no_analyses_raise():
    with pytest.raises(SummaryUnavailableError):
        summarize(Session(id="empty"))
    with pytest.raises(SummaryUnavailableError):
        summarize(_session([None]))


def test_areas_need_half_of_the_answers(analysis_factory):
    analyses = [analysis_factory(5, 2, 3), analysis_factory(4, 4, 3), analysis_factory(2, 2, 3)]
    assert strong_areas(analyses) == [rubric.CRITERION_LABELS["migration_intent"]]
    assert weak_areas(analyses) == [
        rubric.CRITERION_LABELS["goal_understanding"],
        rubric.CRITERION_LABELS["answer_length"],
    ]


def test_single_answer_counts_as_recurring(analysis_factory):
    assert strong_areas([analysis_factory(4, 1, 1)]) == [rubric.CRITERION_LABELS["migration_intent"]]


def test_red_flags_are_sorted_and_unique(analysis_factory):
    analyses = [analysis_factory(2, 5, 1), analysis_factory(1, 5, 5)]
    assert red_flags(analyses) == sorted(
        {rubric.RED_FLAG_LABELS["migration_intent"], rubric.RED_FLAG_LABELS["answer_length"]}
    )

import pytest

from interview.models import Question, Session
from interview.question_bank import ACADEMIC, FINANCIAL, IMMIGRATION, POST_GRADUATION, PURPOSE
from interview.scoring import apply_eval, classify_followup, score_delta, to_eval, to_percentage


def _question(category: str) -> Question:
    return Question(id="q1_x", category=category, text="Why?")


def test_percentage_endpoints_and_clamp():
    assert to_percentage(3) == 0.0
    assert to_percentage(15) == 100.0
    assert to_percentage(9) == pytest.approx(50.0)
    assert to_percentage(0) == 0.0
    assert to_percentage(99) == 100.0


def test_percentage_is_monotonic():
    values = [to_percentage(total) for total in range(0, 20)]
    assert values == sorted(values)


def test_high_score_relieves_risk_in_bucket(analysis_factory):
    evaluation = to_eval(analysis_factory(5, 5, 5), _question(FINANCIAL))
    assert evaluation.quality == 10
    assert evaluation.intent_to_return_risk == 0
    assert not evaluation.needs_followup
    assert evaluation.suggested_followup == ""
    assert evaluation.score_delta.financial == -3
    assert evaluation.score_delta.overall_risk == -3
    assert "classification:Excellent" in evaluation.flags


def test_low_score_penalizes_and_requests_followup(analysis_factory):
    analysis = analysis_factory(2, 2, 2, overall="Your study goal is vague.", improvements=[])
    evaluation = to_eval(analysis, _question(IMMIGRATION))
    assert evaluation.needs_followup
    assert evaluation.suggested_followup == "clarify_purpose"
    assert evaluation.score_delta.intent_to_return == 5
    assert evaluation.score_delta.overall_risk == 5
    assert evaluation.clarity == 4
    assert evaluation.confidence == 4


def test_middle_band_leaves_risk_unchanged(analysis_factory):
    evaluation = to_eval(analysis_factory(4, 4, 3), _question(ACADEMIC))
    assert evaluation.score_delta.model_dump() == {
        "academic": 0,
        "financial": 0,
        "intent_to_return": 0,
        "overall_risk": 0,
    }


def test_uncategorized_question_moves_only_overall():
    delta = score_delta(10, PURPOSE)
    assert delta.overall_risk == 5
    assert delta.academic == delta.financial == delta.intent_to_return == 0
    assert score_delta(90, POST_GRADUATION).intent_to_return == -3


def test_classify_followup_keyword_order():
    assert classify_followup("Explain why you chose this study goal") == "clarify_purpose"
    assert classify_followup("Mention your family ties back home") == "clarify_home_ties"
    assert classify_followup("") == ""


def test_apply_eval_accumulates(analysis_factory):
    session = Session(id="s1")
    apply_eval(session, to_eval(analysis_factory(1, 1, 1), _question(ACADEMIC)))
    apply_eval(session, to_eval(analysis_factory(1, 1, 1), _question(ACADEMIC)))
    apply_eval(session, None)
    assert session.scores.academic == 10
    assert session.scores.overall_risk == 10

from interview.followups import END, decide_next, is_terminal, pick_followup
from interview.models import Answer, EvalResult, Question, Session


def _question() -> Question:
    return Question(
        id="q5_finance",
        category="Financial Capability",
        text="Who pays?",
        next_id="q6_sponsor",
        followup_candidates=["q5f_finance_clarify", "q6f_finance_detail"],
    )


def _eval(needs: bool, kind: str = "clarify_financial") -> EvalResult:
    return EvalResult(quality=3, clarity=3, confidence=3, intent_to_return_risk=7, needs_followup=needs, suggested_followup=kind)


def test_followup_chosen_when_needed():
    session = Session(id="s1")
    assert decide_next(_question(), session, _eval(True)) == "q5f_finance_clarify"


def test_already_asked_followup_is_skipped():
    session = Session(
        id="s1",
        answers=[Answer(question_id="q5f_finance_clarify", question_text="?", text="Dad pays.")],
    )
    assert pick_followup(_question(), "clarify_financial", session) == "q6f_finance_detail"


def test_linear_next_without_followup():
    session = Session(id="s1")
    assert decide_next(_question(), session, _eval(False)) == "q6_sponsor"
    assert decide_next(_question(), session, None) == "q6_sponsor"
    assert decide_next(_question(), session, _eval(True, "clarify_purpose")) == "q6_sponsor"


def test_terminal_ids():
    assert is_terminal("")
    assert is_terminal(END)
    assert not is_terminal("q1")

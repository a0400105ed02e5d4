from __future__ import annotations  # Follow-up selection for the question-graph session model

from typing import Dict, List, Optional

from .models import EvalResult, Question, Session

END = "end"

# Follow-up type -> follow-up question ids, in preference order
FOLLOWUP_BY_TYPE: Dict[str, List[str]] = {
    "clarify_purpose": ["q1f_clarify_purpose"],
    "clarify_university": ["q2f_university_exact"],
    "clarify_financial": ["q5f_finance_clarify", "q6f_finance_detail"],
    "clarify_home_ties": ["q7f_home_country_career", "q8f_ties_detail"],
}


def is_terminal(next_id: str) -> bool:  # Empty id and "end" both stop the interview
    return next_id in ("", END)


def pick_followup(current: Question, followup_type: str, session: Session) -> str:  # First allowed follow-up not yet asked
    if not followup_type:
        return ""
    allowed = set(current.followup_candidates)
    for candidate in FOLLOWUP_BY_TYPE.get(followup_type, []):
        if candidate in allowed and not session.has_answered(candidate):
            return candidate
    return ""


def decide_next(current: Question, session: Session, evaluation: Optional[EvalResult]) -> str:  # Next question id, "" or "end"
    if evaluation is not None and evaluation.needs_followup:
        followup = pick_followup(current, evaluation.suggested_followup, session)
        if followup:
            return followup
    return current.next_id


__all__ = ["END", "FOLLOWUP_BY_TYPE", "decide_next", "is_terminal", "pick_followup"]

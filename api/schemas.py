"""Pydantic schemas for the interview practice API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from interview.models import AnalysisResponse, Answer, ChatMessage, Question, Scores, Session, SessionSummary


class StartReq(BaseModel):
    level: str = ""
    user_id: str = ""


class AnswerReq(BaseModel):
    answer: str
    question_id: str = ""


class ChatReq(BaseModel):
    messages: List[ChatMessage] = Field(default_factory=list)
    session_id: str = ""
    level: str = ""
    user_id: str = ""


class QuestionPayload(BaseModel):
    id: str
    category: str
    text: str

    @classmethod
    def from_question(cls, question: Optional[Question]) -> Optional["QuestionPayload"]:
        if question is None:
            return None
        return cls(id=question.id, category=question.category, text=question.text)


class StartResp(BaseModel):
    session_id: str
    level: str
    total_questions: int
    question: Optional[QuestionPayload] = None


class SessionResp(BaseModel):
    session_id: str
    user_id: str
    level: str
    status: str
    question_index: int
    total_questions: int
    question: Optional[QuestionPayload] = None
    answers: List[Answer] = Field(default_factory=list)
    scores: Scores
    summary: Optional[SessionSummary] = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_session(cls, session: Session) -> "SessionResp":
        return cls(
            session_id=session.id,
            user_id=session.user_id,
            level=session.level,
            status=session.status,
            question_index=session.question_index,
            total_questions=len(session.selected_questions),
            question=QuestionPayload.from_question(session.question_at_cursor()) if session.is_active else None,
            answers=session.answers,
            scores=session.scores,
            summary=session.summary,
            created_at=session.created_at,
            updated_at=session.updated_at,
        )


class AnswerResp(BaseModel):
    session_id: str
    status: str
    finished: bool
    duplicate: bool = False
    next_question: Optional[QuestionPayload] = None
    scores: Scores
    analysis: Optional[AnalysisResponse] = None
    grade: str = ""
    suggestions: List[str] = Field(default_factory=list)
    grading_error: str = ""
    summary: Optional[SessionSummary] = None


class ChatResp(BaseModel):
    content: str
    session_id: str
    question_id: str = ""
    finished: bool = False
    scores: Optional[Scores] = None
    is_new_session: bool = False
    analysis: Optional[AnalysisResponse] = None
    grade: str = ""
    suggestions: List[str] = Field(default_factory=list)


class HealthResp(BaseModel):
    status: str = "ok"
    sessions: int = 0

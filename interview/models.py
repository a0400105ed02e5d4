from __future__ import annotations  # Interview domain models

from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from . import rubric


SessionStatus = Literal["active", "finished", "aborted"]
STATUS_ACTIVE: SessionStatus = "active"
STATUS_FINISHED: SessionStatus = "finished"
STATUS_ABORTED: SessionStatus = "aborted"


def utcnow() -> datetime:  # Timezone-aware current time
    return datetime.now(timezone.utc)


class Question(BaseModel):  # One interview question, copied by value into each session
    model_config = ConfigDict(frozen=True)

    id: str
    category: str
    text: str
    next_id: str = ""  # linear next question in the graph session model
    followup_candidates: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class AnalysisScores(BaseModel):  # Rubric sub-scores for one answer
    migration_intent: int = Field(ge=rubric.CRITERION_MIN, le=rubric.CRITERION_MAX)
    goal_understanding: int = Field(ge=rubric.CRITERION_MIN, le=rubric.CRITERION_MAX)
    answer_length: int = Field(ge=rubric.CRITERION_MIN, le=rubric.CRITERION_MAX)
    total_score: int = 0

    @model_validator(mode="after")
    def _derive_total(self) -> "AnalysisScores":  # Total is always the sum of the criteria
        self.total_score = sum(self.criterion(name) for name in rubric.CRITERIA)
        return self

    def criterion(self, name: str) -> int:
        return int(getattr(self, name))


class FeedbackByCriterion(BaseModel):  # Short explanation per criterion
    migration_intent: str = ""
    goal_understanding: str = ""
    answer_length: str = ""


class StructuredFeedback(BaseModel):  # Grader feedback block
    overall: str = ""
    by_criterion: FeedbackByCriterion = Field(default_factory=FeedbackByCriterion)
    improvements: List[str] = Field(default_factory=list)

    def as_text(self) -> str:  # Flatten every free-text field for keyword matching
        parts = [
            self.overall,
            self.by_criterion.migration_intent,
            self.by_criterion.goal_understanding,
            self.by_criterion.answer_length,
            *self.improvements,
        ]
        return "\n".join(part for part in parts if part)


class AnalysisResponse(BaseModel):  # Grader verdict for a single answer
    scores: AnalysisScores
    classification: str = ""
    feedback: StructuredFeedback

    @model_validator(mode="after")
    def _derive_classification(self) -> "AnalysisResponse":  # The rubric decides the label, not the grader
        self.classification = rubric.classify(self.scores.total_score)
        return self


class ScoreDelta(BaseModel):  # Signed adjustment to the session risk buckets
    academic: int = 0
    financial: int = 0
    intent_to_return: int = 0
    overall_risk: int = 0


class Scores(ScoreDelta):  # Cumulative session risk buckets
    pass


class EvalResult(BaseModel):  # Internal scoring model derived from an AnalysisResponse
    quality: int = Field(ge=0, le=10)
    clarity: int = Field(ge=0, le=10)
    confidence: int = Field(ge=0, le=10)
    flags: List[str] = Field(default_factory=list)
    intent_to_return_risk: int = Field(ge=0, le=10)
    suggested_followup: str = ""
    needs_followup: bool = False
    score_delta: ScoreDelta = Field(default_factory=ScoreDelta)


class Answer(BaseModel):  # One recorded response, append-only within a session
    question_id: str
    question_text: str
    text: str
    created_at: datetime = Field(default_factory=utcnow)
    analysis: Optional[AnalysisResponse] = None
    evaluation: Optional[EvalResult] = None


class SessionSummary(BaseModel):  # Overall assessment of a completed session
    session_id: str
    total_questions: int
    average_score: float
    overall_grade: str
    strong_areas: List[str] = Field(default_factory=list)
    weak_areas: List[str] = Field(default_factory=list)
    common_red_flags: List[str] = Field(default_factory=list)
    recommendation: str
    completed_at: datetime = Field(default_factory=utcnow)


class ChatMessage(BaseModel):  # One entry of the chat-style transcript sent by clients
    role: str
    content: str = ""


class Session(BaseModel):  # State of one full interview attempt
    id: str
    user_id: str = ""
    level: str = ""
    selected_questions: List[Question] = Field(default_factory=list)
    question_index: int = Field(default=0, ge=0)
    current_question: str = ""
    answers: List[Answer] = Field(default_factory=list)
    scores: Scores = Field(default_factory=Scores)
    status: SessionStatus = STATUS_ACTIVE
    summary: Optional[SessionSummary] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_active(self) -> bool:
        return self.status == STATUS_ACTIVE

    def question_at_cursor(self) -> Optional[Question]:
        if self.question_index < len(self.selected_questions):
            return self.selected_questions[self.question_index]
        return None

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.selected_questions:
            if question.id == question_id:
                return question
        return None

    def has_answered(self, question_id: str) -> bool:
        return any(answer.question_id == question_id for answer in self.answers)

    def analyzed_answers(self) -> List[Answer]:
        return [answer for answer in self.answers if answer.analysis is not None]


__all__ = [
    "AnalysisResponse",
    "AnalysisScores",
    "ChatMessage",
    "Answer",
    "EvalResult",
    "FeedbackByCriterion",
    "Question",
    "STATUS_ABORTED",
    "STATUS_ACTIVE",
    "STATUS_FINISHED",
    "ScoreDelta",
    "Scores",
    "Session",
    "SessionStatus",
    "SessionSummary",
    "StructuredFeedback",
    "utcnow",
]

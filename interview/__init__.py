from __future__ import annotations  # Re-export interview core public API

from .errors import (
    ConfigurationError,
    GradingError,
    GradingFormatError,
    GradingTransportError,
    InterviewError,
    NotFoundError,
    RequestValidationError,
    SummaryUnavailableError,
)
from .grader import Grader, GradingClient
from .models import AnalysisResponse, Answer, ChatMessage, Question, Scores, Session, SessionSummary
from .orchestrator import ChatResult, InterviewOrchestrator, TurnResult, completion_message
from .question_bank import QuestionBank
from .session_store import SessionStore
from .summary import summarize

__all__ = [
    "AnalysisResponse",
    "Answer",
    "ChatMessage",
    "ChatResult",
    "ConfigurationError",
    "Grader",
    "GradingClient",
    "GradingError",
    "GradingFormatError",
    "GradingTransportError",
    "InterviewError",
    "InterviewOrchestrator",
    "NotFoundError",
    "Question",
    "QuestionBank",
    "RequestValidationError",
    "Scores",
    "Session",
    "SessionStore",
    "SessionSummary",
    "SummaryUnavailableError",
    "TurnResult",
    "completion_message",
    "summarize",
]

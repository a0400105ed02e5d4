"""Per-request interview flow: session creation, answering and completion."""
from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from pydantic import BaseModel, Field

from observability import log_event, span

from . import rubric
from .errors import GradingError, NotFoundError, RequestValidationError, SummaryUnavailableError
from .grader import Grader
from .models import (
    STATUS_ABORTED,
    STATUS_FINISHED,
    AnalysisResponse,
    Answer,
    ChatMessage,
    EvalResult,
    Question,
    Scores,
    Session,
    SessionSummary,
)
from .scoring import apply_eval, to_eval
from .session_store import SessionStore
from .summary import summarize

logger = logging.getLogger(__name__)


class TurnResult(BaseModel):
    """Outcome of one answer submission."""

    session: Session
    answer: Optional[Answer] = None
    analysis: Optional[AnalysisResponse] = None
    evaluation: Optional[EvalResult] = None
    next_question: Optional[Question] = None
    finished: bool = False
    duplicate: bool = False
    grading_error: str = ""
    events: List[Dict[str, Any]] = Field(default_factory=list)


class ChatResult(BaseModel):
    """Outcome of one chat-style turn."""

    content: str
    session_id: str
    question_id: str = ""
    finished: bool = False
    scores: Optional[Scores] = None
    is_new_session: bool = False
    analysis: Optional[AnalysisResponse] = None
    grade: str = ""
    suggestions: List[str] = Field(default_factory=list)


def completion_message(session: Session) -> str:
    """Closing message, based on the summary when one exists."""

    if session.summary is not None:
        summary = session.summary
        return (
            "Thank you for completing the interview practice session! "
            f"Your overall grade is: {summary.overall_grade} (Average Score: {summary.average_score:.1f}). "
            f"{summary.recommendation} Good luck with your visa interview!"
        )

    scores = session.scores
    average_risk = (scores.academic + scores.financial + scores.intent_to_return + scores.overall_risk) / 4.0
    if average_risk < 25:
        assessment = "excellent"
    elif average_risk < 50:
        assessment = "good"
    elif average_risk < 75:
        assessment = "moderate"
    else:
        assessment = "needs improvement"
    return (
        "Thank you for completing the interview practice session! "
        f"Your overall assessment is: {assessment}. "
        "Keep practicing to improve your answers and confidence. Good luck with your visa interview!"
    )


class _LockEntry:
    __slots__ = ("lock", "waiters")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.waiters = 0


class InterviewOrchestrator:
    """Drives sessions through the store and the grader.

    Requests for the same session are serialized with a per-session lock;
    requests for different sessions run concurrently.
    """

    def __init__(self, store: SessionStore, grader: Grader) -> None:
        self._store = store
        self._grader = grader
        self._locks: Dict[str, _LockEntry] = {}
        self._locks_guard = threading.Lock()

    @property
    def store(self) -> SessionStore:
        return self._store

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[None]:
        # Entries live only while a request holds or waits on them
        with self._locks_guard:
            entry = self._locks.setdefault(session_id, _LockEntry())
            entry.waiters += 1
        try:
            with entry.lock:
                yield
        finally:
            with self._locks_guard:
                entry.waiters -= 1
                if entry.waiters == 0:
                    del self._locks[session_id]

    def start_session(self, user_id: str = "", level: str = "") -> Session:
        session = self._store.create(user_id=user_id, level=level)
        log_event(
            "session_created",
            session.id,
            interview_level=session.level,
            question_id=session.current_question,
            questions=len(session.selected_questions),
        )
        return session

    def get_session(self, session_id: str) -> Session:
        return self._store.require(session_id)

    def current_question(self, session: Session) -> Optional[Question]:
        if not session.is_active:
            return None
        return session.question_at_cursor()

    def summary_for(self, session_id: str) -> SessionSummary:
        session = self._store.require(session_id)
        if session.summary is None:
            raise SummaryUnavailableError(f"session {session_id} has no summary", in_progress=session.is_active)
        return session.summary

    def submit_answer(self, session_id: str, answer: str, question_id: str = "") -> TurnResult:
        """Record and grade an answer to the session's current question.

        Re-submitting an already answered question id appends nothing and
        re-serves the current state. Grader failures are logged and the answer
        is kept without an analysis.
        """

        with self._session_lock(session_id):
            session = self._store.require(session_id)
            if not session.is_active:
                return self._terminal_result(session)

            current = session.question_at_cursor()
            if current is None:
                self._finish(session)
                self._store.save(session)
                return self._terminal_result(session)

            target_id = (question_id or "").strip() or current.id
            if session.has_answered(target_id):
                return self._duplicate(session, current, target_id)
            if target_id != current.id:
                if session.find_question(target_id) is None:
                    raise NotFoundError("question", target_id)
                raise RequestValidationError(f"question {target_id} is not the current question {current.id}")

            text = (answer or "").strip()
            if not text:
                raise RequestValidationError("answer text is required")

            return self._record_answer(session, current, text)

    def _record_answer(self, session: Session, current: Question, text: str) -> TurnResult:
        events: List[Dict[str, Any]] = []
        analysis: Optional[AnalysisResponse] = None
        grading_error = ""
        with span(events, "grade"):
            try:
                analysis = self._grader.analyze(session, current, text)
            except GradingError as exc:
                grading_error = str(exc)
                logger.warning("Error analyzing answer for session %s: %s", session.id, exc)

        record = Answer(question_id=current.id, question_text=current.text, text=text)
        evaluation: Optional[EvalResult] = None
        if analysis is not None:
            evaluation = to_eval(analysis, current)
            apply_eval(session, evaluation)
            record.analysis = analysis
            record.evaluation = evaluation
            log_event(
                "answer_graded",
                session.id,
                question_id=current.id,
                classification=analysis.classification,
                total_score=analysis.scores.total_score,
                ms=events[-1]["ms"],
            )
        else:
            log_event(
                "grading_failed",
                session.id,
                level=logging.WARNING,
                question_id=current.id,
                error=grading_error,
                ms=events[-1]["ms"],
            )
        session.answers.append(record)

        next_question = self._advance(session)
        self._store.save(session)
        return TurnResult(
            session=session,
            answer=record,
            analysis=analysis,
            evaluation=evaluation,
            next_question=next_question,
            finished=next_question is None,
            grading_error=grading_error,
            events=events,
        )

    def _duplicate(self, session: Session, current: Question, question_id: str) -> TurnResult:
        log_event("duplicate_submission", session.id, question_id=question_id)
        if question_id == current.id:
            # Answer stored but the cursor never moved past it
            next_question = self._advance(session)
            self._store.save(session)
        else:
            next_question = current
        return TurnResult(
            session=session,
            next_question=next_question,
            finished=not session.is_active,
            duplicate=True,
        )

    def _advance(self, session: Session) -> Optional[Question]:
        session.question_index += 1
        next_question = session.question_at_cursor()
        if next_question is None:
            self._finish(session)
            return None
        session.current_question = next_question.id
        return next_question

    def _finish(self, session: Session) -> None:
        session.status = STATUS_FINISHED
        session.current_question = ""
        try:
            session.summary = summarize(session)
        except SummaryUnavailableError as exc:
            logger.info("Session %s finished without summary: %s", session.id, exc)
            session.summary = None
        log_event(
            "session_finished",
            session.id,
            status=session.status,
            grade=session.summary.overall_grade if session.summary else "",
        )

    def _terminal_result(self, session: Session) -> TurnResult:
        return TurnResult(session=session, finished=True)

    def finish_session(self, session_id: str) -> Session:
        """End an active session early; finished or aborted sessions are returned unchanged."""

        with self._session_lock(session_id):
            session = self._store.require(session_id)
            if session.is_active:
                self._finish(session)
                self._store.save(session)
            return session

    def abort_session(self, session_id: str) -> Session:
        with self._session_lock(session_id):
            session = self._store.require(session_id)
            if session.is_active:
                session.status = STATUS_ABORTED
                session.current_question = ""
                self._store.save(session)
                log_event("session_aborted", session.id, status=session.status)
            return session

    def chat(
        self,
        messages: Sequence[ChatMessage],
        session_id: str = "",
        level: str = "",
        user_id: str = "",
    ) -> ChatResult:
        """Chat-style turn: unknown sessions are replaced by a fresh one."""

        session = self._store.get(session_id) if session_id else None
        if session is None:
            session = self.start_session(user_id=user_id, level=level)
            first = self.current_question(session)
            return ChatResult(
                content=first.text if first else completion_message(session),
                session_id=session.id,
                question_id=first.id if first else "",
                finished=first is None,
                scores=session.scores,
                is_new_session=True,
            )

        if not session.is_active:
            return self._chat_completion(session)

        current = self.current_question(session)
        if not messages and current is not None:
            return ChatResult(
                content=current.text,
                session_id=session.id,
                question_id=current.id,
                scores=session.scores,
            )

        last_user_message = ""
        for message in reversed(messages):
            if message.role == "user" and message.content.strip():
                last_user_message = message.content
                break
        if not last_user_message:
            raise RequestValidationError("no user message found")

        result = self.submit_answer(session.id, last_user_message, question_id=current.id if current else "")
        if result.finished:
            return self._chat_completion(result.session, analysis=result.analysis)

        next_question = result.next_question
        return ChatResult(
            content=next_question.text if next_question else "",
            session_id=result.session.id,
            question_id=next_question.id if next_question else "",
            scores=result.session.scores,
            analysis=result.analysis,
            grade=grade_for(result.analysis),
            suggestions=suggestions_for(result.analysis),
        )

    def _chat_completion(self, session: Session, analysis: Optional[AnalysisResponse] = None) -> ChatResult:
        return ChatResult(
            content=completion_message(session),
            session_id=session.id,
            finished=True,
            scores=session.scores,
            analysis=analysis,
            grade=grade_for(analysis),
            suggestions=suggestions_for(analysis),
        )


def grade_for(analysis: Optional[AnalysisResponse]) -> str:  # Letter grade of a verdict, "" when ungraded
    return rubric.grade_for_classification(analysis.classification) if analysis else ""


def suggestions_for(analysis: Optional[AnalysisResponse]) -> List[str]:  # Non-blank improvement tips of a verdict
    if analysis is None:
        return []
    return [item.strip() for item in analysis.feedback.improvements if item.strip()]


__all__ = ["ChatResult", "InterviewOrchestrator", "TurnResult", "completion_message", "grade_for", "suggestions_for"]

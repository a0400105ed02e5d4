"""FastAPI routes for interview practice sessions."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from api.schemas import (
    AnswerReq,
    AnswerResp,
    ChatReq,
    ChatResp,
    QuestionPayload,
    SessionResp,
    StartReq,
    StartResp,
)
from interview.errors import (
    ConfigurationError,
    InterviewError,
    NotFoundError,
    RequestValidationError,
    SummaryUnavailableError,
)
from interview.models import SessionSummary
from interview.orchestrator import InterviewOrchestrator, grade_for, suggestions_for
from reports import render_summary_pdf


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1")


def get_orchestrator(request: Request) -> InterviewOrchestrator:
    return request.app.state.orchestrator


def _http_error(exc: InterviewError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, RequestValidationError):
        return HTTPException(status_code=400, detail=str(exc))
    if isinstance(exc, SummaryUnavailableError):
        if exc.in_progress:
            return HTTPException(status_code=409, detail="session is still in progress")
        return HTTPException(status_code=404, detail="no graded answers to summarize")
    if isinstance(exc, ConfigurationError):
        logger.error("Interview service misconfigured: %s", exc)
        return HTTPException(status_code=503, detail="grading service is not configured")
    logger.exception("Unexpected interview error")
    return HTTPException(status_code=500, detail="unable to process interview request")


@router.post("/interview/sessions", response_model=StartResp, status_code=201)
def start_session(
    payload: StartReq,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> StartResp:
    session = orchestrator.start_session(user_id=payload.user_id, level=payload.level)
    return StartResp(
        session_id=session.id,
        level=session.level,
        total_questions=len(session.selected_questions),
        question=QuestionPayload.from_question(orchestrator.current_question(session)),
    )


@router.get("/interview/sessions/{session_id}", response_model=SessionResp)
def get_session(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> SessionResp:
    try:
        return SessionResp.from_session(orchestrator.get_session(session_id))
    except InterviewError as exc:
        raise _http_error(exc) from exc


@router.post("/interview/sessions/{session_id}/answer", response_model=AnswerResp)
def submit_answer(
    session_id: str,
    payload: AnswerReq,
    orchestrator: InterviewOrchestrator = Depends(get_orchestrator),
) -> AnswerResp:
    try:
        result = orchestrator.submit_answer(session_id, payload.answer, question_id=payload.question_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc

    analysis = result.analysis
    return AnswerResp(
        session_id=result.session.id,
        status=result.session.status,
        finished=result.finished,
        duplicate=result.duplicate,
        next_question=QuestionPayload.from_question(result.next_question),
        scores=result.session.scores,
        analysis=analysis,
        grade=grade_for(analysis),
        suggestions=suggestions_for(analysis),
        grading_error=result.grading_error,
        summary=result.session.summary,
    )


@router.post("/interview/sessions/{session_id}/finish", response_model=SessionResp)
def finish_session(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> SessionResp:
    try:
        return SessionResp.from_session(orchestrator.finish_session(session_id))
    except InterviewError as exc:
        raise _http_error(exc) from exc


@router.post("/interview/sessions/{session_id}/abort", response_model=SessionResp)
def abort_session(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> SessionResp:
    try:
        return SessionResp.from_session(orchestrator.abort_session(session_id))
    except InterviewError as exc:
        raise _http_error(exc) from exc


@router.get("/interview/sessions/{session_id}/summary", response_model=SessionSummary)
def get_summary(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> SessionSummary:
    try:
        return orchestrator.summary_for(session_id)
    except InterviewError as exc:
        raise _http_error(exc) from exc


@router.get("/interview/sessions/{session_id}/report.pdf")
def download_report(session_id: str, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> Response:
    try:
        session = orchestrator.get_session(session_id)
        pdf_bytes = render_summary_pdf(session)
    except InterviewError as exc:
        raise _http_error(exc) from exc
    headers = {"Content-Disposition": f'attachment; filename="interview-{session.id}.pdf"'}
    return Response(content=pdf_bytes, media_type="application/pdf", headers=headers)


@router.post("/chat", response_model=ChatResp)
def chat(payload: ChatReq, orchestrator: InterviewOrchestrator = Depends(get_orchestrator)) -> ChatResp:
    try:
        result = orchestrator.chat(
            payload.messages,
            session_id=payload.session_id,
            level=payload.level,
            user_id=payload.user_id,
        )
    except InterviewError as exc:
        raise _http_error(exc) from exc
    return ChatResp(**result.model_dump())


__all__ = ["get_orchestrator", "router"]

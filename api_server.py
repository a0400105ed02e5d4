from __future__ import annotations  # FastAPI server exposing visa interview practice sessions

import logging
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import router
from api.schemas import HealthResp
from config import Settings, grading_route, settings as default_settings
from interview.errors import ConfigurationError
from interview.grader import GradingClient
from interview.orchestrator import InterviewOrchestrator
from interview.question_bank import QuestionBank
from interview.session_store import SessionStore


logger = logging.getLogger(__name__)


def build_orchestrator(cfg: Settings) -> InterviewOrchestrator:  # Wire question bank, store and grader
    if not cfg.grading_api_key():
        raise ConfigurationError("OPENAI_API_KEY (or GPT_API_KEY) must be set to grade answers")
    bank = QuestionBank.discover(cfg.QUESTIONS_PATH or None)
    store = SessionStore(bank, ttl_seconds=cfg.SESSION_TTL_SECONDS, max_sessions=cfg.SESSION_MAX_COUNT)
    grader = GradingClient(grading_route(cfg))
    return InterviewOrchestrator(store, grader)


def create_app(
    orchestrator: Optional[InterviewOrchestrator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the API application; configuration errors propagate and abort startup."""

    cfg = settings or default_settings
    if orchestrator is None:
        orchestrator = build_orchestrator(cfg)

    app = FastAPI(title="Visa Interview Practice API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(cfg.CORS_ORIGINS),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.orchestrator = orchestrator

    @app.get("/health", response_model=HealthResp)
    def health() -> HealthResp:  # Liveness probe
        return HealthResp(status="ok", sessions=len(orchestrator.store))

    app.include_router(router)
    return app


def __getattr__(name: str) -> Any:  # `uvicorn api_server:app` builds the app on first access
    if name == "app":
        application = create_app()
        globals()["app"] = application
        return application
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def main() -> None:  # Serve with uvicorn using the app factory
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    uvicorn.run("api_server:create_app", factory=True, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()

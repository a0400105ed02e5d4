from __future__ import annotations  # LLM-backed answer grader

import logging
from typing import List, Optional, Protocol

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from config import LlmRoute
from llm_gateway import HttpClient, LlmFormatError, LlmTransportError, chat

from .errors import ConfigurationError, GradingFormatError, GradingTransportError
from .models import AnalysisResponse, Question, Session
from .prompts import GRADER_SYSTEM_PROMPT, qa_turn


logger = logging.getLogger(__name__)


class Grader(Protocol):  # Anything able to grade one answer in session context
    def analyze(self, session: Session, question: Question, answer: str) -> AnalysisResponse: ...


def build_messages(session: Optional[Session], question_text: str, answer: str) -> List[BaseMessage]:  # Assemble rubric, history and the new answer
    messages: List[BaseMessage] = [SystemMessage(content=GRADER_SYSTEM_PROMPT)]
    if session is not None:
        for previous in session.answers:
            messages.append(HumanMessage(content=qa_turn(previous.question_text, previous.text)))
            if previous.analysis is not None:
                messages.append(AIMessage(content=previous.analysis.model_dump_json()))
    messages.append(HumanMessage(content=qa_turn(question_text, answer)))
    return messages


class GradingClient:  # Grades answers through the configured chat-completion route
    def __init__(self, route: LlmRoute, *, client: Optional[HttpClient] = None) -> None:
        self._route = route
        self._client = client

    @property
    def route(self) -> LlmRoute:
        return self._route

    def has_credential(self) -> bool:
        return bool((self._route.api_key or "").strip())

    def analyze(self, session: Optional[Session], question: Question, answer: str) -> AnalysisResponse:  # Grade one answer with prior turns as context
        if not self.has_credential():
            raise ConfigurationError("grading API key is not configured")
        messages = build_messages(session, question.text, answer)
        try:
            return chat(messages, AnalysisResponse, cfg=self._route, client=self._client)
        except LlmTransportError as exc:
            raise GradingTransportError(str(exc), status=exc.status, body=exc.body) from exc
        except LlmFormatError as exc:
            logger.warning("Grader reply did not match the verdict contract for question %s", question.id)
            raise GradingFormatError(str(exc), content=exc.content) from exc


__all__ = ["Grader", "GradingClient", "build_messages"]

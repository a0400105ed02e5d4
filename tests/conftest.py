import random
import sys
from pathlib import Path
from typing import List, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from interview.errors import GradingError
from interview.models import AnalysisResponse, Question, Session
from interview.orchestrator import InterviewOrchestrator
from interview.question_bank import BUNDLED_QUESTIONS, QuestionBank
from interview.session_store import SessionStore


def make_analysis(
    migration_intent: int = 5,
    goal_understanding: int = 4,
    answer_length: int = 4,
    *,
    overall: str = "Clear and specific answer.",
    improvements: Optional[List[str]] = None,
) -> AnalysisResponse:
    return AnalysisResponse.model_validate(
        {
            "scores": {
                "migration_intent": migration_intent,
                "goal_understanding": goal_understanding,
                "answer_length": answer_length,
            },
            "classification": "",
            "feedback": {
                "overall": overall,
                "by_criterion": {
                    "migration_intent": "Ties to home are clear.",
                    "goal_understanding": "Goals are mostly concrete.",
                    "answer_length": "Concise.",
                },
                "improvements": improvements if improvements is not None else ["Name your future employer."],
            },
        }
    )


class FakeGrader:  # Scripted grader; an exception in the script is raised instead of returned
    def __init__(self, script=None) -> None:
        self.script = list(script or [])
        self.calls: List[str] = []

    def analyze(self, session: Session, question: Question, answer: str) -> AnalysisResponse:
        self.calls.append(question.id)
        item = self.script.pop(0) if self.script else make_analysis()
        if isinstance(item, Exception):
            raise item
        return item


class FailingGrader(FakeGrader):
    def analyze(self, session: Session, question: Question, answer: str) -> AnalysisResponse:
        self.calls.append(question.id)
        raise GradingError("grader unavailable")


@pytest.fixture
def bank() -> QuestionBank:
    return QuestionBank.from_path(BUNDLED_QUESTIONS)


@pytest.fixture
def store(bank) -> SessionStore:
    return SessionStore(bank)


@pytest.fixture
def grader() -> FakeGrader:
    return FakeGrader()


@pytest.fixture
def orchestrator(store, grader) -> InterviewOrchestrator:
    return InterviewOrchestrator(store, grader)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(7)


@pytest.fixture
def analysis_factory():
    return make_analysis


@pytest.fixture
def grader_factory():
    return FakeGrader


@pytest.fixture
def failing_grader() -> FailingGrader:
    return FailingGrader()

"""Question source loading and per-level question selection."""
from __future__ import annotations

import json
import logging
import random
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import ConfigurationError
from .models import Question

logger = logging.getLogger(__name__)

QUESTIONS_FILE = "questions.json"
BUNDLED_QUESTIONS = Path(__file__).resolve().parent / QUESTIONS_FILE

PURPOSE = "Purpose of Study"
ACADEMIC = "Academic Background"
UNIVERSITY = "University Choice"
FINANCIAL = "Financial Capability"
SPONSOR = "Family/Sponsor Info"
POST_GRADUATION = "Post-Graduation Plans"
IMMIGRATION = "Immigration Intent"

CATEGORY_ORDER: List[str] = [
    PURPOSE,
    ACADEMIC,
    UNIVERSITY,
    FINANCIAL,
    SPONSOR,
    POST_GRADUATION,
    IMMIGRATION,
]

# Default ("hard") table: number of questions drawn per category
SELECTION_RULES: Dict[str, int] = {
    PURPOSE: 2,
    ACADEMIC: 2,
    UNIVERSITY: 2,
    FINANCIAL: 2,
    SPONSOR: 1,
    POST_GRADUATION: 2,
    IMMIGRATION: 1,
}

LEVEL_EASY = "easy"
LEVEL_MEDIUM = "medium"
LEVEL_HARD = "hard"

LEVEL_RULES: Dict[str, Dict[str, int]] = {
    LEVEL_EASY: {PURPOSE: 1, UNIVERSITY: 1, FINANCIAL: 1, POST_GRADUATION: 1},
    LEVEL_MEDIUM: {category: 1 for category in CATEGORY_ORDER},
    LEVEL_HARD: SELECTION_RULES,
}

MANDATORY_QUESTIONS: List[Question] = [
    Question(id="q0_college", category="College", text="Which college or university will you attend?"),
    Question(id="q0_major", category="Major", text="What is your major?"),
]


def normalize_level(level: Optional[str]) -> str:
    """Map a caller-supplied level to a known level name, defaulting to hard."""

    value = (level or "").strip().lower()
    return value if value in LEVEL_RULES else LEVEL_HARD


def rules_for_level(level: Optional[str]) -> Dict[str, int]:
    return LEVEL_RULES[normalize_level(level)]


def level_total(level: Optional[str]) -> int:
    """Number of level-selected questions, excluding the mandatory ones."""

    return sum(rules_for_level(level).values())


def sanitize_category(category: str) -> str:
    """Keep ASCII letters and digits, turn spaces and slashes into underscores."""

    chars: List[str] = []
    for char in category:
        if char.isascii() and char.isalnum():
            chars.append(char)
        elif char in (" ", "/"):
            chars.append("_")
    return "".join(chars)


def load_questions(path: Path) -> Dict[str, List[str]]:
    """Read and validate a category -> question texts mapping."""

    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"read questions file {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"questions file {path} is not valid JSON: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigurationError(f"questions file {path} must hold a JSON object")

    categories: Dict[str, List[str]] = {}
    for category, questions in raw.items():
        if not isinstance(questions, list) or not all(isinstance(item, str) for item in questions):
            raise ConfigurationError(f"category '{category}' must be a list of strings")
        categories[str(category)] = list(questions)

    for category in SELECTION_RULES:
        if category not in categories:
            raise ConfigurationError(f"required category '{category}' not found in questions file")
    return categories


def candidate_paths(explicit: Optional[str] = None) -> List[Path]:
    """Paths tried, in order, when looking for the questions file."""

    paths: List[Path] = []
    if explicit:
        paths.append(Path(explicit))
    cwd = Path.cwd()
    paths.extend([cwd / "interview" / QUESTIONS_FILE, cwd / QUESTIONS_FILE])
    paths.append(BUNDLED_QUESTIONS)
    exec_dir = Path(sys.argv[0]).resolve().parent if sys.argv and sys.argv[0] else None
    if exec_dir is not None:
        paths.extend([exec_dir / "interview" / QUESTIONS_FILE, exec_dir / QUESTIONS_FILE])

    unique: List[Path] = []
    for path in paths:
        if path not in unique:
            unique.append(path)
    return unique


def find_questions_file(explicit: Optional[str] = None) -> Path:
    """Return the first candidate path holding a valid questions file.

    Raises:
        ConfigurationError: Naming every tried path when none loads.
    """

    tried: List[str] = []
    last_error: Optional[ConfigurationError] = None
    for path in candidate_paths(explicit):
        tried.append(str(path))
        if not path.is_file():
            continue
        try:
            load_questions(path)
        except ConfigurationError as exc:
            last_error = exc
            logger.warning("Skipping questions file %s: %s", path, exc)
            continue
        return path
    detail = f": {last_error}" if last_error else ""
    raise ConfigurationError(f"could not load {QUESTIONS_FILE} from any of {tried}{detail}")


class QuestionBank:
    """Validated question source plus the per-level selector."""

    def __init__(self, categories: Mapping[str, Sequence[str]], *, source: Optional[Path] = None) -> None:
        missing = [category for category in SELECTION_RULES if category not in categories]
        if missing:
            raise ConfigurationError(f"required categories missing: {', '.join(missing)}")
        self._categories: Dict[str, List[str]] = {key: list(value) for key, value in categories.items()}
        self.source = source

    @classmethod
    def from_path(cls, path: Path) -> "QuestionBank":
        return cls(load_questions(path), source=Path(path))

    @classmethod
    def discover(cls, explicit: Optional[str] = None) -> "QuestionBank":
        """Load the first valid questions file along the search order."""

        bank = cls.from_path(find_questions_file(explicit))
        logger.info(
            "Loaded interview questions from %s (%d categories, %d questions)",
            bank.source,
            len(bank.categories),
            bank.question_count,
        )
        return bank

    @property
    def categories(self) -> Dict[str, List[str]]:
        return {key: list(value) for key, value in self._categories.items()}

    @property
    def question_count(self) -> int:
        return sum(len(value) for value in self._categories.values())

    def select_for_level(self, level: Optional[str] = None, rng: Optional[random.Random] = None) -> List[Question]:
        """Pick a fresh, randomized question list for one session.

        The mandatory college and major questions always come first. Each
        category's candidates are shuffled independently, so two calls with the
        same level are expected to differ; only the count is stable.
        """

        shuffler = rng or random.Random()
        rules = rules_for_level(level)
        selected: List[Question] = [question.model_copy() for question in MANDATORY_QUESTIONS]
        ordinal = 0
        for category in CATEGORY_ORDER:
            count = rules.get(category, 0)
            available = list(self._categories.get(category, []))
            if count <= 0 or not available:
                continue
            shuffler.shuffle(available)
            for text in available[:count]:
                ordinal += 1
                selected.append(
                    Question(
                        id=f"q{ordinal}_{sanitize_category(category)}",
                        category=category,
                        text=text,
                    )
                )
        return selected


__all__ = [
    "BUNDLED_QUESTIONS",
    "CATEGORY_ORDER",
    "LEVEL_EASY",
    "LEVEL_HARD",
    "LEVEL_MEDIUM",
    "LEVEL_RULES",
    "MANDATORY_QUESTIONS",
    "QuestionBank",
    "SELECTION_RULES",
    "candidate_paths",
    "find_questions_file",
    "level_total",
    "load_questions",
    "normalize_level",
    "rules_for_level",
    "sanitize_category",
]

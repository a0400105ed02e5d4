from __future__ import annotations  # Error taxonomy for the interview core

from typing import Optional


class InterviewError(Exception):  # Base error for the interview core
    pass


class ConfigurationError(InterviewError):  # Missing credential or invalid question source
    pass


class NotFoundError(InterviewError):  # Unknown session or question id
    def __init__(self, kind: str, identifier: str) -> None:
        super().__init__(f"{kind} not found: {identifier}")
        self.kind = kind
        self.identifier = identifier


class RequestValidationError(InterviewError):  # Malformed caller input, rejected before any mutation
    pass


class SummaryUnavailableError(InterviewError):  # Session has no graded answers to summarize
    def __init__(self, message: str, *, in_progress: bool = False) -> None:
        super().__init__(message)
        self.in_progress = in_progress


class GradingError(InterviewError):  # Recoverable failure of the external grader
    pass


class GradingTransportError(GradingError):  # Non-2xx status, network failure or timeout
    def __init__(self, message: str, *, status: Optional[int] = None, body: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.body = body


class GradingFormatError(GradingError):  # Grader reply did not match the verdict contract
    def __init__(self, message: str, *, content: str = "") -> None:
        super().__init__(message)
        self.content = content


__all__ = [
    "ConfigurationError",
    "GradingError",
    "GradingFormatError",
    "GradingTransportError",
    "InterviewError",
    "NotFoundError",
    "RequestValidationError",
    "SummaryUnavailableError",
]

from __future__ import annotations  # Configuration schema for LLM routing

from typing import Dict, Optional

from pydantic import BaseModel, Field

from .settings import Settings


GRADING_ROUTE = "grading"  # Route name used for the answer grader


class LlmRoute(BaseModel):  # LLM endpoint configuration
    name: str
    base_url: str
    endpoint: str = ""
    model: str
    timeout_s: float = Field(ge=0.1)
    max_retries: int = Field(default=0, ge=0)
    api_key: Optional[str] = Field(default=None, repr=False)
    api_key_env: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, ge=1)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    extra_headers: Dict[str, str] = Field(default_factory=dict)

    @property
    def url(self) -> str:  # Full endpoint URL
        return f"{self.base_url}{self.endpoint}"


def grading_route(cfg: Settings) -> LlmRoute:  # Build the grading route from settings
    return LlmRoute(
        name=GRADING_ROUTE,
        base_url=cfg.GRADING_API_URL,
        model=cfg.GRADING_MODEL,
        timeout_s=cfg.GRADING_TIMEOUT_S,
        max_retries=cfg.GRADING_MAX_RETRIES,
        api_key=cfg.grading_api_key() or None,
        max_tokens=cfg.GRADING_MAX_TOKENS,
        temperature=cfg.GRADING_TEMPERATURE,
    )

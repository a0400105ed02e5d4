"""Configuration package for the visa interview services."""
from .routes import GRADING_ROUTE, LlmRoute, grading_route
from .settings import Settings, settings

__all__ = [
    "GRADING_ROUTE",
    "LlmRoute",
    "grading_route",
    "Settings",
    "settings",
]

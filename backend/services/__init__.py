# backend/services/__init__.py
"""
ShotCoach Services

Analysis loop, response parsing and coaching logic.
"""

from .cycle_logger import (
    CycleLogger,
    CycleMetrics,
    StageMetrics,
    configure_coaching_logging,
)
from .response_parser import parse_response, parse_score, parse_feedback_text, parse_camera_adjustment

__all__ = [
    # Logging
    "CycleLogger",
    "CycleMetrics",
    "StageMetrics",
    "configure_coaching_logging",
    # Parsing
    "parse_response",
    "parse_score",
    "parse_feedback_text",
    "parse_camera_adjustment",
]

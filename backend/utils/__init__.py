# backend/utils/__init__.py
"""
Utility modules for ShotCoach backend.
"""

from .rate_scheduler import (
    RateScheduler,
    ScheduleDecision,
    monotonic_ms,
    DEFAULT_MIN_INTERVAL_MS,
    DEFAULT_INTERVAL_MS,
)

from .image_encoder import (
    FrameEncoder,
    get_frame_encoder,
)

__all__ = [
    # Rate scheduling
    "RateScheduler",
    "ScheduleDecision",
    "monotonic_ms",
    "DEFAULT_MIN_INTERVAL_MS",
    "DEFAULT_INTERVAL_MS",
    # Image encoding
    "FrameEncoder",
    "get_frame_encoder",
]

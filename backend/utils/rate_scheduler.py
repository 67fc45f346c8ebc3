# backend/utils/rate_scheduler.py
"""
Rate scheduling for the continuous analysis loop.

Keeps vision-model calls spaced out so a live coaching session does
not hammer the inference provider, without forcing a fixed-phase tick:
once the minimum interval has elapsed the next cycle may start at once.
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_MS = 2000
DEFAULT_INTERVAL_MS = 3000


def monotonic_ms() -> float:
    """Monotonic clock in milliseconds"""
    return time.monotonic() * 1000


@dataclass
class ScheduleDecision:
    """Result of one scheduling computation (for logging/debugging)"""
    delay_ms: float
    elapsed_ms: Optional[float]
    first_cycle: bool

    def to_dict(self) -> Dict:
        return {
            "delayMs": self.delay_ms,
            "elapsedMs": self.elapsed_ms,
            "firstCycle": self.first_cycle,
        }


class RateScheduler:
    """
    Computes the delay before the next analysis cycle may start.

    delay = max(0, min_interval - (now - last_cycle_timestamp))

    A last timestamp of None means "never ran" and yields zero delay.
    """

    def __init__(
        self,
        min_interval_ms: float = DEFAULT_MIN_INTERVAL_MS,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        clock: Optional[Callable[[], float]] = None,
    ):
        """
        Initialize scheduler.

        Args:
            min_interval_ms: Minimum spacing between two cycle starts
            interval_ms: Nominal cycle period, used as the retry delay when
                the camera is not ready
            clock: Millisecond clock (monotonic by default)
        """
        if min_interval_ms < 0:
            raise ValueError(f"min_interval_ms must be >= 0, got {min_interval_ms}")
        if interval_ms < min_interval_ms:
            raise ValueError(
                f"interval_ms ({interval_ms}) must be >= min_interval_ms ({min_interval_ms})"
            )
        self.min_interval_ms = min_interval_ms
        self.interval_ms = interval_ms
        self.clock = clock or monotonic_ms

    def now(self) -> float:
        return self.clock()

    def compute_delay(self, last_cycle_ms: Optional[float], now_ms: Optional[float] = None) -> float:
        """
        Delay in ms before the next cycle may start.

        Args:
            last_cycle_ms: Timestamp of the last cycle start, None if none ran yet
            now_ms: Current time (defaults to the scheduler clock)
        """
        return self.decide(last_cycle_ms, now_ms).delay_ms

    def decide(self, last_cycle_ms: Optional[float], now_ms: Optional[float] = None) -> ScheduleDecision:
        if last_cycle_ms is None:
            return ScheduleDecision(delay_ms=0, elapsed_ms=None, first_cycle=True)

        now = self.now() if now_ms is None else now_ms
        elapsed = now - last_cycle_ms
        delay = max(0, self.min_interval_ms - elapsed)
        logger.debug(f"Next cycle in {delay:.0f}ms ({elapsed:.0f}ms since last cycle)")
        return ScheduleDecision(delay_ms=delay, elapsed_ms=elapsed, first_cycle=False)

    def retry_delay(self) -> float:
        """Delay used when a cycle was skipped because the camera was not ready"""
        return self.interval_ms

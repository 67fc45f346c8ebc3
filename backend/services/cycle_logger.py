# backend/services/cycle_logger.py
"""
Analysis cycle logging and metrics.

Provides structured logging and per-stage timing for each
capture -> encode -> inference -> parse -> dispatch cycle.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Generator

logger = logging.getLogger("shotcoach.cycle")


@dataclass
class StageMetrics:
    """Metrics for a single cycle stage"""
    stage: str
    started_at: datetime
    ended_at: Optional[datetime] = None
    duration_ms: Optional[float] = None
    success: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def complete(self, success: bool = True, error: Optional[str] = None) -> None:
        """Mark stage as complete"""
        self.ended_at = datetime.utcnow()
        self.duration_ms = (self.ended_at - self.started_at).total_seconds() * 1000
        self.success = success
        self.error = error

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stage": self.stage,
            "startedAt": self.started_at.isoformat() + "Z",
            "endedAt": self.ended_at.isoformat() + "Z" if self.ended_at else None,
            "durationMs": self.duration_ms,
            "success": self.success,
            "error": self.error,
            "metadata": self.metadata,
        }


@dataclass
class CycleMetrics:
    """Aggregated metrics for one analysis cycle"""
    session_id: str
    cycle: int
    started_at: datetime = field(default_factory=datetime.utcnow)
    ended_at: Optional[datetime] = None
    total_duration_ms: Optional[float] = None
    stages: List[StageMetrics] = field(default_factory=list)
    outcome: str = "in_progress"  # delivered, skipped, failed, discarded

    def add_stage(self, stage: StageMetrics) -> None:
        self.stages.append(stage)

    def complete(self, outcome: str) -> None:
        """Mark cycle as complete"""
        self.ended_at = datetime.utcnow()
        self.total_duration_ms = (self.ended_at - self.started_at).total_seconds() * 1000
        self.outcome = outcome

    @property
    def failed_stage(self) -> Optional[str]:
        for stage in self.stages:
            if not stage.success:
                return stage.stage
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "cycle": self.cycle,
            "startedAt": self.started_at.isoformat() + "Z",
            "endedAt": self.ended_at.isoformat() + "Z" if self.ended_at else None,
            "totalDurationMs": self.total_duration_ms,
            "stages": [s.to_dict() for s in self.stages],
            "outcome": self.outcome,
        }

    def summary(self) -> str:
        """Generate human-readable summary"""
        lines = [
            f"Cycle {self.cycle} of session {self.session_id}",
            f"  Outcome: {self.outcome.upper()}",
            f"  Total time: {self.total_duration_ms:.1f}ms" if self.total_duration_ms else "  Total time: in progress",
        ]

        if self.stages:
            lines.append("  Stages:")
            for stage in self.stages:
                status = "OK" if stage.success else "FAILED"
                duration = f"{stage.duration_ms:.1f}ms" if stage.duration_ms is not None else "..."
                lines.append(f"    - {stage.stage}: {status} ({duration})")

        return "\n".join(lines)


class CycleLogger:
    """
    Structured logger for one analysis cycle.

    Provides contextual logging with session/cycle tagging and timing.
    """

    def __init__(self, session_id: str, cycle: int):
        self.session_id = session_id
        self.cycle = cycle
        self.metrics = CycleMetrics(session_id=session_id, cycle=cycle)

    def _log(self, level: int, message: str, **kwargs: Any) -> None:
        """Log with cycle context"""
        extra = {
            "session_id": self.session_id,
            "cycle": self.cycle,
            **kwargs,
        }
        logger.log(level, f"[{self.session_id}#{self.cycle}] {message}", extra=extra)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, **kwargs)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, **kwargs)

    @contextmanager
    def stage(
        self,
        name: str,
        **metadata: Any,
    ) -> Generator[StageMetrics, None, None]:
        """
        Context manager for timing cycle stages.

        Usage:
            with cycle_log.stage("capture") as stage:
                frame = await camera.capture()
                stage.metadata["hasFrame"] = frame is not None
        """
        stage_metrics = StageMetrics(
            stage=name,
            started_at=datetime.utcnow(),
            metadata=metadata,
        )

        try:
            yield stage_metrics
            stage_metrics.complete(success=True)
            self.debug(f"Stage '{name}' completed in {stage_metrics.duration_ms:.1f}ms")
        except Exception as e:
            stage_metrics.complete(success=False, error=str(e))
            self.warning(f"Stage '{name}' failed: {e}")
            raise
        finally:
            self.metrics.add_stage(stage_metrics)

    def complete(self, outcome: str) -> CycleMetrics:
        """Complete cycle and return metrics"""
        self.metrics.complete(outcome=outcome)
        level = logging.INFO if outcome == "delivered" else logging.WARNING
        self._log(level, f"Cycle {outcome} in {self.metrics.total_duration_ms:.1f}ms")
        self.debug(self.metrics.summary())
        return self.metrics


def configure_coaching_logging(
    level: Optional[int] = None,
    format_string: Optional[str] = None,
) -> None:
    """
    Configure coaching cycle logging.

    Args:
        level: Logging level (defaults to LOG_LEVEL from settings)
        format_string: Optional custom format string
    """
    if level is None:
        from config import get_settings
        level = logging.getLevelName(get_settings().log_level.upper())

    if format_string is None:
        format_string = (
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
        )

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))

    cycle_logger = logging.getLogger("shotcoach.cycle")
    cycle_logger.setLevel(level)
    cycle_logger.handlers.clear()
    cycle_logger.addHandler(handler)
    cycle_logger.propagate = False

# backend/services/analysis_loop.py
"""
Continuous analysis loop.

Repeatedly captures a frame, encodes it, asks the vision model for
coaching and hands the parsed result to a feedback callback. Runs on
the asyncio event loop: one pending timer, at most one cycle in flight.

States:
    IDLE       -> not running (initial and after stop())
    SCHEDULED  -> timer armed for the next cycle
    IN_FLIGHT  -> capture/encode/inference/parse underway

A failing cycle is logged and skipped; only stop() ends a session.
"""

import asyncio
import inspect
import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union
from uuid import uuid4

from config import get_settings
from errors import ShotCoachError
from integrations.camera_device import CameraDevice
from models import AnalysisOptions, CameraAdjustment, ParsedFeedback, merge_options
from services.cycle_logger import CycleLogger, CycleMetrics
from services.providers.base import InferenceProvider
from services.response_parser import parse_response
from utils.image_encoder import FrameEncoder, get_frame_encoder
from utils.rate_scheduler import RateScheduler

logger = logging.getLogger(__name__)

FeedbackCallback = Callable[
    [str, int, Optional[CameraAdjustment]],
    Union[None, Awaitable[None]],
]


class LoopState(str, Enum):
    """Lifecycle state of an AnalysisLoop"""
    IDLE = "idle"
    SCHEDULED = "scheduled"
    IN_FLIGHT = "in_flight"


class AnalysisLoop:
    """
    Self-scheduling capture -> encode -> infer -> parse -> dispatch loop.

    The feedback callback is invoked at most once per successful cycle
    with (feedback, score, camera_adjustment); it may be a plain function
    or a coroutine function. Must be started from a running event loop.
    """

    def __init__(
        self,
        camera: Optional[CameraDevice],
        provider: InferenceProvider,
        on_feedback: FeedbackCallback,
        options: Optional[AnalysisOptions] = None,
        encoder: Optional[FrameEncoder] = None,
        scheduler: Optional[RateScheduler] = None,
        session_id: Optional[str] = None,
    ):
        settings = get_settings()
        self.camera = camera
        self.provider = provider
        self.on_feedback = on_feedback
        self.encoder = encoder or get_frame_encoder()
        self.scheduler = scheduler or RateScheduler(
            min_interval_ms=settings.analysis_min_interval_ms,
            interval_ms=settings.analysis_interval_ms,
        )
        self.session_id = session_id or uuid4().hex[:8]

        self._options = options or AnalysisOptions()
        self._running = False
        self._generation = 0
        self._last_cycle_ms: Optional[float] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._inflight: Optional[asyncio.Task] = None
        self._next_delay_ms: Optional[float] = None
        self._cycle_count = 0
        self._last_metrics: Optional[CycleMetrics] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def state(self) -> LoopState:
        if not self._running:
            return LoopState.IDLE
        if self._inflight is not None and not self._inflight.done():
            return LoopState.IN_FLIGHT
        if self._timer is not None:
            return LoopState.SCHEDULED
        return LoopState.IDLE

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def options(self) -> AnalysisOptions:
        return self._options

    @property
    def next_delay_ms(self) -> Optional[float]:
        """Delay used when the current timer was armed"""
        return self._next_delay_ms

    @property
    def has_pending_timer(self) -> bool:
        return self._timer is not None

    @property
    def cycle_count(self) -> int:
        return self._cycle_count

    @property
    def current_cycle(self) -> Optional[asyncio.Task]:
        """Task of the cycle in flight, if any"""
        if self._inflight is not None and not self._inflight.done():
            return self._inflight
        return None

    @property
    def last_cycle_metrics(self) -> Optional[CycleMetrics]:
        return self._last_metrics

    def start(self) -> None:
        """Start the loop; the first cycle runs as soon as possible. No-op if running."""
        if self._running:
            logger.debug(f"Analysis loop {self.session_id} already running")
            return

        self._running = True
        self._generation += 1
        self._last_cycle_ms = None
        logger.info(f"Analysis loop {self.session_id} started with provider {self.provider.name}")
        self._arm(self.scheduler.compute_delay(self._last_cycle_ms))

    def stop(self) -> None:
        """
        Stop the loop. No-op if already stopped.

        The pending timer is cancelled at once; a cycle already in flight
        runs to completion but its result is discarded.
        """
        if not self._running:
            return

        self._running = False
        self._cancel_timer()
        logger.info(f"Analysis loop {self.session_id} stopped after {self._cycle_count} cycle(s)")

    def update_options(self, patch: Union[Mapping[str, Any], AnalysisOptions]) -> AnalysisOptions:
        """
        Merge new options into the active configuration.

        Takes effect on the next inference call; timing is not affected.

        Raises:
            ValidationError: On unknown option keys or invalid values
        """
        if isinstance(patch, AnalysisOptions):
            self._options = patch
        else:
            self._options = merge_options(self._options, patch)
        logger.debug(f"Analysis loop {self.session_id} options updated: {self._options.to_dict()}")
        return self._options

    async def drain(self) -> None:
        """Wait for the cycle in flight (if any) to finish"""
        task = self.current_cycle
        if task is not None:
            await asyncio.wait([task])

    def snapshot(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "state": self.state.value,
            "running": self._running,
            "lastCycleTimestampMs": self._last_cycle_ms,
            "pendingTimer": self._timer is not None,
            "nextDelayMs": self._next_delay_ms,
            "cycleCount": self._cycle_count,
        }

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _arm(self, delay_ms: float) -> None:
        if not self._running:
            return

        self._cancel_timer()
        self._next_delay_ms = delay_ms
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(delay_ms / 1000, self._on_timer, self._generation)

    def _on_timer(self, generation: int) -> None:
        self._timer = None
        if not self._is_current(generation):
            return

        if self._inflight is not None and not self._inflight.done():
            # A cycle from before a stop()/start() is still finishing
            self._arm(self.scheduler.retry_delay())
            return

        if not self._camera_ready():
            logger.debug(f"Analysis loop {self.session_id}: camera not ready, skipping cycle")
            self._arm(self.scheduler.retry_delay())
            return

        self._inflight = asyncio.ensure_future(self._run_cycle(generation))

    def _camera_ready(self) -> bool:
        if self.camera is None:
            return False
        try:
            return bool(self.camera.is_ready())
        except Exception:
            logger.exception(f"Analysis loop {self.session_id}: camera readiness check failed")
            return False

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    async def _run_cycle(self, generation: int) -> None:
        self._cycle_count += 1
        cycle_log = CycleLogger(self.session_id, self._cycle_count)
        self._last_cycle_ms = self.scheduler.now()
        options = self._options
        outcome = "failed"
        rearm = True

        try:
            parsed = await self._analyze(cycle_log, options, generation)
            if parsed is None:
                outcome = "skipped"
            elif not self._is_current(generation):
                outcome = "discarded"
            else:
                await self._dispatch(cycle_log, parsed)
                outcome = "delivered"
        except asyncio.CancelledError:
            outcome = "cancelled"
            rearm = False
            raise
        except ShotCoachError as e:
            cycle_log.warning(f"Cycle skipped: {e.message}", error=e.to_dict())
        except Exception:
            logger.exception(f"Unexpected error in analysis cycle {self.session_id}#{cycle_log.cycle}")
        finally:
            self._last_metrics = cycle_log.complete(outcome)
            if rearm and self._is_current(generation):
                self._arm(self.scheduler.compute_delay(self._last_cycle_ms))

    async def _analyze(
        self,
        cycle_log: CycleLogger,
        options: AnalysisOptions,
        generation: int,
    ) -> Optional[ParsedFeedback]:
        with cycle_log.stage("capture", camera=self.camera.name) as stage:
            frame = await self.camera.capture()
            stage.metadata["hasFrame"] = frame is not None

        if frame is None:
            cycle_log.warning("Camera returned no frame")
            return None

        with cycle_log.stage("encode"):
            encoded = await asyncio.to_thread(self.encoder.encode, frame)

        if not self._is_current(generation):
            cycle_log.debug("Loop stopped before inference, dropping frame")
            return None

        with cycle_log.stage("inference", provider=self.provider.name):
            raw_response = await self.provider.infer(encoded, options)

        with cycle_log.stage("parse") as stage:
            parsed = parse_response(raw_response)
            stage.metadata["score"] = parsed.score

        return parsed

    async def _dispatch(self, cycle_log: CycleLogger, parsed: ParsedFeedback) -> None:
        with cycle_log.stage("dispatch"):
            result = self.on_feedback(parsed.feedback, parsed.score, parsed.camera_adjustment)
            if inspect.isawaitable(result):
                await result

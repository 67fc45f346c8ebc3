# backend/services/coaching_session.py
"""
Coaching Session

Top-level object for live coaching: wires the camera, the analysis loop,
camera adjustments, instruction building and the reference photo.
"""

import inspect
import logging
from typing import Any, Callable, List, Mapping, Optional, Union

from integrations.camera_device import CameraDevice
from models import (
    AnalysisOptions,
    AppliedAdjustment,
    CameraAdjustment,
    CoachingFeedback,
    ReferencePhoto,
)
from services.adjustment_applier import CameraAdjustmentApplier
from services.analysis_loop import AnalysisLoop, LoopState
from services.instruction_engine import InstructionEngine
from services.providers import InferenceProvider, get_provider
from services.reference_session import ReferenceSession, ReferenceSource
from utils.image_encoder import FrameEncoder, get_frame_encoder
from utils.rate_scheduler import RateScheduler

logger = logging.getLogger(__name__)

FeedbackListener = Callable[[CoachingFeedback], Any]


class CoachingSession:
    """
    Live coaching session for one camera.

    Each successful cycle:
    1. Applies the model's camera adjustment (only with AI control enabled)
    2. Builds UI-ready CoachingFeedback
    3. Stores it as `latest` and notifies listeners
    """

    def __init__(
        self,
        camera: Optional[CameraDevice],
        provider: Optional[InferenceProvider] = None,
        options: Optional[AnalysisOptions] = None,
        encoder: Optional[FrameEncoder] = None,
        scheduler: Optional[RateScheduler] = None,
        applier: Optional[CameraAdjustmentApplier] = None,
        instruction_engine: Optional[InstructionEngine] = None,
        reference_session: Optional[ReferenceSession] = None,
        session_id: Optional[str] = None,
    ):
        self.camera = camera
        self.provider = provider or get_provider()
        encoder = encoder or get_frame_encoder()

        self.applier = applier or CameraAdjustmentApplier()
        self.instructions = instruction_engine or InstructionEngine()
        self.references = reference_session or ReferenceSession(self.provider, encoder=encoder)
        self.loop = AnalysisLoop(
            camera=camera,
            provider=self.provider,
            on_feedback=self._handle_cycle,
            options=options,
            encoder=encoder,
            scheduler=scheduler,
            session_id=session_id,
        )
        self.references.add_listener(self._on_reference_changed)

        self._listeners: List[FeedbackListener] = []
        self._latest: Optional[CoachingFeedback] = None
        self._last_applied: Optional[AppliedAdjustment] = None

    @property
    def session_id(self) -> str:
        return self.loop.session_id

    @property
    def latest(self) -> Optional[CoachingFeedback]:
        """Last successful feedback; kept when later cycles are skipped"""
        return self._latest

    @property
    def last_applied(self) -> Optional[AppliedAdjustment]:
        return self._last_applied

    @property
    def options(self) -> AnalysisOptions:
        return self.loop.options

    @property
    def state(self) -> LoopState:
        return self.loop.state

    @property
    def is_running(self) -> bool:
        return self.loop.is_running

    def start(self) -> None:
        self.loop.start()

    def stop(self) -> None:
        self.loop.stop()

    def update_options(self, patch: Union[Mapping[str, Any], AnalysisOptions]) -> AnalysisOptions:
        return self.loop.update_options(patch)

    async def set_reference(self, source: ReferenceSource) -> ReferencePhoto:
        return await self.references.set_reference(source)

    async def clear_reference(self) -> None:
        await self.references.clear()

    def add_listener(self, listener: FeedbackListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: FeedbackListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _on_reference_changed(self, photo: Optional[ReferencePhoto]) -> None:
        self.loop.update_options(self.references.options_patch())

    async def _handle_cycle(
        self,
        feedback: str,
        score: int,
        camera_adjustment: Optional[CameraAdjustment],
    ) -> None:
        if camera_adjustment is not None and self.loop.options.ai_control_enabled:
            self._last_applied = self.applier.apply(camera_adjustment, self.camera)

        coaching = self.instructions.build_feedback(feedback, score, camera_adjustment)
        self._latest = coaching
        logger.debug(
            f"Session {self.session_id}: score={score}, "
            f"{len(coaching.instructions)} instruction(s), perfect={coaching.perfect_shot}"
        )

        for listener in list(self._listeners):
            try:
                result = listener(coaching)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception(f"Feedback listener failed in session {self.session_id}")

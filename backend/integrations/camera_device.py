# backend/integrations/camera_device.py
"""
Abstract camera interface used by the coaching loop.

The loop only needs to grab a frame; the adjustment applier only needs
the four live controls. Anything that can do both (a webcam, a phone
bridge, a test double) can back a coaching session.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional

from models import FlashMode


class CameraDevice(ABC):
    """
    Live camera consumed by AnalysisLoop and CameraAdjustmentApplier.

    Control setters are fire-and-forget and expected to be idempotent.
    Values passed to them are already clamped to their valid ranges.
    """

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def is_ready(self) -> bool:
        """True when capture() can be attempted"""
        pass

    @abstractmethod
    async def capture(self) -> Optional[Any]:
        """
        Grab a single frame.

        Returns:
            Frame array, or None if no frame was available

        Raises:
            CaptureError: If the device failed; must fail fast, never block indefinitely
        """
        pass

    @abstractmethod
    def set_zoom(self, zoom: float) -> None:
        """Zoom in [0, 1], 0 is widest"""
        pass

    @abstractmethod
    def set_focus_point(self, x: float, y: float) -> None:
        """Normalized focus point, each coordinate in [0, 1]"""
        pass

    @abstractmethod
    def set_flash(self, mode: FlashMode) -> None:
        pass

    @abstractmethod
    def set_exposure_compensation(self, ev: float) -> None:
        """Exposure compensation in EV, [-2, 2]"""
        pass

    def release(self) -> None:
        """Free the underlying device"""
        pass

# backend/services/adjustment_applier.py
"""
Camera Adjustment Applier

Validates and clamps a CAMERA_ADJUST command from the vision model and
pushes it to the live camera. A partially usable command is still
applied: bad fields are dropped one by one, never the whole command.
"""

import logging
from typing import Callable, Optional

from config import get_settings
from integrations.camera_device import CameraDevice
from models import AppliedAdjustment, CameraAdjustment, FlashMode, FocusPoint
from models.coaching import is_finite_number

logger = logging.getLogger(__name__)

ZOOM_RANGE = (0.0, 1.0)
FOCUS_RANGE = (0.0, 1.0)
EXPOSURE_RANGE = (-2.0, 2.0)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


class CameraAdjustmentApplier:
    """
    Applies parsed camera adjustments to a CameraDevice.

    Handles:
    - Range clamping (zoom, focus point, exposure compensation)
    - Flash mode validation (unknown modes keep the current flash)
    - Per-control error isolation
    """

    def __init__(self, flash_on_as_torch: Optional[bool] = None):
        """
        Args:
            flash_on_as_torch: Send "on" as "torch" so continuous analysis
                does not fire a flash burst every cycle (FLASH_ON_AS_TORCH)
        """
        self.flash_on_as_torch = (
            get_settings().flash_on_as_torch if flash_on_as_torch is None else flash_on_as_torch
        )

    def apply(self, adjustment: Optional[CameraAdjustment], camera: Optional[CameraDevice]) -> AppliedAdjustment:
        """
        Apply an adjustment to the camera. Never raises.

        Args:
            adjustment: Parsed CAMERA_ADJUST command (None is a no-op)
            camera: Live camera to drive (None is a no-op)

        Returns:
            AppliedAdjustment with the values sent and the fields dropped/failed
        """
        result = AppliedAdjustment()
        if adjustment is None or camera is None:
            return result

        zoom = self._number(adjustment.zoom, ZOOM_RANGE, "zoom", result)
        if zoom is not None and self._call(camera.set_zoom, "zoom", result, zoom):
            result.zoom = zoom

        focus = self._focus_point(adjustment.focus_point, result)
        if focus is not None and self._call(camera.set_focus_point, "focusPoint", result, focus.x, focus.y):
            result.focus_point = focus

        flash = self._flash(adjustment.flash, result)
        if flash is not None and self._call(camera.set_flash, "flash", result, flash):
            result.flash = flash

        exposure = self._number(
            adjustment.exposure_compensation, EXPOSURE_RANGE, "exposureCompensation", result
        )
        if exposure is not None and self._call(camera.set_exposure_compensation, "exposureCompensation", result, exposure):
            result.exposure_compensation = exposure

        logger.info(f"Applied camera adjustment to {camera.name}: {result.to_dict()}")
        return result

    @staticmethod
    def _number(value, value_range, label: str, result: AppliedAdjustment) -> Optional[float]:
        if value is None:
            return None
        if not is_finite_number(value):
            logger.warning(f"Dropping {label}: not a finite number ({value!r})")
            result.dropped.append(label)
            return None
        return clamp(float(value), *value_range)

    @staticmethod
    def _focus_point(point: Optional[FocusPoint], result: AppliedAdjustment) -> Optional[FocusPoint]:
        if point is None:
            return None
        if not is_finite_number(point.x) or not is_finite_number(point.y):
            logger.warning(f"Dropping focusPoint: non-finite coordinates ({point!r})")
            result.dropped.append("focusPoint")
            return None
        return FocusPoint(x=clamp(float(point.x), *FOCUS_RANGE), y=clamp(float(point.y), *FOCUS_RANGE))

    def _flash(self, value: Optional[str], result: AppliedAdjustment) -> Optional[FlashMode]:
        if value is None:
            return None
        try:
            mode = FlashMode(str(value).strip().lower())
        except ValueError:
            logger.warning(f"Ignoring unrecognized flash mode {value!r}, keeping current flash")
            result.dropped.append("flash")
            return None
        if mode == FlashMode.ON and self.flash_on_as_torch:
            return FlashMode.TORCH
        return mode

    @staticmethod
    def _call(setter: Callable, label: str, result: AppliedAdjustment, *args) -> bool:
        try:
            setter(*args)
            return True
        except Exception as e:
            logger.warning(f"Camera rejected {label}={args}: {e}")
            result.failed.append(label)
            return False

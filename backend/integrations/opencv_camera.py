# backend/integrations/opencv_camera.py
"""
OpenCV-backed live camera.

Wraps cv2.VideoCapture for local webcams and RTSP/HTTP streams.
Blocking reads run in a worker thread so the coaching event loop keeps
serving timers and stop requests while a frame is being grabbed.
"""

import asyncio
import logging
from typing import Any, Optional, Union

from config import get_settings
from errors import CameraUnavailableError, CaptureError
from models import FlashMode

from .camera_device import CameraDevice

logger = logging.getLogger(__name__)
settings = get_settings()

# Zoom is exposed as normalized [0, 1]; most UVC drivers use this raw range
DEFAULT_ZOOM_RANGE = (100.0, 500.0)
# Driver exposure steps per EV
EXPOSURE_STEPS_PER_EV = 1.0


class OpenCVCamera(CameraDevice):
    """CameraDevice backed by cv2.VideoCapture"""

    def __init__(
        self,
        source: Union[int, str, None] = None,
        zoom_range: tuple = DEFAULT_ZOOM_RANGE,
        capture_timeout_seconds: float = 5.0,
    ):
        """
        Args:
            source: Device index or stream URL (defaults to CAMERA_INDEX)
            zoom_range: Raw CAP_PROP_ZOOM range mapped onto [0, 1]
            capture_timeout_seconds: Upper bound for a single frame read
        """
        self.source = settings.camera_index if source is None else source
        self.zoom_range = zoom_range
        self.capture_timeout_seconds = capture_timeout_seconds
        self._capture = None
        self._pending_read: Optional[asyncio.Future] = None
        self._base_exposure: Optional[float] = None
        self.flash_mode = FlashMode.OFF
        self.focus_point = (0.5, 0.5)

    @property
    def name(self) -> str:
        return f"opencv:{self.source}"

    def open(self) -> "OpenCVCamera":
        """Open the device; safe to call more than once"""
        import cv2

        if self._capture is not None and self._capture.isOpened():
            return self

        capture = cv2.VideoCapture(self.source)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(source=str(self.source))

        self._capture = capture
        self._base_exposure = capture.get(cv2.CAP_PROP_EXPOSURE)
        logger.info(f"Opened camera {self.name}")
        return self

    def is_ready(self) -> bool:
        return self._capture is not None and self._capture.isOpened()

    async def capture(self) -> Optional[Any]:
        if not self.is_ready():
            raise CameraUnavailableError(source=str(self.source))

        if self._pending_read is not None and not self._pending_read.done():
            # VideoCapture is not thread-safe; wait for the stuck read to return
            raise CaptureError(
                message="Previous frame read is still running",
                details={"source": str(self.source)},
            )

        read = asyncio.ensure_future(asyncio.to_thread(self._capture.read))
        read.add_done_callback(self._read_finished)
        self._pending_read = read

        try:
            ok, frame = await asyncio.wait_for(
                asyncio.shield(read),
                timeout=self.capture_timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise CaptureError(
                message=f"Frame read timed out after {self.capture_timeout_seconds}s",
                details={"source": str(self.source)},
            )

        if not ok:
            logger.debug(f"Camera {self.name} returned no frame")
            return None
        return frame

    def _read_finished(self, read: "asyncio.Future") -> None:
        if read is self._pending_read:
            self._pending_read = None
        if not read.cancelled() and read.exception() is not None:
            logger.debug(f"Camera {self.name} read failed: {read.exception()}")

    def set_zoom(self, zoom: float) -> None:
        import cv2

        raw = self._scale(zoom, self.zoom_range)
        self._set_property(cv2.CAP_PROP_ZOOM, raw, "zoom")

    def set_focus_point(self, x: float, y: float) -> None:
        import cv2

        # UVC has no focus-point API; keep the point and drive autofocus
        self.focus_point = (x, y)
        self._set_property(cv2.CAP_PROP_AUTOFOCUS, 1, "autofocus")

    def set_flash(self, mode: FlashMode) -> None:
        # Webcams have no flash; the mode is tracked for the UI
        self.flash_mode = mode
        logger.debug(f"Camera {self.name} flash mode -> {mode.value}")

    def set_exposure_compensation(self, ev: float) -> None:
        import cv2

        if self._base_exposure is None:
            logger.debug(f"Camera {self.name} has no base exposure, skipping compensation")
            return
        raw = self._base_exposure + ev * EXPOSURE_STEPS_PER_EV
        self._set_property(cv2.CAP_PROP_EXPOSURE, raw, "exposure")

    def release(self) -> None:
        if self._capture is not None:
            self._capture.release()
            self._capture = None
            logger.info(f"Released camera {self.name}")

    def _set_property(self, prop: int, value: float, label: str) -> None:
        if not self.is_ready():
            raise CameraUnavailableError(source=str(self.source))
        accepted = self._capture.set(prop, value)
        if not accepted:
            logger.debug(f"Camera {self.name} ignored {label}={value}")

    @staticmethod
    def _scale(value: float, value_range: tuple) -> float:
        low, high = value_range
        return low + (high - low) * value

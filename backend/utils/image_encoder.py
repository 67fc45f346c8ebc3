# backend/utils/image_encoder.py
"""
Frame downsampling and JPEG encoding for vision model requests.

Frames are shrunk to a small width and compressed hard before being
sent: the model only needs composition and lighting, and a smaller
payload keeps each cycle's network time down.

cv2 is imported lazily so modules that only need the scheduler or the
parser do not pull OpenCV in.
"""

import base64
import logging
from pathlib import Path
from typing import Any, Optional, Tuple, Union

from config import get_settings
from errors import EncodeError, InvalidImageError

logger = logging.getLogger(__name__)


class FrameEncoder:
    """Downsample + JPEG encode + base64, backed by OpenCV"""

    def __init__(self, target_width: Optional[int] = None, quality: Optional[int] = None):
        settings = get_settings()
        self.target_width = target_width or settings.encode_target_width
        self.quality = quality if quality is not None else settings.encode_jpeg_quality

    def encode(
        self,
        frame: Any,
        target_width: Optional[int] = None,
        quality: Optional[int] = None,
    ) -> str:
        """
        Encode a camera frame for the vision model.

        Args:
            frame: BGR (H, W, 3) or grayscale (H, W) uint8 array
            target_width: Output width; frames narrower than this are not upscaled
            quality: JPEG quality 1-100

        Returns:
            Base64 JPEG text (no data URL prefix)

        Raises:
            EncodeError: If the frame is empty or JPEG encoding fails
        """
        import cv2

        width = target_width or self.target_width
        jpeg_quality = quality if quality is not None else self.quality
        if not 1 <= jpeg_quality <= 100:
            raise EncodeError(f"JPEG quality must be 1-100, got {jpeg_quality}")

        if frame is None or getattr(frame, "size", 0) == 0:
            raise EncodeError("empty frame")

        resized = self._resize(frame, width)
        ok, buffer = cv2.imencode(".jpg", resized, [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)])
        if not ok:
            raise EncodeError("cv2.imencode returned failure", details={"shape": list(frame.shape)})

        encoded = base64.b64encode(buffer.tobytes()).decode("utf-8")
        logger.debug(
            f"Encoded frame {frame.shape[1]}x{frame.shape[0]} -> "
            f"{resized.shape[1]}x{resized.shape[0]} ({len(encoded)} base64 chars)"
        )
        return encoded

    def encode_bytes(self, data: bytes, target_width: Optional[int] = None) -> str:
        """
        Decode an image file's bytes (JPEG/PNG/WebP) and re-encode it.

        Raises:
            InvalidImageError: If the bytes are not a decodable image
        """
        import cv2
        import numpy as np

        if not data:
            raise InvalidImageError("no image data")

        frame = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        if frame is None:
            raise InvalidImageError("could not decode image data")
        return self.encode(frame, target_width=target_width)

    def encode_file(self, path: Union[str, Path], target_width: Optional[int] = None) -> str:
        """
        Read and re-encode an image file.

        Raises:
            InvalidImageError: If the file is missing or not an image
        """
        image_path = Path(path)
        if not image_path.is_file():
            raise InvalidImageError(f"file not found: {image_path}")
        return self.encode_bytes(image_path.read_bytes(), target_width=target_width)

    @staticmethod
    def _resize(frame: Any, width: int) -> Any:
        import cv2

        height, current_width = frame.shape[:2]
        if current_width <= width:
            return frame
        new_size: Tuple[int, int] = (width, max(1, round(height * width / current_width)))
        return cv2.resize(frame, new_size, interpolation=cv2.INTER_AREA)


# Global encoder instance
_frame_encoder: Optional[FrameEncoder] = None


def get_frame_encoder() -> FrameEncoder:
    """Get or create the frame encoder singleton"""
    global _frame_encoder
    if _frame_encoder is None:
        _frame_encoder = FrameEncoder()
    return _frame_encoder

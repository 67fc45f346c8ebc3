"""
Unit tests for FrameEncoder (real OpenCV encoding on synthetic frames).
"""

import base64

import cv2
import numpy as np
import pytest

from errors import EncodeError, InvalidImageError
from utils.image_encoder import FrameEncoder


def decode(encoded):
    data = np.frombuffer(base64.b64decode(encoded), dtype=np.uint8)
    return cv2.imdecode(data, cv2.IMREAD_COLOR)


class TestEncode:
    """Tests for frame encoding"""

    def test_downsizes_preserving_aspect(self):
        frame = np.zeros((720, 1280, 3), dtype=np.uint8)
        image = decode(FrameEncoder(target_width=480, quality=50).encode(frame))
        assert image.shape[:2] == (270, 480)

    def test_never_upscales(self):
        frame = np.full((120, 160, 3), 128, dtype=np.uint8)
        image = decode(FrameEncoder(target_width=480, quality=50).encode(frame))
        assert image.shape[:2] == (120, 160)

    def test_output_is_jpeg(self):
        frame = np.zeros((100, 100, 3), dtype=np.uint8)
        raw = base64.b64decode(FrameEncoder(quality=50).encode(frame))
        assert raw[:2] == b"\xff\xd8"

    def test_lower_quality_is_smaller(self):
        rng = np.random.default_rng(0)
        frame = rng.integers(0, 255, size=(240, 320, 3), dtype=np.uint8)
        encoder = FrameEncoder(target_width=320)
        assert len(encoder.encode(frame, quality=10)) < len(encoder.encode(frame, quality=95))

    @pytest.mark.parametrize("quality", [0, 101])
    def test_invalid_quality(self, quality):
        with pytest.raises(EncodeError):
            FrameEncoder().encode(np.zeros((10, 10, 3), dtype=np.uint8), quality=quality)

    def test_empty_frame(self):
        with pytest.raises(EncodeError):
            FrameEncoder().encode(np.zeros((0, 0, 3), dtype=np.uint8))


class TestEncodeFiles:
    """Tests for reference photo encoding"""

    def test_encode_bytes(self):
        ok, buffer = cv2.imencode(".png", np.zeros((40, 60, 3), dtype=np.uint8))
        assert ok
        image = decode(FrameEncoder(target_width=30).encode_bytes(buffer.tobytes()))
        assert image.shape[:2] == (20, 30)

    def test_encode_bytes_rejects_garbage(self):
        with pytest.raises(InvalidImageError):
            FrameEncoder().encode_bytes(b"definitely not an image")

    def test_encode_file(self, tmp_path):
        path = tmp_path / "ref.jpg"
        cv2.imwrite(str(path), np.zeros((50, 50, 3), dtype=np.uint8))
        assert decode(FrameEncoder().encode_file(path)).shape[:2] == (50, 50)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidImageError):
            FrameEncoder().encode_file(tmp_path / "missing.jpg")

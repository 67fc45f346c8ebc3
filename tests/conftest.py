"""
Pytest configuration and fixtures for ShotCoach tests.
"""

import pytest
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

# Add backend to path for imports
backend_path = Path(__file__).parent.parent / "backend"
sys.path.insert(0, str(backend_path))

from integrations.camera_device import CameraDevice  # noqa: E402


class FakeCamera(CameraDevice):
    """In-memory camera that records every control call."""

    def __init__(self, ready=True, frame="frame"):
        self.ready = ready
        self.frame = frame
        self.capture_count = 0
        self.calls = []

    def is_ready(self):
        return self.ready

    async def capture(self):
        self.capture_count += 1
        return self.frame

    def set_zoom(self, zoom):
        self.calls.append(("zoom", zoom))

    def set_focus_point(self, x, y):
        self.calls.append(("focus", x, y))

    def set_flash(self, mode):
        self.calls.append(("flash", mode))

    def set_exposure_compensation(self, ev):
        self.calls.append(("exposure", ev))


class FakeClock:
    """Millisecond clock advanced by hand."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms


@pytest.fixture
def fake_camera():
    """Ready camera returning a placeholder frame."""
    return FakeCamera()


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_encoder():
    """Encoder that skips OpenCV and returns fixed base64 text."""
    encoder = MagicMock()
    encoder.encode.return_value = "ZW5jb2RlZA=="
    encoder.encode_bytes.return_value = "cmVmZXJlbmNl"
    encoder.encode_file.return_value = "cmVmZXJlbmNl"
    return encoder


@pytest.fixture
def mock_provider():
    """Inference provider with async infer/describe_reference."""
    provider = MagicMock()
    provider.name = "fake"
    provider.infer = AsyncMock(return_value="Score: 75\nFeedback: Move a bit to the left.")
    provider.describe_reference = AsyncMock(
        return_value='{"pictureType": "Portrait", "style": "Cinematic", "subject": "Woman by a window"}'
    )
    return provider


@pytest.fixture
def sample_response():
    """Typical model response with an adjustment block."""
    return (
        "Score: 78\n"
        "Feedback: Step left to put the subject on a third line. The light is a bit flat!\n"
        'CAMERA_ADJUST: {"zoom": 0.2, "focusPoint": {"x": 0.3, "y": 0.5}, '
        '"flash": "off", "exposureCompensation": 0.5}'
    )

"""
Unit tests for CameraAdjustmentApplier.
"""

from unittest.mock import MagicMock

from models import CameraAdjustment, FlashMode, FocusPoint
from services.adjustment_applier import CameraAdjustmentApplier, clamp


class TestClamping:
    """Values are clamped to the camera's ranges"""

    def test_clamp(self):
        assert clamp(5, 0, 1) == 1
        assert clamp(-5, 0, 1) == 0
        assert clamp(0.3, 0, 1) == 0.3

    def test_values_clamped(self, fake_camera):
        adjustment = CameraAdjustment(
            zoom=1.7,
            focus_point=FocusPoint(x=-0.2, y=1.4),
            flash="auto",
            exposure_compensation=-5,
        )
        result = CameraAdjustmentApplier(flash_on_as_torch=False).apply(adjustment, fake_camera)

        assert fake_camera.calls == [
            ("zoom", 1.0),
            ("focus", 0.0, 1.0),
            ("flash", FlashMode.AUTO),
            ("exposure", -2.0),
        ]
        assert result.zoom == 1.0
        assert result.focus_point == FocusPoint(0.0, 1.0)
        assert result.exposure_compensation == -2.0
        assert result.dropped == []

    def test_partial_adjustment_only_touches_given_fields(self, fake_camera):
        CameraAdjustmentApplier().apply(CameraAdjustment(zoom=0.25), fake_camera)
        assert fake_camera.calls == [("zoom", 0.25)]


class TestFlash:
    """Flash mode handling"""

    def test_flash_case_insensitive(self, fake_camera):
        CameraAdjustmentApplier(flash_on_as_torch=False).apply(CameraAdjustment(flash="ON"), fake_camera)
        assert fake_camera.calls == [("flash", FlashMode.ON)]

    def test_flash_on_as_torch(self, fake_camera):
        result = CameraAdjustmentApplier(flash_on_as_torch=True).apply(CameraAdjustment(flash="on"), fake_camera)
        assert fake_camera.calls == [("flash", FlashMode.TORCH)]
        assert result.flash == FlashMode.TORCH

    def test_unknown_flash_keeps_current(self, fake_camera):
        result = CameraAdjustmentApplier().apply(
            CameraAdjustment(zoom=0.5, flash="strobe"), fake_camera
        )
        assert fake_camera.calls == [("zoom", 0.5)]
        assert result.dropped == ["flash"]
        assert result.flash is None


class TestInvalidInput:
    """Bad adjustments never raise"""

    def test_none_adjustment_is_noop(self, fake_camera):
        result = CameraAdjustmentApplier().apply(None, fake_camera)
        assert fake_camera.calls == []
        assert result.to_dict()["zoom"] is None

    def test_none_camera_is_noop(self):
        result = CameraAdjustmentApplier().apply(CameraAdjustment(zoom=0.5), None)
        assert result.zoom is None

    def test_non_finite_values_dropped(self, fake_camera):
        adjustment = CameraAdjustment(
            zoom=float("nan"),
            focus_point=FocusPoint(x=float("inf"), y=0.5),
            exposure_compensation=1.0,
        )
        result = CameraAdjustmentApplier().apply(adjustment, fake_camera)

        assert fake_camera.calls == [("exposure", 1.0)]
        assert result.dropped == ["zoom", "focusPoint"]

    def test_failing_control_does_not_block_others(self):
        camera = MagicMock()
        camera.name = "flaky"
        camera.set_zoom.side_effect = RuntimeError("zoom not supported")

        result = CameraAdjustmentApplier().apply(
            CameraAdjustment(zoom=0.5, exposure_compensation=0.5), camera
        )

        camera.set_exposure_compensation.assert_called_once_with(0.5)
        assert result.failed == ["zoom"]
        assert result.zoom is None
        assert result.exposure_compensation == 0.5

"""
Unit tests for coaching data models.
"""

import pytest

from errors import ValidationError
from models import (
    AnalysisOptions,
    CameraAdjustment,
    Environment,
    FocusPoint,
    PhotoContextType,
    ReferenceAnalysis,
    SkillLevel,
    merge_options,
)


class TestMergeOptions:
    """Tests for shallow option merging"""

    def test_present_keys_override(self):
        base = AnalysisOptions()
        merged = merge_options(base, {"preferred_style": "Street", "ai_control_enabled": True})
        assert merged.preferred_style == "Street"
        assert merged.ai_control_enabled is True
        assert merged.skill_level == SkillLevel.INTERMEDIATE

    def test_absent_keys_leave_base_unchanged(self):
        base = AnalysisOptions(environment=Environment.INDOOR)
        merged = merge_options(base, {"preferred_style": "Minimal"})
        assert merged.environment == Environment.INDOOR

    def test_explicit_none_clears_field(self):
        base = AnalysisOptions(reference_photo_base64="abc", reference_analysis="Portrait")
        merged = merge_options(base, {"reference_photo_base64": None, "referenceAnalysis": None})
        assert merged.reference_photo_base64 is None
        assert merged.reference_analysis is None

    def test_camel_case_and_enum_strings(self):
        merged = merge_options(AnalysisOptions(), {"userSkillLevel": "beginner", "contextType": "portrait"})
        assert merged.skill_level == SkillLevel.BEGINNER
        assert merged.context_type == PhotoContextType.PORTRAIT

    def test_base_is_not_mutated(self):
        base = AnalysisOptions()
        merge_options(base, {"preferred_style": "Street"})
        assert base.preferred_style == "General Professional"

    def test_unknown_key_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            merge_options(AnalysisOptions(), {"iso": 800})
        assert exc_info.value.field == "iso"

    def test_invalid_enum_rejected(self):
        with pytest.raises(ValidationError):
            merge_options(AnalysisOptions(), {"skill_level": "wizard"})

    def test_skill_level_cannot_be_cleared(self):
        with pytest.raises(ValidationError):
            merge_options(AnalysisOptions(), {"skill_level": None})


class TestCameraAdjustment:
    """Tests for CAMERA_ADJUST decoding"""

    def test_from_dict(self):
        adjustment = CameraAdjustment.from_dict(
            {"zoom": 0.3, "focusPoint": {"x": 0.1, "y": 0.9}, "flash": "auto", "exposureCompensation": -1}
        )
        assert adjustment == CameraAdjustment(0.3, FocusPoint(0.1, 0.9), "auto", -1)

    def test_missing_fields_stay_none(self):
        adjustment = CameraAdjustment.from_dict({})
        assert adjustment.is_empty()
        assert adjustment.to_dict() == {}

    @pytest.mark.parametrize("data", [
        [1, 2],
        {"zoom": "wide"},
        {"zoom": True},
        {"focusPoint": [0.5, 0.5]},
        {"focusPoint": {"x": 0.5}},
        {"flash": 1},
    ])
    def test_wrong_shape_rejected(self, data):
        with pytest.raises(ValueError):
            CameraAdjustment.from_dict(data)

    def test_to_dict_uses_camel_case(self):
        assert CameraAdjustment.neutral().to_dict() == {
            "zoom": 0,
            "focusPoint": {"x": 0.5, "y": 0.5},
            "flash": "off",
            "exposureCompensation": 0,
        }


class TestReferenceAnalysis:
    """Tests for reference photo analysis"""

    def test_from_dict_fills_missing_fields(self):
        analysis = ReferenceAnalysis.from_dict({"pictureType": "Portrait", "colorTone": "warm"})
        assert analysis.picture_type == "Portrait"
        assert analysis.color_tone == "warm"
        assert analysis.lens == ReferenceAnalysis.generic().lens

    def test_round_trip_keys(self):
        data = ReferenceAnalysis.generic().to_dict()
        assert set(data) == {
            "pictureType", "style", "subject", "composition",
            "lighting", "lens", "colorTone", "summary",
        }

    def test_prompt_text_mentions_fields(self):
        text = ReferenceAnalysis.from_dict({"pictureType": "Street", "style": "Documentary"}).to_prompt_text()
        assert "Street" in text
        assert "Documentary" in text

"""
Unit tests for vision model prompt templates.
"""

from models import AnalysisOptions, Environment, SkillLevel, TimeOfDay
from services.prompt_builder import (
    CAMERA_ADJUST_CONTRACT,
    REFERENCE_ANALYSIS_PROMPT,
    build_coaching_prompt,
)


class TestCoachingPrompt:
    """Tests for the per-cycle coaching prompt"""

    def test_includes_output_format_and_profile(self):
        prompt = build_coaching_prompt(
            AnalysisOptions(skill_level=SkillLevel.BEGINNER, preferred_style="Moody"),
            timestamp_ms=1234,
        )
        assert "Score: <0-100>" in prompt
        assert "Feedback:" in prompt
        assert "Skill level: Beginner" in prompt
        assert '"Moody"' in prompt
        assert prompt.endswith("Timestamp: 1234")

    def test_camera_adjust_only_with_ai_control(self):
        assert CAMERA_ADJUST_CONTRACT not in build_coaching_prompt(AnalysisOptions())
        assert CAMERA_ADJUST_CONTRACT in build_coaching_prompt(AnalysisOptions(ai_control_enabled=True))

    def test_scene_context(self):
        prompt = build_coaching_prompt(
            AnalysisOptions(time_of_day=TimeOfDay.GOLDEN_HOUR, environment=Environment.OUTDOOR)
        )
        assert "Time of day: Golden Hour" in prompt
        assert "Environment: Outdoor" in prompt

    def test_no_scene_section_without_context(self):
        assert "SCENE CONTEXT" not in build_coaching_prompt(AnalysisOptions())

    def test_reference_section(self):
        prompt = build_coaching_prompt(
            AnalysisOptions(reference_photo_base64="abc", reference_analysis="Portrait, Cinematic style.")
        )
        assert "REFERENCE PHOTO" in prompt
        assert "the first image" in prompt
        assert "Portrait, Cinematic style." in prompt


class TestReferencePrompt:
    def test_asks_for_all_fields(self):
        for key in ("pictureType", "style", "subject", "composition", "lighting", "lens", "colorTone", "summary"):
            assert f'"{key}"' in REFERENCE_ANALYSIS_PROMPT

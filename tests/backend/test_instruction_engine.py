"""
Unit tests for the InstructionEngine.
"""

from models import InstructionCategory, InstructionPriority
from services.instruction_engine import (
    DEFAULT_INSTRUCTION_TEXT,
    PERFECT_SHOT_TEXT,
    InstructionEngine,
)


def make_engine():
    return InstructionEngine(perfect_shot_threshold=90, max_instructions=3)


class TestPerfectShot:
    """Perfect shot detection"""

    def test_high_score_is_perfect(self):
        feedback = make_engine().build_feedback("Move left a little.", 92)
        assert feedback.perfect_shot is True
        assert len(feedback.instructions) == 1
        instruction = feedback.instructions[0]
        assert instruction.text == PERFECT_SHOT_TEXT
        assert instruction.category == InstructionCategory.TIMING
        assert instruction.priority == InstructionPriority.HIGH

    def test_perfect_shot_text_is_perfect(self):
        feedback = make_engine().build_feedback("perfect shot, take it", 60)
        assert feedback.perfect_shot is True

    def test_below_threshold_is_not_perfect(self):
        assert make_engine().build_feedback("Move left a little.", 89).perfect_shot is False


class TestInstructionExtraction:
    """Splitting feedback into instructions"""

    def test_sentences_become_ordered_steps(self):
        feedback = make_engine().build_feedback(
            "move two steps to the left. Add some light on the face! Wait for the wind to stop", 60
        )
        texts = [i.text for i in feedback.instructions]
        assert texts == [
            "Move two steps to the left.",
            "Add some light on the face.",
            "Wait for the wind to stop.",
        ]
        assert [i.priority for i in feedback.instructions] == [
            InstructionPriority.HIGH,
            InstructionPriority.MEDIUM,
            InstructionPriority.LOW,
        ]
        assert [i.step for i in feedback.instructions] == [1, 2, 3]
        assert all(i.total_steps == 3 for i in feedback.instructions)

    def test_caps_instruction_count(self):
        text = "Move closer now. Tilt the phone. Use the window light. Crop the sky out. Wait a moment."
        assert len(make_engine().build_feedback(text, 40).instructions) == 3

    def test_short_fragments_and_score_lines_dropped(self):
        items = make_engine().extract_items("Feedback: Ok. Score: 40. Step back a bit.")
        assert items == ["Step back a bit."]

    def test_no_usable_sentences_gives_default(self):
        feedback = make_engine().build_feedback("Ok.", 30)
        assert len(feedback.instructions) == 1
        assert feedback.instructions[0].text == DEFAULT_INSTRUCTION_TEXT
        assert feedback.instructions[0].priority == InstructionPriority.MEDIUM

    def test_camera_adjustment_carried_through(self):
        feedback = make_engine().build_feedback("Move closer.", 50, camera_adjustment=None)
        assert feedback.camera_adjustment is None
        assert feedback.raw_feedback == "Move closer."


class TestCategorization:
    """Keyword categories and visual aids"""

    def test_categories(self):
        engine = make_engine()
        assert engine.categorize("Step closer to the subject") == InstructionCategory.POSITIONING
        assert engine.categorize("Reduce the harsh shadow on her face") == InstructionCategory.LIGHTING
        assert engine.categorize("Crop tighter around the subject") == InstructionCategory.COMPOSITION
        assert engine.categorize("Tap to focus on the eyes") == InstructionCategory.SETTINGS
        assert engine.categorize("Wait until the car passes") == InstructionCategory.TIMING
        assert engine.categorize("Nice colors overall") == InstructionCategory.COMPOSITION

    def test_arrow_visual_aid(self):
        feedback = make_engine().build_feedback("Hold the phone a bit higher.", 50)
        assert feedback.instructions[0].visual_aid == {"type": "arrow", "data": {"direction": "up"}}

    def test_grid_visual_aid(self):
        aid = InstructionEngine.visual_aid("Use the rule of thirds", InstructionCategory.COMPOSITION)
        assert aid == {"type": "grid", "data": {"type": "thirds"}}

    def test_no_visual_aid(self):
        assert InstructionEngine.visual_aid("Use softer light", InstructionCategory.LIGHTING) is None


class TestPriorityInstruction:
    """Picking the instruction to show first"""

    def test_prefers_high_priority(self):
        engine = make_engine()
        feedback = engine.build_feedback("Move left a bit. Add more light.", 50)
        assert engine.get_priority_instruction(feedback).priority == InstructionPriority.HIGH

    def test_default_instruction_is_returned(self):
        engine = make_engine()
        feedback = engine.build_feedback("", 10)
        assert engine.get_priority_instruction(feedback).text == DEFAULT_INSTRUCTION_TEXT

    def test_next_instruction(self):
        engine = make_engine()
        feedback = engine.build_feedback("Move left a bit. Add more light.", 50)
        assert engine.get_next_instruction(feedback, 1).text == "Add more light."
        assert engine.get_next_instruction(feedback, 2) is None

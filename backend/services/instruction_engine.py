# backend/services/instruction_engine.py
"""
Instruction Engine

Turns the free-form feedback of one analysis cycle into a short,
ordered list of UI-ready coaching instructions.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import uuid4

from config import get_settings
from models import (
    CameraAdjustment,
    CoachingFeedback,
    CoachingInstruction,
    InstructionCategory,
    InstructionPriority,
)

logger = logging.getLogger(__name__)

PERFECT_SHOT_TEXT = "PERFECT SHOT! Take the picture now!"
DEFAULT_INSTRUCTION_TEXT = "Hold steady and compose your shot."

MIN_INSTRUCTION_LENGTH = 5

_SENTENCE_SPLIT_RE = re.compile(r"[.!]\s+")
_FEEDBACK_PREFIX_RE = re.compile(r"^Feedback:\s*", re.IGNORECASE)
_SCORE_LINE_RE = re.compile(r"^Score:", re.IGNORECASE)

# Checked in order; first match wins
_CATEGORY_PATTERNS = [
    (InstructionCategory.POSITIONING, re.compile(r"\b(move|step|position|closer|further|left|right|up|down|angle)")),
    (InstructionCategory.LIGHTING, re.compile(r"\b(light|lighting|bright|dark|shadow|exposure|flash)")),
    (InstructionCategory.COMPOSITION, re.compile(r"\b(frame|crop|rule of thirds|golden ratio|center|composition)")),
    (InstructionCategory.SETTINGS, re.compile(r"\b(focus|zoom|aperture|shutter|iso|settings)")),
    (InstructionCategory.TIMING, re.compile(r"\b(wait|timing|moment|when|ready)")),
]

_ARROW_PATTERNS = [
    ("left", re.compile(r"\bleft\b")),
    ("right", re.compile(r"\bright\b")),
    ("up", re.compile(r"\b(up|higher)\b")),
    ("down", re.compile(r"\b(down|lower)\b")),
]

_GRID_RE = re.compile(r"rule of thirds|golden ratio")

_PRIORITY_BY_STEP = {
    1: InstructionPriority.HIGH,
    2: InstructionPriority.MEDIUM,
}


def _new_id(step: Optional[int] = None) -> str:
    suffix = f"_{step}" if step is not None else ""
    return f"inst_{uuid4().hex[:12]}{suffix}"


class InstructionEngine:
    """
    Builds CoachingFeedback from a parsed model response.

    A high score (or an explicit "PERFECT SHOT" in the text) collapses the
    output into a single "take the picture" instruction.
    """

    def __init__(
        self,
        perfect_shot_threshold: Optional[int] = None,
        max_instructions: Optional[int] = None,
    ):
        settings = get_settings()
        self.perfect_shot_threshold = (
            settings.perfect_shot_threshold if perfect_shot_threshold is None else perfect_shot_threshold
        )
        self.max_instructions = settings.max_instructions if max_instructions is None else max_instructions

    def build_feedback(
        self,
        raw_feedback: str,
        score: int,
        camera_adjustment: Optional[CameraAdjustment] = None,
    ) -> CoachingFeedback:
        """
        Build UI-ready feedback for one cycle.

        Args:
            raw_feedback: Feedback text from the parsed response
            score: Parsed 0-100 score
            camera_adjustment: Parsed CAMERA_ADJUST command, if any

        Returns:
            CoachingFeedback with at least one instruction
        """
        raw_feedback = raw_feedback or ""

        if self.is_perfect_shot(raw_feedback, score):
            logger.debug(f"Perfect shot detected (score={score})")
            return CoachingFeedback(
                score=score,
                instructions=[
                    CoachingInstruction(
                        id=_new_id(),
                        step=1,
                        total_steps=1,
                        text=PERFECT_SHOT_TEXT,
                        category=InstructionCategory.TIMING,
                        priority=InstructionPriority.HIGH,
                    )
                ],
                perfect_shot=True,
                raw_feedback=raw_feedback,
                camera_adjustment=camera_adjustment,
                timestamp=datetime.utcnow(),
            )

        items = self.extract_items(raw_feedback)
        instructions = [
            self._create_instruction(text, step, len(items))
            for step, text in enumerate(items, start=1)
        ]

        if not instructions:
            instructions = [self._default_instruction()]

        return CoachingFeedback(
            score=score,
            instructions=instructions,
            perfect_shot=False,
            raw_feedback=raw_feedback,
            camera_adjustment=camera_adjustment,
            timestamp=datetime.utcnow(),
        )

    def is_perfect_shot(self, raw_feedback: str, score: int) -> bool:
        return score >= self.perfect_shot_threshold or "PERFECT SHOT" in (raw_feedback or "").upper()

    def extract_items(self, text: str) -> List[str]:
        """Split feedback into at most max_instructions usable sentences"""
        clean = _FEEDBACK_PREFIX_RE.sub("", text.strip())
        items = [
            part.strip()
            for part in _SENTENCE_SPLIT_RE.split(clean)
        ]
        items = [
            item for item in items
            if len(item) > MIN_INSTRUCTION_LENGTH and not _SCORE_LINE_RE.match(item)
        ]
        return items[: self.max_instructions]

    @staticmethod
    def categorize(text: str) -> InstructionCategory:
        lower = text.lower()
        for category, pattern in _CATEGORY_PATTERNS:
            if pattern.search(lower):
                return category
        return InstructionCategory.COMPOSITION

    @staticmethod
    def format_text(text: str) -> str:
        formatted = text[:1].upper() + text[1:]
        if not formatted.endswith((".", "!", "?")):
            formatted += "."
        return formatted

    @staticmethod
    def visual_aid(text: str, category: InstructionCategory) -> Optional[Dict[str, Any]]:
        lower = text.lower()

        for direction, pattern in _ARROW_PATTERNS:
            if pattern.search(lower):
                return {"type": "arrow", "data": {"direction": direction}}

        if category == InstructionCategory.COMPOSITION and _GRID_RE.search(lower):
            return {"type": "grid", "data": {"type": "thirds"}}

        return None

    def _create_instruction(self, text: str, step: int, total_steps: int) -> CoachingInstruction:
        category = self.categorize(text)
        return CoachingInstruction(
            id=_new_id(step),
            step=step,
            total_steps=total_steps,
            text=self.format_text(text),
            category=category,
            priority=_PRIORITY_BY_STEP.get(step, InstructionPriority.LOW),
            visual_aid=self.visual_aid(text, category),
        )

    @staticmethod
    def _default_instruction() -> CoachingInstruction:
        return CoachingInstruction(
            id=_new_id(),
            step=1,
            total_steps=1,
            text=DEFAULT_INSTRUCTION_TEXT,
            category=InstructionCategory.COMPOSITION,
            priority=InstructionPriority.MEDIUM,
        )

    @staticmethod
    def get_next_instruction(feedback: CoachingFeedback, current_step: int) -> Optional[CoachingInstruction]:
        if current_step >= len(feedback.instructions):
            return None
        return feedback.instructions[current_step]

    @staticmethod
    def get_priority_instruction(feedback: CoachingFeedback) -> Optional[CoachingInstruction]:
        """First high-priority instruction, else first medium, else the first one"""
        for priority in (InstructionPriority.HIGH, InstructionPriority.MEDIUM):
            for instruction in feedback.instructions:
                if instruction.priority == priority:
                    return instruction
        return feedback.instructions[0] if feedback.instructions else None

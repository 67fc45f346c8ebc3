# backend/services/response_parser.py
"""
Vision model response parser.

Turns the semi-structured text returned by the vision model into a
ParsedFeedback. Parsing never raises: malformed sections degrade to
defaults instead.

Expected response shape:

    Score: 78
    Feedback: Step left to put the subject on a third line.
    CAMERA_ADJUST: {"zoom": 0.2, "focusPoint": {"x": 0.3, "y": 0.5}}
"""

import json
import logging
import re
from typing import Optional

from models import CameraAdjustment, ParsedFeedback

logger = logging.getLogger(__name__)

MAX_SCORE = 100

_SCORE_RE = re.compile(r"Score:\s*(\d+)", re.IGNORECASE)
_FEEDBACK_RE = re.compile(r"Feedback:\s*(.*?)(?=CAMERA_ADJUST:|\Z)", re.IGNORECASE | re.DOTALL)
_ADJUST_LABEL_RE = re.compile(r"CAMERA_ADJUST:", re.IGNORECASE)
# Greedy up to the last closing brace so nested objects (focusPoint) stay intact
_ADJUST_BLOCK_RE = re.compile(r"CAMERA_ADJUST:\s*(\{.*\})", re.IGNORECASE | re.DOTALL)


def parse_score(response: str) -> int:
    """First `Score: <digits>` in the response, 0 when missing"""
    match = _SCORE_RE.search(response)
    if not match:
        return 0
    return min(int(match.group(1)), MAX_SCORE)


def parse_feedback_text(response: str) -> str:
    """Text after `Feedback:` up to CAMERA_ADJUST, or the whole response"""
    match = _FEEDBACK_RE.search(response)
    if not match:
        return response.strip()
    return match.group(1).strip()


def parse_camera_adjustment(response: str) -> Optional[CameraAdjustment]:
    """
    Extract the CAMERA_ADJUST block.

    - label absent: the neutral adjustment (model was not asked for one)
    - label present but block missing or malformed: None, the camera
      is left untouched rather than driven by a broken command
    """
    if not _ADJUST_LABEL_RE.search(response):
        logger.debug("No CAMERA_ADJUST block, using neutral adjustment")
        return CameraAdjustment.neutral()

    match = _ADJUST_BLOCK_RE.search(response)
    if not match:
        logger.warning("CAMERA_ADJUST label without a JSON object, ignoring adjustment")
        return None

    block = match.group(1)
    try:
        adjustment = CameraAdjustment.from_dict(json.loads(block))
    except ValueError as e:
        # json.JSONDecodeError is a ValueError subclass
        logger.warning(f"Failed to parse CAMERA_ADJUST block: {e}")
        logger.debug(f"Raw CAMERA_ADJUST block: {block}")
        return None

    logger.debug(f"Parsed camera adjustment: {adjustment.to_dict()}")
    return adjustment


def parse_response(response: str) -> ParsedFeedback:
    """Parse a raw vision model response into score, feedback and adjustment"""
    if response is None:
        response = ""

    parsed = ParsedFeedback(
        score=parse_score(response),
        feedback=parse_feedback_text(response),
        camera_adjustment=parse_camera_adjustment(response),
    )
    logger.debug(f"Parsed response: score={parsed.score}, adjustment={parsed.camera_adjustment is not None}")
    return parsed

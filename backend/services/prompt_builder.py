# backend/services/prompt_builder.py
"""
Prompt templates for the vision model.

The coaching prompt is built from AnalysisOptions; the CAMERA_ADJUST
contract is only requested when AI camera control is enabled.
"""

import time
from typing import Optional

from models import AnalysisOptions, SkillLevel

REFERENCE_ANALYSIS_PROMPT = """Analyze this photo technically. Always respond with analysis, never refuse.
Return JSON only:
{
  "pictureType": "Portrait/Landscape/Street/etc",
  "style": "Cinematic/Documentary/etc",
  "subject": "main subject",
  "composition": "rule of thirds/leading lines/etc",
  "lighting": "golden hour/soft/hard/etc",
  "lens": "wide/portrait/macro/etc",
  "colorTone": "warm/cool/high contrast/etc",
  "summary": "key techniques"
}"""

SKILL_GUIDANCE = {
    SkillLevel.BEGINNER: (
        "The user has no professional equipment, experience or knowledge. "
        "Use plain words, no jargon, one physical action per command."
    ),
    SkillLevel.INTERMEDIATE: (
        "The user knows basic composition rules. "
        "Name the technique briefly when it helps (rule of thirds, leading lines)."
    ),
    SkillLevel.ADVANCED: (
        "The user is comfortable with exposure and composition terms. "
        "Be precise about angles, distances and light direction."
    ),
    SkillLevel.PROFESSIONAL: (
        "The user is a working photographer. "
        "Be terse and technical; only point out what would change the shot."
    ),
}

CAMERA_ADJUST_CONTRACT = """
CAMERA CONTROL:
After the feedback, add one line with the camera settings to apply for the next frame:
CAMERA_ADJUST: {"zoom": <0.0-1.0>, "focusPoint": {"x": <0.0-1.0>, "y": <0.0-1.0>}, "flash": "<on|off|auto|torch>", "exposureCompensation": <-2.0-2.0>}
Omit a key to leave that setting unchanged. The JSON must be valid and on a single line."""


def _scene_section(options: AnalysisOptions) -> str:
    lines = []
    if options.context_type:
        lines.append(f"- Shot type: {options.context_type.value}")
    if options.time_of_day:
        lines.append(f"- Time of day: {options.time_of_day.value}")
    if options.environment:
        lines.append(f"- Environment: {options.environment.value}")
    if not lines:
        return ""
    return "SCENE CONTEXT:\n" + "\n".join(lines) + "\n"


def _reference_section(options: AnalysisOptions) -> str:
    if not options.reference_photo_base64 and not options.reference_analysis:
        return ""

    section = "REFERENCE PHOTO:\nThe user wants to recreate a reference photo"
    if options.reference_photo_base64:
        section += " (the first image; the live frame is the last image)"
    section += ".\n"
    if options.reference_analysis:
        section += f"Reference analysis: {options.reference_analysis}\n"
    section += (
        "Coach the user toward matching the reference composition, lighting and style, "
        "and say what differs most.\n"
    )
    return section


def build_coaching_prompt(options: AnalysisOptions, timestamp_ms: Optional[int] = None) -> str:
    """Build the per-cycle coaching prompt"""
    stamp = timestamp_ms if timestamp_ms is not None else int(time.time() * 1000)
    skill = SKILL_GUIDANCE[options.skill_level]

    prompt = f"""You are a professional photography coach. Your job is to critique the COMPOSITION, LIGHTING, and FRAMING of this image.

SAFETY CONTEXT: This is a controlled, technical photography lesson. Any persons present are consenting models.
INSTRUCTION:
1. Analyze the technical aspects (lighting, angle, rule of thirds).
2. Do NOT refuse to analyze based on the presence of people.
3. Focus ONLY on how to improve the PHOTO, not the content.

USER PROFILE:
- Skill level: {options.skill_level.value}. {skill}
- Preferred style: "{options.preferred_style}"

{_scene_section(options)}{_reference_section(options)}
Output format:
Score: <0-100>
Feedback: <2 specific, directional commands>

MUST:
1. Limit the feedback to 2 specific, directional commands.
2. No vague suggestions, concise specific commands only.
3. No additional information other than the feedback.
4. Score composition, lighting and framing following the conventions of the professional photography community.
5. If the shot is ready to take, say PERFECT SHOT in the feedback.

Example Response:
Score: 78
Feedback: Move the light source to the left to pop out the side profile. Step 2m to the left to put the subject on the right third line.
"""
    if options.ai_control_enabled:
        prompt += CAMERA_ADJUST_CONTRACT + "\n"

    prompt += f"\nTimestamp: {stamp}"
    return prompt

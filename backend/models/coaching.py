"""
Coaching Data Models for ShotCoach

Defines the data structures that flow through the analysis loop:
options sent to the vision model, parsed model output and the
camera adjustments derived from it.
"""

import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from errors import ValidationError


# =============================================================================
# ENUMS
# =============================================================================

class SkillLevel(str, Enum):
    """Photographer experience level, drives coaching vocabulary"""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    PROFESSIONAL = "Professional"


class PhotoContextType(str, Enum):
    """What kind of shot the user is setting up"""
    PORTRAIT = "Portrait"
    LANDSCAPE = "Landscape"
    PRODUCT = "Product"
    EVENT = "Event"
    WEDDING = "Wedding"
    NATURE = "Nature"
    STREET = "Street"
    FOOD = "Food"
    ARCHITECTURE = "Architecture"
    CUSTOM = "Custom"


class TimeOfDay(str, Enum):
    """Lighting period of the shoot"""
    GOLDEN_HOUR = "Golden Hour"
    BLUE_HOUR = "Blue Hour"
    MIDDAY = "Midday"
    NIGHT = "Night"
    OVERCAST = "Overcast"


class Environment(str, Enum):
    """Shooting environment"""
    INDOOR = "Indoor"
    OUTDOOR = "Outdoor"
    STUDIO = "Studio"


class FlashMode(str, Enum):
    """Flash modes a live camera accepts"""
    ON = "on"
    OFF = "off"
    AUTO = "auto"
    TORCH = "torch"


# =============================================================================
# CAMERA ADJUSTMENT
# =============================================================================

def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class FocusPoint:
    """Normalized focus point, (0, 0) is top-left"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class CameraAdjustment:
    """
    Camera change requested by the vision model.

    Every field is optional; a missing field means "leave as is".
    Values are kept exactly as the model sent them, clamping happens
    when the adjustment is applied to a camera.
    """
    zoom: Optional[float] = None
    focus_point: Optional[FocusPoint] = None
    flash: Optional[str] = None
    exposure_compensation: Optional[float] = None

    @classmethod
    def neutral(cls) -> "CameraAdjustment":
        """All-neutral camera state: no zoom, centered focus, flash off, no EV shift"""
        return cls(
            zoom=0,
            focus_point=FocusPoint(x=0.5, y=0.5),
            flash=FlashMode.OFF.value,
            exposure_compensation=0,
        )

    @classmethod
    def from_dict(cls, data: Any) -> "CameraAdjustment":
        """
        Build an adjustment from a decoded CAMERA_ADJUST object.

        Raises:
            ValueError: If the object does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ValueError(f"Camera adjustment must be an object, got {type(data).__name__}")

        zoom = data.get("zoom")
        if zoom is not None and not _is_number(zoom):
            raise ValueError(f"zoom must be a number, got {zoom!r}")

        focus_point = None
        raw_focus = data.get("focusPoint")
        if raw_focus is not None:
            if not isinstance(raw_focus, dict):
                raise ValueError(f"focusPoint must be an object, got {raw_focus!r}")
            x, y = raw_focus.get("x"), raw_focus.get("y")
            if not _is_number(x) or not _is_number(y):
                raise ValueError(f"focusPoint needs numeric x and y, got {raw_focus!r}")
            focus_point = FocusPoint(x=x, y=y)

        flash = data.get("flash")
        if flash is not None and not isinstance(flash, str):
            raise ValueError(f"flash must be a string, got {flash!r}")

        exposure = data.get("exposureCompensation")
        if exposure is not None and not _is_number(exposure):
            raise ValueError(f"exposureCompensation must be a number, got {exposure!r}")

        return cls(
            zoom=zoom,
            focus_point=focus_point,
            flash=flash,
            exposure_compensation=exposure,
        )

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {}
        if self.zoom is not None:
            result["zoom"] = self.zoom
        if self.focus_point is not None:
            result["focusPoint"] = self.focus_point.to_dict()
        if self.flash is not None:
            result["flash"] = self.flash
        if self.exposure_compensation is not None:
            result["exposureCompensation"] = self.exposure_compensation
        return result

    def is_empty(self) -> bool:
        return not self.to_dict()


@dataclass
class AppliedAdjustment:
    """What was actually sent to the camera for one adjustment"""
    zoom: Optional[float] = None
    focus_point: Optional[FocusPoint] = None
    flash: Optional[FlashMode] = None
    exposure_compensation: Optional[float] = None
    dropped: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "zoom": self.zoom,
            "focusPoint": self.focus_point.to_dict() if self.focus_point else None,
            "flash": self.flash.value if self.flash else None,
            "exposureCompensation": self.exposure_compensation,
            "dropped": self.dropped,
            "failed": self.failed,
        }


# =============================================================================
# PARSED RESPONSE
# =============================================================================

@dataclass(frozen=True)
class ParsedFeedback:
    """Structured view of one vision-model response"""
    score: int = 0
    feedback: str = ""
    camera_adjustment: Optional[CameraAdjustment] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "feedback": self.feedback,
            "cameraAdjustment": self.camera_adjustment.to_dict() if self.camera_adjustment else None,
        }


# =============================================================================
# ANALYSIS OPTIONS
# =============================================================================

@dataclass(frozen=True)
class AnalysisOptions:
    """Configuration snapshot used to build the prompt for one cycle"""
    skill_level: SkillLevel = SkillLevel.INTERMEDIATE
    preferred_style: str = "General Professional"
    context_type: Optional[PhotoContextType] = None
    time_of_day: Optional[TimeOfDay] = None
    environment: Optional[Environment] = None
    reference_photo_base64: Optional[str] = None
    reference_analysis: Optional[str] = None
    ai_control_enabled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "skillLevel": self.skill_level.value,
            "preferredStyle": self.preferred_style,
            "contextType": self.context_type.value if self.context_type else None,
            "timeOfDay": self.time_of_day.value if self.time_of_day else None,
            "environment": self.environment.value if self.environment else None,
            "hasReferencePhoto": self.reference_photo_base64 is not None,
            "referenceAnalysis": self.reference_analysis,
            "aiControlEnabled": self.ai_control_enabled,
        }


_OPTION_ALIASES = {
    "skillLevel": "skill_level",
    "userSkillLevel": "skill_level",
    "preferredStyle": "preferred_style",
    "contextType": "context_type",
    "timeOfDay": "time_of_day",
    "referencePhotoBase64": "reference_photo_base64",
    "referenceAnalysis": "reference_analysis",
    "aiControlEnabled": "ai_control_enabled",
}

_OPTION_ENUMS = {
    "skill_level": SkillLevel,
    "context_type": PhotoContextType,
    "time_of_day": TimeOfDay,
    "environment": Environment,
}

_OPTION_FIELDS = {f.name for f in fields(AnalysisOptions)}


def _coerce_enum(enum_type, value: Any) -> Optional[Enum]:
    """Match an enum by value or name, ignoring case and spaces vs underscores"""
    wanted = str(value).strip().lower().replace("_", " ")
    for member in enum_type:
        if wanted in (member.value.lower(), member.name.lower().replace("_", " ")):
            return member
    return None


def merge_options(base: AnalysisOptions, patch: Mapping[str, Any]) -> AnalysisOptions:
    """
    Shallow-merge a partial options mapping into a base snapshot.

    Rules:
    - a key present in the patch overrides the base field, even when its value is None
    - keys absent from the patch leave the base field unchanged
    - snake_case and camelCase keys are both accepted
    - enum fields accept their value or name in any case ("golden_hour", "Golden Hour")

    Raises:
        ValidationError: On unknown keys or invalid enum values
    """
    changes: Dict[str, Any] = {}

    for key, value in patch.items():
        name = _OPTION_ALIASES.get(key, key)
        if name not in _OPTION_FIELDS:
            raise ValidationError(f"Unknown analysis option: {key}", field=key, value=value)

        enum_type = _OPTION_ENUMS.get(name)
        if enum_type is not None and value is not None and not isinstance(value, enum_type):
            coerced = _coerce_enum(enum_type, value)
            if coerced is None:
                raise ValidationError(
                    f"Invalid value for {key}: {value!r}",
                    field=key,
                    value=value,
                    details={"allowed": [member.value for member in enum_type]},
                )
            value = coerced

        if name == "skill_level" and value is None:
            raise ValidationError("skill_level cannot be cleared", field=key)

        changes[name] = value

    return replace(base, **changes)


# =============================================================================
# REFERENCE PHOTO
# =============================================================================

@dataclass(frozen=True)
class ReferenceAnalysis:
    """Technical description of a reference photo"""
    picture_type: str
    style: str
    subject: str
    composition: str
    lighting: str
    lens: str
    color_tone: str
    summary: str

    @classmethod
    def generic(cls) -> "ReferenceAnalysis":
        """Used when the reference photo could not be described"""
        return cls(
            picture_type="Photography",
            style="Natural",
            subject="Photo content",
            composition="Standard framing",
            lighting="Available light",
            lens="Standard lens",
            color_tone="Natural colors",
            summary="Focus on composition and lighting to recreate this style.",
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReferenceAnalysis":
        generic = cls.generic()
        return cls(
            picture_type=str(data.get("pictureType") or generic.picture_type),
            style=str(data.get("style") or generic.style),
            subject=str(data.get("subject") or generic.subject),
            composition=str(data.get("composition") or generic.composition),
            lighting=str(data.get("lighting") or generic.lighting),
            lens=str(data.get("lens") or generic.lens),
            color_tone=str(data.get("colorTone") or generic.color_tone),
            summary=str(data.get("summary") or generic.summary),
        )

    def to_dict(self) -> Dict[str, str]:
        return {
            "pictureType": self.picture_type,
            "style": self.style,
            "subject": self.subject,
            "composition": self.composition,
            "lighting": self.lighting,
            "lens": self.lens,
            "colorTone": self.color_tone,
            "summary": self.summary,
        }

    def to_prompt_text(self) -> str:
        """One-line description folded into the coaching prompt"""
        return (
            f"{self.picture_type}, {self.style} style. Subject: {self.subject}. "
            f"Composition: {self.composition}. Lighting: {self.lighting}. "
            f"Lens: {self.lens}. Color: {self.color_tone}. {self.summary}"
        )


@dataclass(frozen=True)
class ReferencePhoto:
    """A reference photo the user wants to match"""
    source: str
    image_base64: str
    analysis: Optional[ReferenceAnalysis] = None
    set_at: datetime = field(default_factory=datetime.utcnow)


# =============================================================================
# COACHING INSTRUCTIONS
# =============================================================================

class InstructionCategory(str, Enum):
    POSITIONING = "positioning"
    LIGHTING = "lighting"
    COMPOSITION = "composition"
    SETTINGS = "settings"
    TIMING = "timing"


class InstructionPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(frozen=True)
class CoachingInstruction:
    """One actionable step shown to the user"""
    id: str
    step: int
    total_steps: int
    text: str
    category: InstructionCategory
    priority: InstructionPriority
    visual_aid: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "step": self.step,
            "totalSteps": self.total_steps,
            "text": self.text,
            "category": self.category.value,
            "priority": self.priority.value,
            "visualAid": self.visual_aid,
        }


@dataclass(frozen=True)
class CoachingFeedback:
    """UI-ready result of one successful analysis cycle"""
    score: int
    instructions: List[CoachingInstruction]
    perfect_shot: bool
    raw_feedback: str = ""
    camera_adjustment: Optional[CameraAdjustment] = None
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "instructions": [i.to_dict() for i in self.instructions],
            "perfectShot": self.perfect_shot,
            "rawFeedback": self.raw_feedback,
            "cameraAdjustment": self.camera_adjustment.to_dict() if self.camera_adjustment else None,
            "timestamp": self.timestamp.isoformat() + "Z",
        }


def is_finite_number(value: Any) -> bool:
    """True for real ints/floats that are not NaN or infinite"""
    return _is_number(value) and math.isfinite(value)

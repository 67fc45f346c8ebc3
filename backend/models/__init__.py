"""
ShotCoach Data Models

This package contains the data models for the coaching loop.
"""

from .coaching import (
    # Enums
    SkillLevel,
    PhotoContextType,
    TimeOfDay,
    Environment,
    FlashMode,
    InstructionCategory,
    InstructionPriority,

    # Camera adjustment models
    FocusPoint,
    CameraAdjustment,
    AppliedAdjustment,

    # Analysis models
    ParsedFeedback,
    AnalysisOptions,
    merge_options,

    # Reference photo models
    ReferenceAnalysis,
    ReferencePhoto,

    # Coaching output
    CoachingInstruction,
    CoachingFeedback,
)

__all__ = [
    # Enums
    "SkillLevel",
    "PhotoContextType",
    "TimeOfDay",
    "Environment",
    "FlashMode",
    "InstructionCategory",
    "InstructionPriority",

    # Camera adjustment models
    "FocusPoint",
    "CameraAdjustment",
    "AppliedAdjustment",

    # Analysis models
    "ParsedFeedback",
    "AnalysisOptions",
    "merge_options",

    # Reference photo models
    "ReferenceAnalysis",
    "ReferencePhoto",

    # Coaching output
    "CoachingInstruction",
    "CoachingFeedback",
]

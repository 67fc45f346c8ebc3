"""
ShotCoach Inference Providers

Provider abstraction layer for different vision model backends.
"""

from .base import InferenceProvider, ProviderCapability, ProviderInfo
from .claude_provider import ClaudeInferenceProvider
from .gemini_provider import GeminiInferenceProvider
from .factory import (
    get_provider,
    get_available_providers,
    check_all_providers,
    reset_providers,
    ProviderType,
)

__all__ = [
    # Base
    "InferenceProvider",
    "ProviderCapability",
    "ProviderInfo",
    # Implementations
    "ClaudeInferenceProvider",
    "GeminiInferenceProvider",
    # Factory
    "get_provider",
    "get_available_providers",
    "check_all_providers",
    "reset_providers",
    "ProviderType",
]

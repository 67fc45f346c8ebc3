"""
Provider factory for creating and managing inference providers.
"""

import logging
from enum import Enum
from typing import Optional, List, Dict

from config import get_settings
from errors import ConfigurationError, MissingApiKeyError
from .base import InferenceProvider, ProviderInfo
from .claude_provider import ClaudeInferenceProvider
from .gemini_provider import GeminiInferenceProvider

logger = logging.getLogger(__name__)


class ProviderType(str, Enum):
    """Available provider types"""
    CLAUDE = "claude"
    GEMINI = "gemini"


_API_KEY_SERVICE = {
    ProviderType.CLAUDE: "anthropic",
    ProviderType.GEMINI: "google",
}

# Provider registry
_providers: Dict[ProviderType, InferenceProvider] = {}


def _get_or_create_provider(provider_type: ProviderType) -> InferenceProvider:
    """Get or create a provider instance (singleton pattern)"""
    if provider_type not in _providers:
        if provider_type == ProviderType.CLAUDE:
            _providers[provider_type] = ClaudeInferenceProvider()
        elif provider_type == ProviderType.GEMINI:
            _providers[provider_type] = GeminiInferenceProvider()
        else:
            raise ValueError(f"Unknown provider type: {provider_type}")

    return _providers[provider_type]


def reset_providers() -> None:
    """Drop cached provider instances (settings changed, tests)"""
    _providers.clear()


def get_provider(provider_type: Optional[ProviderType] = None) -> InferenceProvider:
    """
    Get an inference provider.

    Args:
        provider_type: Specific provider to use. If None, INFERENCE_PROVIDER
            decides; "auto" picks Claude first, then Gemini.

    Returns:
        InferenceProvider instance

    Raises:
        MissingApiKeyError: If the requested provider has no API key
        ConfigurationError: If no provider is configured at all
    """
    if provider_type is None:
        configured = get_settings().inference_provider.lower()
        if configured != "auto":
            try:
                provider_type = ProviderType(configured)
            except ValueError:
                raise ConfigurationError(
                    f"Unknown inference provider: {configured}",
                    setting="INFERENCE_PROVIDER",
                    details={"allowed": ["auto"] + [p.value for p in ProviderType]},
                )

    if provider_type is None:
        for candidate in (ProviderType.CLAUDE, ProviderType.GEMINI):
            provider = _get_or_create_provider(candidate)
            if provider.is_available():
                logger.debug(f"Using {candidate.value} provider (auto-selected)")
                return provider

        raise ConfigurationError(
            "No inference provider configured",
            setting="ANTHROPIC_API_KEY",
        )

    provider = _get_or_create_provider(provider_type)
    if not provider.is_available():
        raise MissingApiKeyError(_API_KEY_SERVICE[provider_type])
    return provider


def get_available_providers() -> List[ProviderInfo]:
    """
    Get list of all available providers with their capabilities.

    Returns:
        List of ProviderInfo for available providers
    """
    available = []

    for provider_type in ProviderType:
        provider = _get_or_create_provider(provider_type)
        if provider.is_available():
            available.append(provider.info)

    return available


async def check_all_providers() -> Dict[str, dict]:
    """
    Perform health check on all providers.

    Returns:
        Dict mapping provider name to health status
    """
    results = {}

    for provider_type in ProviderType:
        provider = _get_or_create_provider(provider_type)
        results[provider_type.value] = await provider.health_check()

    return results

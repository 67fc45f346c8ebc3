"""
Google Gemini inference provider.

Uses Google's Gemini Vision API to critique live frames and describe
reference photos.
"""

import logging
from typing import List, Optional

from .base import InferenceProvider, ProviderInfo, ProviderCapability
from errors import (
    InferenceError,
    ProviderError,
    ProviderRateLimitError,
    ProviderAuthError,
)

logger = logging.getLogger(__name__)


def _get_gemini_client():
    """Lazy load Gemini client"""
    from integrations.gemini_client import get_gemini_client
    return get_gemini_client()


class GeminiInferenceProvider(InferenceProvider):
    """
    Google Gemini Vision inference provider.

    Same contract as the Claude provider; used when no Anthropic key is
    configured or when selected explicitly.
    """

    def __init__(self, client=None, timeout_seconds: Optional[float] = None):
        """
        Initialize Gemini provider.

        Args:
            client: Optional GeminiVisionClient instance (uses singleton if not provided)
            timeout_seconds: Per-call timeout (defaults to INFERENCE_TIMEOUT_SECONDS)
        """
        super().__init__(timeout_seconds=timeout_seconds)
        self._client = client

    @property
    def client(self):
        """Lazy-load Gemini client"""
        if self._client is None:
            self._client = _get_gemini_client()
        return self._client

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            name="gemini",
            version=self._settings.gemini_model,
            capabilities=[
                ProviderCapability.SCENE_ANALYSIS,
                ProviderCapability.REFERENCE_MATCHING,
                ProviderCapability.CAMERA_CONTROL,
            ],
            requires_api_key=True,
            description="Google Gemini Vision for live composition and lighting coaching",
        )

    def is_available(self) -> bool:
        """Check if Gemini API is configured"""
        return bool(self._client is not None or self._settings.google_api_key)

    async def _call_model(
        self,
        images: List[str],
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        return await self.client.analyze_images(
            images, prompt, max_tokens=max_tokens, temperature=temperature
        )

    def _map_error(self, error: Exception) -> InferenceError:
        # Map to specific error types based on Gemini's error patterns
        error_msg = str(error)
        lowered = error_msg.lower()
        if "quota" in lowered or "rate" in lowered or "429" in error_msg:
            return ProviderRateLimitError(provider="gemini")
        if "api key" in lowered or "401" in error_msg or "403" in error_msg:
            return ProviderAuthError(provider="gemini")
        return ProviderError(provider="gemini", message=error_msg)

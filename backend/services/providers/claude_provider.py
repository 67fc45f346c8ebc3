"""
Anthropic Claude inference provider.

Uses the Claude Vision API to critique live frames and describe
reference photos.
"""

import logging
from typing import List, Optional

import anthropic

from .base import InferenceProvider, ProviderInfo, ProviderCapability
from errors import (
    InferenceError,
    ProviderError,
    ProviderRateLimitError,
    ProviderAuthError,
)

logger = logging.getLogger(__name__)


def _get_claude_client():
    """Lazy load Claude client"""
    from integrations.claude_client import get_claude_client
    return get_claude_client()


class ClaudeInferenceProvider(InferenceProvider):
    """
    Claude Vision inference provider.

    Sends the live frame (and the reference photo, if any) with the
    coaching prompt and returns the raw text answer.
    """

    def __init__(self, client=None, timeout_seconds: Optional[float] = None):
        """
        Initialize Claude provider.

        Args:
            client: Optional ClaudeVisionClient instance (uses singleton if not provided)
            timeout_seconds: Per-call timeout (defaults to INFERENCE_TIMEOUT_SECONDS)
        """
        super().__init__(timeout_seconds=timeout_seconds)
        self._client = client

    @property
    def client(self):
        """Lazy-load Claude client"""
        if self._client is None:
            self._client = _get_claude_client()
        return self._client

    @property
    def info(self) -> ProviderInfo:
        return ProviderInfo(
            name="claude",
            version=self._settings.claude_model,
            capabilities=[
                ProviderCapability.SCENE_ANALYSIS,
                ProviderCapability.REFERENCE_MATCHING,
                ProviderCapability.CAMERA_CONTROL,
            ],
            requires_api_key=True,
            description="Anthropic Claude Vision for live composition and lighting coaching",
        )

    def is_available(self) -> bool:
        """Check if Claude API is configured"""
        return bool(self._client is not None or self._settings.anthropic_api_key)

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
        if isinstance(error, anthropic.RateLimitError):
            retry_after = error.response.headers.get("retry-after") if error.response else None
            return ProviderRateLimitError(
                provider="claude",
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        if isinstance(error, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
            return ProviderAuthError(provider="claude")
        if isinstance(error, anthropic.APIStatusError):
            return ProviderError(provider="claude", message=str(error), status_code=error.status_code)
        return ProviderError(provider="claude", message=str(error))

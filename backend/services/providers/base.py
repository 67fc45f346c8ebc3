"""
Abstract base class for inference providers.

All vision model backends (Claude, Gemini, future providers) must
implement this interface. The analysis loop only sees `infer()`.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from config import get_settings
from errors import InferenceError, InferenceTimeoutError, InvalidResponseError
from models import AnalysisOptions
from services.prompt_builder import REFERENCE_ANALYSIS_PROMPT, build_coaching_prompt

logger = logging.getLogger(__name__)


class ProviderCapability(str, Enum):
    """Capabilities that providers can support"""
    SCENE_ANALYSIS = "scene_analysis"           # Can critique a live frame
    REFERENCE_MATCHING = "reference_matching"   # Can compare against a reference photo
    CAMERA_CONTROL = "camera_control"           # Can emit CAMERA_ADJUST blocks


@dataclass
class ProviderInfo:
    """Provider metadata and capabilities"""
    name: str
    version: str
    capabilities: List[ProviderCapability] = field(default_factory=list)
    requires_api_key: bool = False
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "version": self.version,
            "capabilities": [c.value for c in self.capabilities],
            "requiresApiKey": self.requires_api_key,
            "description": self.description,
        }


class InferenceProvider(ABC):
    """
    Abstract base class for inference providers.

    Subclasses supply the raw model call and the mapping of SDK errors;
    prompt building, timeouts and empty-response checks live here.
    """

    def __init__(self, timeout_seconds: Optional[float] = None):
        self._settings = get_settings()
        self.timeout_seconds = (
            timeout_seconds if timeout_seconds is not None
            else self._settings.inference_timeout_seconds
        )

    @property
    @abstractmethod
    def info(self) -> ProviderInfo:
        """Return provider metadata and capabilities"""
        pass

    @property
    def name(self) -> str:
        """Provider name for identification"""
        return self.info.name

    @abstractmethod
    def is_available(self) -> bool:
        """
        Check if provider is currently available.

        Returns:
            True if provider can accept inference requests
        """
        pass

    @abstractmethod
    async def _call_model(
        self,
        images: List[str],
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """Raw model call returning the response text"""
        pass

    @abstractmethod
    def _map_error(self, error: Exception) -> InferenceError:
        """Translate an SDK exception into the ShotCoach error taxonomy"""
        pass

    async def infer(self, image_base64: str, options: AnalysisOptions) -> str:
        """
        Run one coaching inference on a live frame.

        Args:
            image_base64: Encoded live frame
            options: Prompt context for this cycle

        Returns:
            Raw model response text

        Raises:
            InferenceError: On provider failure, timeout or empty response
        """
        images = []
        if options.reference_photo_base64:
            images.append(options.reference_photo_base64)
        images.append(image_base64)

        prompt = build_coaching_prompt(options)
        return await self._run(images, prompt)

    async def describe_reference(self, image_base64: str) -> str:
        """
        Ask the model for a technical description of a reference photo.

        Raises:
            InferenceError: On provider failure, timeout or empty response
        """
        return await self._run(
            [image_base64],
            REFERENCE_ANALYSIS_PROMPT,
            max_tokens=self._settings.reference_max_tokens,
            temperature=self._settings.reference_temperature,
        )

    async def _run(
        self,
        images: List[str],
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        try:
            text = await asyncio.wait_for(
                self._call_model(images, prompt, max_tokens=max_tokens, temperature=temperature),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            raise InferenceTimeoutError(provider=self.name, timeout_seconds=self.timeout_seconds)
        except InferenceError:
            raise
        except Exception as e:
            logger.error(f"{self.name} inference error: {e}")
            raise self._map_error(e) from e

        if not text or not text.strip():
            raise InvalidResponseError(
                message=f"{self.name} returned an empty response",
                raw_response=text,
                provider=self.name,
            )
        return text

    async def health_check(self) -> dict:
        """
        Perform health check on provider.

        Returns:
            Dict with status and details
        """
        try:
            available = self.is_available()
            return {
                "provider": self.name,
                "available": available,
                "status": "healthy" if available else "unavailable",
            }
        except Exception as e:
            return {
                "provider": self.name,
                "available": False,
                "status": "error",
                "error": str(e),
            }

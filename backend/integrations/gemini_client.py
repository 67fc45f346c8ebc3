# backend/integrations/gemini_client.py
"""
Google Gemini Vision API Client for live photography coaching
Uses Google's Gemini 2.5 with vision capabilities via google-genai SDK
"""

from google import genai
from google.genai import types
import base64
import binascii
from typing import List, Optional, Tuple
import logging

from config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

SUPPORTED_MEDIA_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]


class GeminiVisionClient:
    """Client for interacting with Google Gemini Vision API"""

    def __init__(self, api_key: Optional[str] = None):
        """Initialize Gemini client with API key from settings"""
        self.client = genai.Client(api_key=api_key or settings.google_api_key)
        self.model = settings.gemini_model
        self.max_tokens = settings.gemini_max_tokens
        self.temperature = settings.gemini_temperature

    async def analyze_images(
        self,
        images: List[str],
        prompt: str,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Send one or more images plus a prompt, return the response text

        Args:
            images: Base64 images or data URLs, in the order the prompt refers to them
            prompt: Instruction text (sent after the images)
            max_tokens: Override for GEMINI_MAX_TOKENS
            temperature: Override for GEMINI_TEMPERATURE
        """
        contents = []

        # Gemini needs raw bytes, not base64 strings
        for image in images:
            image_bytes, mime_type = self._extract_base64_image(image)
            if image_bytes:
                logger.debug(f"Adding image with media type: {mime_type}")
                contents.append(types.Part.from_bytes(data=image_bytes, mime_type=mime_type))

        contents.append(prompt)

        logger.debug(f"Calling Gemini Vision API with {len(images)} image(s)")

        response = await self.client.aio.models.generate_content(
            model=self.model,
            contents=contents,
            config=types.GenerateContentConfig(
                max_output_tokens=max_tokens or self.max_tokens,
                temperature=self.temperature if temperature is None else temperature,
            ),
        )

        response_text = response.text or ""
        logger.debug(f"Gemini response: {response_text[:500]}")
        return response_text

    def _extract_base64_image(self, data_url: str) -> Tuple[Optional[bytes], Optional[str]]:
        """
        Extract image bytes and media type from data URL.

        Args:
            data_url: Data URL like "data:image/png;base64,iVBORw0..." or raw base64

        Returns:
            Tuple of (image_bytes, media_type) or (None, None) if invalid
        """
        if not data_url:
            return None, None

        media_type = "image/jpeg"
        base64_data = data_url

        if "base64," in data_url:
            prefix, base64_data = data_url.split("base64,", 1)
            if prefix.startswith("data:"):
                type_part = prefix[5:]
                if ";" in type_part:
                    media_type = type_part.split(";")[0]
                elif type_part:
                    media_type = type_part

            if media_type not in SUPPORTED_MEDIA_TYPES:
                logger.warning(f"Unsupported media type {media_type}, defaulting to image/jpeg")
                media_type = "image/jpeg"

        try:
            return base64.b64decode(base64_data), media_type
        except (binascii.Error, ValueError) as e:
            logger.warning(f"Failed to decode base64 image: {e}")
            return None, None


# Global client instance
_gemini_client: Optional[GeminiVisionClient] = None


def get_gemini_client() -> GeminiVisionClient:
    """Get or create Gemini client singleton"""
    global _gemini_client
    if _gemini_client is None:
        _gemini_client = GeminiVisionClient()
    return _gemini_client

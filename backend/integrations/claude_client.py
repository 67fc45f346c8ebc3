# backend/integrations/claude_client.py
"""
Claude Vision API Client for live photography coaching
Uses Anthropic's async client so a cycle never blocks the event loop
"""

import anthropic
from typing import List, Optional, Tuple
import logging

from config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

SUPPORTED_MEDIA_TYPES = ["image/jpeg", "image/png", "image/gif", "image/webp"]


class ClaudeVisionClient:
    """Client for interacting with Claude Vision API"""

    def __init__(self, api_key: Optional[str] = None):
        """Initialize Claude client with API key from settings"""
        self.client = anthropic.AsyncAnthropic(api_key=api_key or settings.anthropic_api_key)
        self.model = settings.claude_model
        self.max_tokens = settings.claude_max_tokens
        self.temperature = settings.claude_temperature

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
            max_tokens: Override for CLAUDE_MAX_TOKENS
            temperature: Override for CLAUDE_TEMPERATURE

        Returns:
            Concatenated text blocks of the response ("" if none)
        """
        message_content = []

        for image in images:
            image_data, media_type = self._extract_base64_image(image)
            if image_data:
                logger.debug(f"Adding image with media type: {media_type}")
                message_content.append(
                    {
                        "type": "image",
                        "source": {
                            "type": "base64",
                            "media_type": media_type,
                            "data": image_data,
                        },
                    }
                )

        message_content.append({"type": "text", "text": prompt})

        logger.debug(f"Calling Claude Vision API with {len(images)} image(s)")

        response = await self.client.messages.create(
            model=self.model,
            max_tokens=max_tokens or self.max_tokens,
            temperature=self.temperature if temperature is None else temperature,
            messages=[{"role": "user", "content": message_content}],
        )

        response_text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        logger.debug(f"Claude response: {response_text[:500]}")
        return response_text

    def _extract_base64_image(self, data_url: str) -> Tuple[Optional[str], Optional[str]]:
        """
        Extract base64 image data and media type from data URL.

        Args:
            data_url: Data URL like "data:image/png;base64,iVBORw0..." or raw base64

        Returns:
            Tuple of (base64_data, media_type) or (None, None) if invalid
        """
        if not data_url:
            return None, None

        if "base64," in data_url:
            # Parse data URL format: data:image/jpeg;base64,<data>
            prefix, base64_data = data_url.split("base64,", 1)
            media_type = "image/jpeg"

            if prefix.startswith("data:"):
                type_part = prefix[5:]
                if ";" in type_part:
                    media_type = type_part.split(";")[0]
                elif type_part:
                    media_type = type_part

            if media_type not in SUPPORTED_MEDIA_TYPES:
                logger.warning(f"Unsupported media type {media_type}, defaulting to image/jpeg")
                media_type = "image/jpeg"

            return base64_data, media_type

        # Raw base64 without data URL prefix - frames are always JPEG
        return data_url, "image/jpeg"


# Global client instance
_claude_client: Optional[ClaudeVisionClient] = None


def get_claude_client() -> ClaudeVisionClient:
    """Get or create Claude client singleton"""
    global _claude_client
    if _claude_client is None:
        _claude_client = ClaudeVisionClient()
    return _claude_client

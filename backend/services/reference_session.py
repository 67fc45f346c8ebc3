# backend/services/reference_session.py
"""
Reference Photo Session

Holds the reference photo the user is trying to match. The photo is
loaded (local file, raw bytes or http(s) URL), downsized, described by
the vision model once, and then fed to every analysis cycle through
AnalysisOptions.
"""

import asyncio
import inspect
import json
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import httpx

from config import get_settings
from errors import InferenceError, ReferenceAnalysisError, ShotCoachError
from models import ReferenceAnalysis, ReferencePhoto
from services.providers.base import InferenceProvider
from utils.image_encoder import FrameEncoder, get_frame_encoder

logger = logging.getLogger(__name__)

ReferenceSource = Union[str, Path, bytes]
ReferenceListener = Callable[[Optional[ReferencePhoto]], Any]

_JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)
_REQUIRED_JSON_FIELDS = ("pictureType", "style", "subject")
_NOT_SPECIFIED = "not specified"

# (field, label tried first, fallback label)
_TEXT_FIELDS = [
    ("pictureType", "pictureType", "type"),
    ("style", "style", None),
    ("subject", "subject", None),
    ("composition", "composition", None),
    ("lighting", "lighting", None),
    ("lens", "lens", None),
    ("colorTone", "colorTone", "color"),
    ("summary", "summary", None),
]


def _extract_field(text: str, label: str) -> str:
    match = re.search(rf"{re.escape(label)}[\"']?[:\s]*[\"']?([^\n,}}]+)", text, re.IGNORECASE)
    if not match:
        return ""
    value = re.sub(r"[\"']", "", match.group(1)).strip()
    if value.lower() == _NOT_SPECIFIED:
        return ""
    return value


def parse_reference_text(text: str) -> ReferenceAnalysis:
    """
    Parse a reference description from the model.

    Tries the outermost JSON object first; falls back to scanning
    "field: value" pairs. Missing fields get generic values.
    """
    text = (text or "").strip()

    match = _JSON_OBJECT_RE.search(text)
    if match:
        try:
            data = json.loads(match.group(0))
        except json.JSONDecodeError as e:
            logger.debug(f"Reference JSON did not parse, falling back to text scan: {e}")
        else:
            if isinstance(data, dict) and all(data.get(key) for key in _REQUIRED_JSON_FIELDS):
                return ReferenceAnalysis.from_dict(data)

    logger.debug("Using text scan for reference analysis")
    fields: Dict[str, str] = {}
    for name, label, fallback_label in _TEXT_FIELDS:
        value = _extract_field(text, label)
        if not value and fallback_label:
            value = _extract_field(text, fallback_label)
        fields[name] = value
    return ReferenceAnalysis.from_dict(fields)


class ReferenceSession:
    """
    Current reference photo and its analysis.

    Owned by a CoachingSession; listeners are called with the new
    ReferencePhoto on set and with None on clear.
    """

    def __init__(
        self,
        provider: InferenceProvider,
        encoder: Optional[FrameEncoder] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.provider = provider
        self.encoder = encoder or get_frame_encoder()
        self._http_client = http_client
        self._current: Optional[ReferencePhoto] = None
        self._listeners: List[ReferenceListener] = []

    @property
    def current(self) -> Optional[ReferencePhoto]:
        return self._current

    @property
    def has_reference(self) -> bool:
        return self._current is not None

    def add_listener(self, listener: ReferenceListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: ReferenceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def set_reference(self, source: ReferenceSource) -> ReferencePhoto:
        """
        Load, encode and describe a reference photo.

        Args:
            source: Local path, raw image bytes, or http(s) URL

        Returns:
            The new current ReferencePhoto

        Raises:
            ReferenceAnalysisError: If the photo cannot be loaded or encoded
        """
        label = self._describe_source(source)
        logger.info(f"Setting reference photo from {label}")

        image_base64 = await self._load(source, label)
        analysis = await self._analyze(image_base64)

        photo = ReferencePhoto(source=label, image_base64=image_base64, analysis=analysis)
        self._current = photo
        await self._notify(photo)
        logger.info(f"Reference photo set: {analysis.picture_type} / {analysis.style}")
        return photo

    async def clear(self) -> None:
        if self._current is None:
            return
        self._current = None
        logger.info("Reference photo cleared")
        await self._notify(None)

    def options_patch(self) -> Dict[str, Any]:
        """AnalysisOptions fields carrying the current reference"""
        if self._current is None:
            return {"reference_photo_base64": None, "reference_analysis": None}
        return {
            "reference_photo_base64": self._current.image_base64,
            "reference_analysis": (
                self._current.analysis.to_prompt_text() if self._current.analysis else None
            ),
        }

    @staticmethod
    def _describe_source(source: ReferenceSource) -> str:
        if isinstance(source, (bytes, bytearray)):
            return f"<{len(source)} bytes>"
        return str(source)

    async def _load(self, source: ReferenceSource, label: str) -> str:
        try:
            if isinstance(source, (bytes, bytearray)):
                return await asyncio.to_thread(self.encoder.encode_bytes, bytes(source))

            text = str(source)
            if text.lower().startswith(("http://", "https://")):
                data = await self._download(text)
                return await asyncio.to_thread(self.encoder.encode_bytes, data)

            return await asyncio.to_thread(self.encoder.encode_file, text)
        except ReferenceAnalysisError:
            raise
        except ShotCoachError as e:
            raise ReferenceAnalysisError(e.message, source=label) from e

    async def _download(self, url: str) -> bytes:
        timeout = get_settings().reference_download_timeout_seconds
        try:
            if self._http_client is not None:
                response = await self._http_client.get(url, follow_redirects=True)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    response = await client.get(url, follow_redirects=True)
        except httpx.HTTPError as e:
            logger.error(f"Failed to download reference photo {url}: {e}")
            raise ReferenceAnalysisError(f"download failed: {e}", source=url) from e

        if response.status_code != 200:
            logger.error(f"Failed to download reference photo: HTTP {response.status_code}")
            raise ReferenceAnalysisError(f"HTTP {response.status_code}", source=url)

        return response.content

    async def _analyze(self, image_base64: str) -> ReferenceAnalysis:
        try:
            text = await self.provider.describe_reference(image_base64)
        except InferenceError as e:
            logger.warning(f"Reference analysis failed, using generic analysis: {e.message}")
            return ReferenceAnalysis.generic()
        return parse_reference_text(text)

    async def _notify(self, photo: Optional[ReferencePhoto]) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(photo)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Reference listener failed")

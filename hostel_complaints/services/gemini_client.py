"""
Gemini generateContent client

One request per call, no retries. Any failure to obtain reply text is
reported as ClassificationUnavailable.
"""
import base64
import logging
from typing import Optional

import httpx

from hostel_complaints.core.config import settings
from hostel_complaints.core.exceptions import ClassificationUnavailable

logger = logging.getLogger(__name__)


class GeminiClient:
    """Thin async wrapper around the Gemini REST API"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = settings.GEMINI_API_KEY if api_key is None else api_key
        self.model = model or settings.GEMINI_MODEL
        self.base_url = (base_url or settings.GEMINI_API_URL).rstrip("/")
        self.timeout = timeout or settings.GEMINI_TIMEOUT_SECONDS
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    @property
    def url(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def _build_payload(self, prompt: str, image: Optional[bytes], mime_type: str) -> dict:
        parts = []
        if image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": mime_type,
                    "data": base64.b64encode(image).decode("ascii"),
                }
            })
        parts.append({"text": prompt})

        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": {
                "temperature": 0.2,  # low = more consistent labels
                "maxOutputTokens": 1024
            }
        }

    @staticmethod
    def _extract_text(body: dict) -> Optional[str]:
        try:
            parts = body["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return None
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        return text or None

    async def generate(
        self,
        prompt: str,
        image: Optional[bytes] = None,
        mime_type: str = "image/jpeg"
    ) -> str:
        """
        Send a prompt (optionally with an image) and return the reply text

        Raises:
            ClassificationUnavailable: no API key, network error, non-200
                status, or a reply without text.
        """
        if not self.configured:
            raise ClassificationUnavailable("GEMINI_API_KEY is not configured")

        payload = self._build_payload(prompt, image, mime_type)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.url,
                    params={"key": self.api_key},
                    json=payload
                )
        except httpx.HTTPError as e:
            logger.warning(f"Gemini request failed: {e!r}")
            raise ClassificationUnavailable(f"Gemini request failed: {e}") from e

        if response.status_code != 200:
            logger.warning(f"Gemini API error: {response.status_code}")
            raise ClassificationUnavailable(f"Gemini API returned status {response.status_code}")

        try:
            body = response.json()
        except ValueError as e:
            raise ClassificationUnavailable("Gemini API returned a non-JSON body") from e

        text = self._extract_text(body)
        if text is None:
            logger.warning("Gemini API returned no text")
            raise ClassificationUnavailable("Gemini API returned an empty response")

        logger.debug(f"Gemini raw reply: {text}")
        return text

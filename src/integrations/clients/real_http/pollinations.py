"""
Pollinations image client.

Fetches one generated image per call; batching and pacing live in
ImageBatchService.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import quote

import httpx

from src.error_handler import ImageProviderError
from src.integrations.contracts.interfaces import GeneratedImage, ImageProvider

logger = logging.getLogger(__name__)

POLLINATIONS_PROMPT_URL = "https://image.pollinations.ai/prompt/"

AUTH_FAILED_MESSAGE = "Authentication failed or invalid API key."
RATE_LIMITED_MESSAGE = "Rate limit exceeded for Pollinations.AI. Please try again later."


class PollinationsImageClient(ImageProvider):
    def __init__(
        self,
        api_key: str = "",
        timeout_seconds: float = 60.0,
        base_url: str = POLLINATIONS_PROMPT_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.base_url = base_url
        self._transport = transport

    def build_url(self, prompt: str) -> str:
        return f"{self.base_url}{quote(prompt, safe='')}"

    def build_params(self, seed: int, width: Optional[str] = None, height: Optional[str] = None) -> Dict[str, str]:
        params = {"nologo": "true"}
        if width:
            params["width"] = str(width)
        if height:
            params["height"] = str(height)
        params["seed"] = str(seed)
        return params

    async def fetch_image(
        self,
        prompt: str,
        seed: int,
        width: Optional[str] = None,
        height: Optional[str] = None,
    ) -> GeneratedImage:
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        url = self.build_url(prompt)
        params = self.build_params(seed, width, height)

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = await client.get(url, params=params, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                message = AUTH_FAILED_MESSAGE
            elif status == 429:
                message = RATE_LIMITED_MESSAGE
            else:
                message = f"Pollinations.AI returned status {status}"
            raise ImageProviderError(message, status_code=status) from e
        except httpx.RequestError as e:
            logger.error("No response received from Pollinations.AI: %s", e)
            raise ImageProviderError(f"No response received from Pollinations.AI: {e}") from e

        return GeneratedImage(
            content=response.content,
            content_type=response.headers.get("content-type", ""),
            seed=seed,
        )

"""
Image batch service.

Turns one prompt into N generated images. Requests go out one at a time
with a fixed pause between them; each image is returned as a data URI.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, List, Optional

from src.error_handler import ImageBatchError, ImageParameterError, ImageProviderError
from src.integrations.contracts.interfaces import GeneratedImage, ImageProvider

logger = logging.getLogger(__name__)

DEFAULT_SEED = 42
ERROR_PLACEHOLDER = "/error-placeholder.png"


@dataclass(frozen=True)
class ImageTask:
    index: int
    total: int
    prompt: str
    seed: int
    width: Optional[str] = None
    height: Optional[str] = None


class ImageTaskSequence:
    """
    Lazy sequence of image tasks; task i uses seed base_seed + i.

    Iterating again starts over from the first task.
    """

    def __init__(self, prompt: str, count: int, base_seed: int, width: Optional[str] = None, height: Optional[str] = None):
        self.prompt = prompt
        self.count = count
        self.base_seed = base_seed
        self.width = width
        self.height = height

    def __iter__(self) -> Iterator[ImageTask]:
        for i in range(self.count):
            yield ImageTask(
                index=i,
                total=self.count,
                prompt=self.prompt,
                seed=self.base_seed + i,
                width=self.width,
                height=self.height,
            )

    def __len__(self) -> int:
        return self.count


def parse_image_count(raw: Optional[str], max_images: int) -> int:
    """Base-10 image count; defaults to 1."""
    if raw is None or str(raw).strip() == "":
        return 1
    try:
        count = int(str(raw).strip(), 10)
    except ValueError as exc:
        raise ImageParameterError("numImages must be a whole number") from exc
    if count < 1 or count > max_images:
        raise ImageParameterError(f"numImages must be between 1 and {max_images}")
    return count


def parse_seed(raw: Optional[str]) -> int:
    if raw is None or str(raw).strip() == "":
        return DEFAULT_SEED
    try:
        return int(str(raw).strip(), 10)
    except ValueError as exc:
        raise ImageParameterError("seed must be a whole number") from exc


def to_data_uri(image: GeneratedImage) -> str:
    content_type = (image.content_type or "").lower()
    if "image/png" in content_type:
        mime = "image/png"
    elif "image/gif" in content_type:
        mime = "image/gif"
    else:
        mime = "image/jpeg"
    encoded = base64.b64encode(image.content).decode("ascii")
    return f"data:{mime};base64,{encoded}"


class ImageBatchService:
    def __init__(
        self,
        provider: ImageProvider,
        delay_seconds: float = 1.0,
        max_images: int = 10,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.delay_seconds = delay_seconds
        self.max_images = max_images
        self._sleep = sleep

    def plan(
        self,
        prompt: Optional[str],
        num_images: Optional[str] = None,
        seed: Optional[str] = None,
        width: Optional[str] = None,
        height: Optional[str] = None,
    ) -> ImageTaskSequence:
        if not prompt:
            raise ImageParameterError("Prompt is required")
        return ImageTaskSequence(
            prompt=prompt,
            count=parse_image_count(num_images, self.max_images),
            base_seed=parse_seed(seed),
            width=width,
            height=height,
        )

    async def generate(self, tasks: ImageTaskSequence) -> List[str]:
        """
        Run every task and return data URIs in task order.

        Failed images become ERROR_PLACEHOLDER. Provider auth failures
        (401/403) and rate limiting (429) abort the whole batch.
        """
        logger.info(
            "Image batch: prompt=%r count=%d base_seed=%d width=%s height=%s",
            tasks.prompt[:30],
            len(tasks),
            tasks.base_seed,
            tasks.width,
            tasks.height,
        )
        results: List[str] = []
        produced = 0

        for task in tasks:
            if task.index > 0 and self.delay_seconds > 0:
                await self._sleep(self.delay_seconds)

            logger.info("Image call %d/%d seed=%d", task.index + 1, task.total, task.seed)
            try:
                image = await self.provider.fetch_image(task.prompt, task.seed, task.width, task.height)
            except ImageProviderError as e:
                logger.error(
                    "Error generating image %d/%d for prompt %r: %s",
                    task.index + 1,
                    task.total,
                    task.prompt[:30],
                    e.message,
                )
                if e.aborts_batch:
                    raise
                results.append(ERROR_PLACEHOLDER)
                continue

            results.append(to_data_uri(image))
            produced += 1

        if produced == 0:
            raise ImageBatchError("No images could be generated.")
        return results

"""Slide image generation via an image model."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Protocol

from impromptu_presenter.domain.errors import ImageGenerationError
from impromptu_presenter.domain.session import SLIDE_COUNT

_logger = logging.getLogger(__name__)

_ASPECT_PROMPTS = (
    "Generate an image related to: {topic}. "
    "This image should represent a key aspect of the topic.",
    "Generate another image related to: {topic}. "
    "This image should represent a different key aspect of the topic.",
    "Generate a third image related to: {topic}. "
    "This image should represent yet another key aspect of the topic.",
)

INVALID_RESPONSE_MESSAGE = "Failed to generate images or received invalid response."


class ImageClient(Protocol):
    """Interface for text-to-image generation."""

    async def generate(self, *, model: str, prompt: str, size: str) -> str | None:
        """Return an image reference (data URL or hosted URL) for a prompt."""


@dataclass
class ImageService:
    """Service that requests one image per slide for a topic."""

    client: ImageClient
    model: str
    size: str = "1024x1024"
    timeout_seconds: float | None = None

    async def generate(self, topic: str) -> tuple[str, ...]:
        """Return exactly SLIDE_COUNT image references for a topic."""
        try:
            images = await asyncio.wait_for(
                self._generate_all(topic), timeout=self.timeout_seconds
            )
        except ImageGenerationError:
            raise
        except TimeoutError as exc:
            raise ImageGenerationError("Image generation timed out.") from exc
        except Exception as exc:
            _logger.exception("Image generation error")
            raise ImageGenerationError(str(exc) or type(exc).__name__) from exc
        if len(images) != SLIDE_COUNT or not all(images):
            raise ImageGenerationError(INVALID_RESPONSE_MESSAGE)
        return tuple(images)

    async def _generate_all(self, topic: str) -> list[str]:
        images: list[str] = []
        for template in _ASPECT_PROMPTS[:SLIDE_COUNT]:
            image = await self.client.generate(
                model=self.model,
                prompt=template.format(topic=topic),
                size=self.size,
            )
            if not image:
                raise ImageGenerationError(INVALID_RESPONSE_MESSAGE)
            images.append(image)
        return images

"""OpenAI Images API client for slide generation."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from impromptu_presenter.services.images import ImageClient


@dataclass
class OpenAIImageClient(ImageClient):
    """Image client backed by the OpenAI Images API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIImageClient":
        """Create an OpenAI image client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def generate(self, *, model: str, prompt: str, size: str) -> str | None:
        """Generate a single image and return it as a data URL."""
        response = await self.client.images.generate(
            model=model,
            prompt=prompt,
            size=size,
            n=1,
        )
        if not response.data:
            return None
        image = response.data[0]
        if image.b64_json:
            return f"data:image/png;base64,{image.b64_json}"
        return image.url

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP client."""
        await self.client.close()

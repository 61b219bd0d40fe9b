"""OpenAI Chat Completions client for audio presentation review."""

import json
from dataclasses import dataclass

from openai import AsyncOpenAI

from impromptu_presenter.services.feedback import FeedbackClient

_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
}


@dataclass
class OpenAIFeedbackClient(FeedbackClient):
    """Feedback client backed by an audio-capable chat model."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIFeedbackClient":
        """Create an OpenAI feedback client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def review(
        self,
        *,
        model: str,
        audio_data_url: str,
        schema: dict[str, object],
        prompt: str,
    ) -> dict[str, object]:
        """Send the recording with the prompt and parse structured output."""
        audio_format, audio_data = _split_data_url(audio_data_url)
        response = await self.client.chat.completions.create(
            model=model,
            modalities=["text"],
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {
                            "type": "input_audio",
                            "input_audio": {
                                "data": audio_data,
                                "format": audio_format,
                            },
                        },
                    ],
                }
            ],
            response_format={
                "type": "json_schema",
                "json_schema": {
                    "name": "presentation_feedback",
                    "strict": True,
                    "schema": schema,
                },
            },
        )
        output_text = response.choices[0].message.content if response.choices else None
        if not output_text:
            raise RuntimeError("OpenAI returned an empty response")
        return json.loads(output_text)

    async def close(self) -> None:
        """Close the underlying OpenAI HTTP client."""
        await self.client.close()


def _split_data_url(data_url: str) -> tuple[str, str]:
    """Return the OpenAI audio format and base64 payload of a data URL."""
    header, _, payload = data_url.partition(",")
    if not header.startswith("data:") or ";base64" not in header or not payload:
        raise ValueError("Audio must be a base64 data URL")
    mime_type = header[len("data:") :].split(";", 1)[0].lower()
    audio_format = _AUDIO_FORMATS.get(mime_type)
    if audio_format is None:
        raise ValueError(f"Unsupported audio type: {mime_type}")
    return audio_format, payload

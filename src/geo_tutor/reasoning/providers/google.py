"""Google Gemini streaming provider."""

from __future__ import annotations

from collections.abc import AsyncIterator

from .base import StreamProvider


class GoogleProvider(StreamProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.5-pro",
        max_output_tokens: int = 8192,
    ):
        try:
            from google import genai
        except ImportError:
            raise ImportError(
                "Google GenAI SDK not installed. Run: pip install geo-tutor[google]"
            )
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._max_output_tokens = max_output_tokens

    async def stream_text(
        self,
        prompt: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> AsyncIterator[str]:
        from google.genai import types

        contents = []
        if image and image_mime_type:
            contents.append(types.Part.from_bytes(data=image, mime_type=image_mime_type))
        contents.append(types.Part.from_text(text=prompt))

        stream = await self._client.aio.models.generate_content_stream(
            model=self._model,
            contents=contents,
            config=types.GenerateContentConfig(
                max_output_tokens=self._max_output_tokens
            ),
        )
        async for chunk in stream:
            if chunk.text:
                yield chunk.text

    @property
    def provider_name(self) -> str:
        return "google"

    @property
    def model_name(self) -> str:
        return self._model

"""Anthropic (Claude) streaming provider."""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator

from .base import StreamProvider


class AnthropicProvider(StreamProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "claude-sonnet-4-5",
        max_output_tokens: int = 8192,
    ):
        try:
            import anthropic
        except ImportError:
            raise ImportError(
                "Anthropic SDK not installed. Run: pip install geo-tutor[anthropic]"
            )
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self._model = model
        self._max_output_tokens = max_output_tokens

    async def stream_text(
        self,
        prompt: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> AsyncIterator[str]:
        content: list[dict] = []
        if image and image_mime_type:
            content.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": image_mime_type,
                        "data": base64.b64encode(image).decode("ascii"),
                    },
                }
            )
        content.append({"type": "text", "text": prompt})

        async with self._client.messages.stream(
            model=self._model,
            max_tokens=self._max_output_tokens,
            messages=[{"role": "user", "content": content}],
        ) as stream:
            async for text in stream.text_stream:
                yield text

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def model_name(self) -> str:
        return self._model

"""OpenAI-compatible streaming provider.

Covers: OpenAI (GPT-4o and later), DeepSeek, Together, Groq, and any
service that implements the OpenAI chat completions API with streaming.
"""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator

from .base import StreamProvider


class OpenAICompatProvider(StreamProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "gpt-4o",
        base_url: str | None = None,
        max_output_tokens: int = 8192,
    ):
        try:
            from openai import AsyncOpenAI
        except ImportError:
            raise ImportError(
                "OpenAI SDK not installed. Run: pip install geo-tutor[openai]"
            )
        kwargs: dict = {"api_key": api_key}
        if base_url:
            kwargs["base_url"] = base_url
        self._client = AsyncOpenAI(**kwargs)
        self._model = model
        self._base_url = base_url
        self._max_output_tokens = max_output_tokens

    async def stream_text(
        self,
        prompt: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> AsyncIterator[str]:
        content: list[dict] = []
        if image and image_mime_type:
            b64 = base64.b64encode(image).decode("ascii")
            content.append(
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{image_mime_type};base64,{b64}"},
                }
            )
        content.append({"type": "text", "text": prompt})

        stream = await self._client.chat.completions.create(
            model=self._model,
            max_tokens=self._max_output_tokens,
            messages=[{"role": "user", "content": content}],
            stream=True,
        )
        async for chunk in stream:
            # Usage-only chunks carry no choices
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta

    @property
    def provider_name(self) -> str:
        if self._base_url:
            return f"openai-compatible ({self._base_url})"
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

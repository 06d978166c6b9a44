"""Streaming provider abstraction — all LLM providers implement this interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator


class StreamProvider(ABC):
    """Abstract interface for streaming, optionally vision-capable, LLMs."""

    @abstractmethod
    def stream_text(
        self,
        prompt: str,
        image: bytes | None = None,
        image_mime_type: str | None = None,
    ) -> AsyncIterator[str]:
        """Send prompt (+ optional image) and yield text chunks as they arrive.

        The iterator is finite and cannot be restarted. SDK errors are
        raised from the iterator unchanged; callers classify them.
        """
        ...

    @property
    @abstractmethod
    def provider_name(self) -> str: ...

    @property
    @abstractmethod
    def model_name(self) -> str: ...

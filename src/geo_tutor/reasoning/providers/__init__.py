"""Streaming providers — Google Gemini, Anthropic, OpenAI-compatible."""

from .base import StreamProvider

__all__ = [
    "StreamProvider",
]

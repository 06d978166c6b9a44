"""Provider factory — creates the configured streaming provider instance."""

from __future__ import annotations

import logging

from ..config import GeoTutorConfig
from .providers.base import StreamProvider

logger = logging.getLogger("geo-tutor")

DEFAULT_MODELS = {
    "google": "gemini-2.5-pro",
    "anthropic": "claude-sonnet-4-5",
    "openai": "gpt-4o",
}


def create_provider(config: GeoTutorConfig) -> StreamProvider | None:
    """Create the configured provider, or None if not configured."""
    r = config.reasoning
    if not r.provider or not r.api_key:
        return None

    if r.provider == "google":
        from .providers.google import GoogleProvider

        return GoogleProvider(
            api_key=r.api_key,
            model=r.model or DEFAULT_MODELS["google"],
            max_output_tokens=r.max_output_tokens,
        )
    elif r.provider == "anthropic":
        from .providers.anthropic import AnthropicProvider

        return AnthropicProvider(
            api_key=r.api_key,
            model=r.model or DEFAULT_MODELS["anthropic"],
            max_output_tokens=r.max_output_tokens,
        )
    elif r.provider == "openai":
        from .providers.openai_compat import OpenAICompatProvider

        return OpenAICompatProvider(
            api_key=r.api_key,
            model=r.model or DEFAULT_MODELS["openai"],
            max_output_tokens=r.max_output_tokens,
        )
    elif r.provider == "openai-compatible":
        from .providers.openai_compat import OpenAICompatProvider

        return OpenAICompatProvider(
            api_key=r.api_key,
            model=r.model or DEFAULT_MODELS["openai"],
            base_url=r.base_url or None,
            max_output_tokens=r.max_output_tokens,
        )
    else:
        logger.warning("Unknown provider: %s", r.provider)
        return None

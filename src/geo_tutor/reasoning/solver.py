"""Geometry solver — streams a solution from the configured provider."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum

from ..exceptions import (
    ConfigError,
    ExtractionError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    SolverBusyError,
)
from ..models import MathSolution
from .extractor import extract_solution
from .prompts import build_solve_prompt
from .providers.base import StreamProvider

logger = logging.getLogger("geo-tutor")

# Default maximum time for a whole stream (seconds).
# Overridden by config.reasoning.llm_timeout_seconds at runtime.
LLM_CALL_TIMEOUT = 180.0

ProgressSink = Callable[[str], None]

_AUTH_KEYWORDS = (
    "401",
    "403",
    "unauthorized",
    "forbidden",
    "api key",
    "api_key",
    "permission_denied",
)
_RATE_LIMIT_KEYWORDS = (
    "429",
    "rate limit",
    "rate_limit",
    "quota",
    "resource_exhausted",
    "overloaded",
)


def _classify_provider_error(e: Exception) -> ProviderError:
    """Map an SDK exception to the matching ProviderError subclass."""
    msg = str(e).lower()
    if any(keyword in msg for keyword in _AUTH_KEYWORDS):
        return ProviderAuthError(f"Provider rejected the credentials: {e}")
    if any(keyword in msg for keyword in _RATE_LIMIT_KEYWORDS):
        return ProviderRateLimitError(f"Provider rate limit hit: {e}")
    return ProviderError(f"Model stream failed: {e}")


class SolveStatus(str, Enum):
    IDLE = "idle"
    RECEIVING = "receiving"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class SolveRequest:
    problem_text: str = ""
    image: bytes | None = None
    image_mime_type: str | None = None

    def __post_init__(self) -> None:
        if not self.problem_text.strip() and not self.image:
            raise ValueError("A problem needs a description or an image")
        if self.image and not self.image_mime_type:
            raise ValueError("An image needs a media type (e.g. image/png)")

    @property
    def has_image(self) -> bool:
        return bool(self.image)


async def accumulate(chunks: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield the cumulative text after each non-empty chunk, in arrival order."""
    text = ""
    async for chunk in chunks:
        if not chunk:
            continue
        text += chunk
        yield text


class GeometrySolver:
    """Runs one problem at a time through a streaming provider."""

    def __init__(
        self,
        provider: StreamProvider | None = None,
        timeout: float = LLM_CALL_TIMEOUT,
    ):
        self._provider = provider
        self._timeout = timeout
        self._status = SolveStatus.IDLE
        self._last_text = ""

    @property
    def has_provider(self) -> bool:
        return self._provider is not None

    @property
    def provider_info(self) -> dict:
        if self._provider is None:
            return {"configured": False}
        return {
            "configured": True,
            "provider": self._provider.provider_name,
            "model": self._provider.model_name,
        }

    @property
    def status(self) -> SolveStatus:
        return self._status

    @property
    def last_text(self) -> str:
        """Raw model output of the latest request, complete or not."""
        return self._last_text

    def set_provider(self, provider: StreamProvider | None) -> None:
        if self._status == SolveStatus.RECEIVING:
            raise SolverBusyError("Cannot swap providers while a stream is active")
        self._provider = provider

    async def _receive(
        self,
        prompt: str,
        request: SolveRequest,
        on_progress: ProgressSink | None,
    ) -> str:
        stream = self._provider.stream_text(
            prompt, request.image, request.image_mime_type
        )
        async for snapshot in accumulate(stream):
            self._last_text = snapshot
            if on_progress is None:
                continue
            try:
                on_progress(snapshot)
            except Exception:
                logger.exception("Progress sink failed at %d chars", len(snapshot))
        return self._last_text

    async def solve(
        self,
        request: SolveRequest,
        on_progress: ProgressSink | None = None,
    ) -> MathSolution:
        """Stream a solution for ``request`` and extract the final document.

        ``on_progress`` receives the cumulative text after every chunk.
        Extraction runs once, only after the stream ends naturally.
        Raises ProviderError subclasses for transport failures and
        ExtractionError subclasses when the output is unusable.
        """
        if self._status == SolveStatus.RECEIVING:
            raise SolverBusyError("A problem is already being solved")
        if not self._provider:
            raise ConfigError("No model provider configured")

        self._status = SolveStatus.RECEIVING
        self._last_text = ""
        prompt = build_solve_prompt(request.problem_text, request.has_image)
        logger.info(
            "Solving with %s/%s (image=%s)",
            self._provider.provider_name,
            self._provider.model_name,
            request.has_image,
        )

        try:
            text = await asyncio.wait_for(
                self._receive(prompt, request, on_progress),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            self._status = SolveStatus.FAILED
            logger.warning(
                "Stream timed out after %.0fs (%d chars received)",
                self._timeout,
                len(self._last_text),
            )
            raise ProviderTimeoutError(
                f"No complete answer within {self._timeout:g}s"
            ) from None
        except Exception as e:
            self._status = SolveStatus.FAILED
            logger.error(
                "Stream failed after %d chars: %s", len(self._last_text), e
            )
            raise _classify_provider_error(e) from e
        except BaseException:
            # Cancellation, KeyboardInterrupt: never leave the solver busy
            self._status = SolveStatus.FAILED
            logger.info("Stream aborted after %d chars", len(self._last_text))
            raise

        logger.info("Stream complete (%d chars)", len(text))
        try:
            solution = extract_solution(text)
        except ExtractionError:
            self._status = SolveStatus.FAILED
            raise
        self._status = SolveStatus.COMPLETE
        return solution

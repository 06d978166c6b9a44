"""Live progress view over a cumulative stream snapshot."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from .prompts import DATA_TAG, THINKING_TAG

_THINKING_RE = re.compile(
    rf"<{THINKING_TAG}>([\s\S]*?)(?:</{THINKING_TAG}>|\Z)", re.IGNORECASE
)
_THINKING_OPEN = f"<{THINKING_TAG}>"
_THINKING_CLOSE = f"</{THINKING_TAG}>"
_DATA_OPEN_RE = re.compile(rf"<{DATA_TAG}>", re.IGNORECASE)
_DATA_CLOSE_RE = re.compile(rf"</{DATA_TAG}>", re.IGNORECASE)


def _trim_partial_tag(text: str, tag: str) -> str:
    """Drop a trailing fragment of ``tag`` that is still being streamed."""
    for n in range(min(len(tag) - 1, len(text)), 0, -1):
        if text[-n:].lower() == tag[:n]:
            return text[:-n]
    return text


class StreamPhase(str, Enum):
    ANALYZING = "analyzing"  # Still reasoning
    COMPILING = "compiling"  # Data section opened
    DONE = "done"  # Data section closed


@dataclass(frozen=True)
class StreamProgress:
    thinking: str
    phase: StreamPhase
    size: int  # UTF-8 bytes received

    @classmethod
    def from_text(cls, text: str) -> StreamProgress:
        """Derive the display state from the text received so far.

        Until a <thinking> tag arrives the whole text is shown, since some
        models skip the tag entirely. A tag cut off at the end of the text
        is held back, so ``thinking`` only grows from one snapshot to the next.
        """
        match = _THINKING_RE.search(text)
        if match is None:
            thinking = _trim_partial_tag(text, _THINKING_OPEN)
        elif match.group(0).lower().endswith(_THINKING_CLOSE):
            thinking = match.group(1)
        else:
            # Keep the view growing while the closing tag is split across chunks
            thinking = _trim_partial_tag(match.group(1), _THINKING_CLOSE)

        if _DATA_CLOSE_RE.search(text):
            phase = StreamPhase.DONE
        elif _DATA_OPEN_RE.search(text):
            phase = StreamPhase.COMPILING
        else:
            phase = StreamPhase.ANALYZING

        return cls(thinking=thinking, phase=phase, size=len(text.encode("utf-8")))

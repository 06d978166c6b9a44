"""Recover the solution document from streamed model output.

The model's text interleaves a free-form <thinking> section with a JSON
data section, and may echo the prompt's schema (a decoy carrying the
same key names as type declarations). Candidates are located by an
ordered chain of strategies, most anchor-specific first:

  1. Field-anchored brace balancing around ``"problemSummary": "``
  2. Content of the <json>...</json> tag pair
  3. First fenced code block mentioning the anchor field
  4. First ``{`` to last ``}`` in the whole text

The first strategy that returns a candidate wins. The candidate is then
parsed; a parse failure is reported as a malformed candidate and does
not fall through to the weaker strategies.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass

from ..exceptions import (
    ExtractionError,
    ExtractionNotFoundError,
    MalformedCandidateError,
)
from ..models import MathSolution
from .prompts import DATA_TAG

logger = logging.getLogger("geo-tutor")

ANCHOR_FIELD = "problemSummary"
REQUIRED_FIELDS = ("problemSummary", "steps", "finalAnswer")

# Value-shaped only: a schema echo has `"problemSummary": {` instead.
_ANCHOR_RE = re.compile(r'"' + ANCHOR_FIELD + r'"\s*:\s*"')
_TAG_RE = re.compile(
    rf"<{DATA_TAG}>([\s\S]*?)</{DATA_TAG}>",
    re.IGNORECASE,
)
_FENCE_RE = re.compile(r"```[\w+-]*[ \t]*\n?([\s\S]*?)```")
_FENCE_OPEN_RE = re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")

Strategy = Callable[[str], str | None]


@dataclass(frozen=True)
class Candidate:
    """A span hypothesized to be the complete solution document."""

    strategy: str
    text: str


def _enclosing_open_brace(text: str, pos: int) -> int | None:
    """Index of the ``{`` that encloses ``pos``, scanning backward."""
    depth = 0
    for i in range(pos - 1, -1, -1):
        char = text[i]
        if char == "}":
            depth += 1
        elif char == "{":
            if depth == 0:
                return i
            depth -= 1
    return None


def _matching_close_brace(text: str, start: int) -> int | None:
    """Index of the ``}`` that balances the ``{`` at ``start``."""
    depth = 0
    for i in range(start, len(text)):
        char = text[i]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def anchored_object(text: str) -> str | None:
    """The object enclosing the first value-shaped ``problemSummary`` key."""
    match = _ANCHOR_RE.search(text)
    if not match:
        return None
    start = _enclosing_open_brace(text, match.start())
    if start is None:
        return None
    end = _matching_close_brace(text, start)
    if end is None:
        return None
    return text[start : end + 1]


def tagged_block(text: str) -> str | None:
    """Content of the first <json>...</json> pair, case-insensitive."""
    match = _TAG_RE.search(text)
    if not match or not match.group(1).strip():
        return None
    return match.group(1)


def fenced_block(text: str) -> str | None:
    """First fenced code block whose content mentions the anchor field."""
    for match in _FENCE_RE.finditer(text):
        block = match.group(1)
        if ANCHOR_FIELD in block:
            return block
    return None


def outer_braces(text: str) -> str | None:
    """First ``{`` to last ``}``. Least precise, last resort."""
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end <= start:
        return None
    return text[start : end + 1]


STRATEGIES: tuple[Strategy, ...] = (
    anchored_object,
    tagged_block,
    fenced_block,
    outer_braces,
)


def locate_candidate(
    text: str, strategies: tuple[Strategy, ...] = STRATEGIES
) -> Candidate | None:
    """Run the strategy chain, stopping at the first non-empty candidate."""
    for strategy in strategies:
        found = strategy(text)
        if found and found.strip():
            return Candidate(strategy=strategy.__name__, text=found)
    return None


def _strip_fences(candidate: str) -> str:
    text = candidate.strip()
    text = _FENCE_OPEN_RE.sub("", text)
    text = _FENCE_CLOSE_RE.sub("", text)
    return text.strip()


def parse_candidate(candidate: Candidate) -> MathSolution:
    """Parse a located candidate into a solution document.

    Raises MalformedCandidateError if the span is not valid JSON or is
    missing any of the required top-level fields.
    """
    cleaned = _strip_fences(candidate.text)
    try:
        doc = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise MalformedCandidateError(
            f"Candidate from {candidate.strategy} is not valid JSON: {e}",
            candidate=cleaned,
            strategy=candidate.strategy,
        ) from e

    if not isinstance(doc, dict):
        raise MalformedCandidateError(
            f"Candidate from {candidate.strategy} is a JSON "
            f"{type(doc).__name__}, not an object",
            candidate=cleaned,
            strategy=candidate.strategy,
        )
    missing = [f for f in REQUIRED_FIELDS if f not in doc]
    if missing:
        raise MalformedCandidateError(
            f"Candidate from {candidate.strategy} is missing required "
            f"fields: {', '.join(missing)}",
            candidate=cleaned,
            strategy=candidate.strategy,
        )
    return doc  # type: ignore[return-value]


def _extract(text: str) -> tuple[Candidate, MathSolution]:
    candidate = locate_candidate(text)
    if candidate is None:
        raise ExtractionNotFoundError(
            f"No JSON solution found in model output ({len(text)} chars)"
        )
    return candidate, parse_candidate(candidate)


def extract_solution(text: str) -> MathSolution:
    """Extract the solution document from the complete model output.

    Call once the stream has ended. Raises ExtractionNotFoundError when
    no candidate is located and MalformedCandidateError when the located
    candidate is unusable.
    """
    try:
        candidate, doc = _extract(text)
    except MalformedCandidateError as e:
        logger.warning("%s; candidate starts: %.200r", e, e.candidate)
        raise
    except ExtractionNotFoundError as e:
        logger.warning("%s", e)
        raise
    steps = doc["steps"]
    logger.debug(
        "Solution extracted via %s (%d chars, %d steps)",
        candidate.strategy,
        len(candidate.text),
        len(steps) if isinstance(steps, list) else 0,
    )
    return doc


def try_extract(text: str) -> MathSolution | None:
    """Best-effort extraction for progress displays. Never raises.

    Returns None while the text does not yet hold a usable document.
    Results from partial text are not final: only ``extract_solution``
    on the exhausted stream is.
    """
    try:
        return _extract(text)[1]
    except ExtractionError:
        return None

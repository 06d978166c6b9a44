"""Reasoning — prompt, stream, and extract step-by-step solutions."""

from .extractor import extract_solution, try_extract
from .progress import StreamPhase, StreamProgress
from .solver import GeometrySolver, SolveRequest, SolveStatus

__all__ = [
    "GeometrySolver",
    "SolveRequest",
    "SolveStatus",
    "StreamPhase",
    "StreamProgress",
    "extract_solution",
    "try_extract",
]

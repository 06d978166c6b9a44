"""Custom exception hierarchy for geo-tutor.

All geo-tutor exceptions inherit from GeoTutorError, allowing callers
to catch broad or specific errors:

    try:
        solution = await solver.solve(request)
    except ExtractionError as e:
        print(f"Model output unusable: {e}")
    except ProviderError as e:
        print(f"Stream failed: {e}")
    except GeoTutorError as e:
        print(f"geo-tutor error: {e}")
"""

from __future__ import annotations


class GeoTutorError(Exception):
    """Base exception for all geo-tutor errors."""


class ExtractionError(GeoTutorError):
    """Raised when no solution document can be recovered from model output."""


class ExtractionNotFoundError(ExtractionError):
    """Raised when no strategy located a candidate JSON span."""


class MalformedCandidateError(ExtractionError):
    """Raised when a located candidate is not a valid solution document."""

    def __init__(self, message: str, candidate: str = "", strategy: str = ""):
        super().__init__(message)
        self.candidate = candidate
        self.strategy = strategy


class ProviderError(GeoTutorError):
    """Raised when the model stream fails or is aborted."""


class ProviderAuthError(ProviderError):
    """Raised when provider authentication fails (invalid API key)."""


class ProviderRateLimitError(ProviderError):
    """Raised when a provider rate-limits the request."""


class ProviderTimeoutError(ProviderError):
    """Raised when the stream does not finish within the configured timeout."""


class SolverBusyError(GeoTutorError):
    """Raised when a request is started while another is still streaming."""


class ConfigError(GeoTutorError):
    """Raised when configuration is invalid or missing."""

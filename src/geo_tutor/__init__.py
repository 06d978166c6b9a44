"""geo-tutor — step-by-step 3D geometry solutions from a streaming LLM."""

__version__ = "0.3.0"

from .exceptions import (
    ConfigError,
    ExtractionError,
    ExtractionNotFoundError,
    GeoTutorError,
    MalformedCandidateError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderTimeoutError,
    SolverBusyError,
)

__all__ = [
    "__version__",
    "GeoTutorError",
    "ExtractionError",
    "ExtractionNotFoundError",
    "MalformedCandidateError",
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimitError",
    "ProviderTimeoutError",
    "SolverBusyError",
    "ConfigError",
]

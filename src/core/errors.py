"""
Engine Exception Taxonomy
=========================

Every failure the inference engine knows how to recover from derives from
``SEOEngineError``. The orchestrator catches these per attempt and moves on to
the next credential or provider; only ``AggregateError`` ever reaches the caller.
"""

from typing import List, Optional


class SEOEngineError(Exception):
    """Base exception for all engine errors."""
    pass


class MissingCredentialError(SEOEngineError):
    """Raised when a provider is invoked without a usable secret."""
    pass


class TransportError(SEOEngineError):
    """Raised when the request never produced a usable HTTP response (network, timeout, cancellation)."""
    pass


class ProviderRejectedError(SEOEngineError):
    """Raised when the provider answered with an error (invalid key, rate limit, non-2xx status)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(SEOEngineError):
    """Raised when the response text cannot be coerced into metadata."""
    pass


class AggregateError(SEOEngineError):
    """
    Terminal failure raised once every attempt in the plan has failed.

    Attributes:
        failures: The attempt log (``AttemptFailure`` values) in attempted order.
    """

    def __init__(self, message: str, failures: Optional[List] = None):
        super().__init__(message)
        self.failures = list(failures or [])

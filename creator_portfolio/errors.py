from __future__ import annotations

"""Exception types shared by the pipelines, the web API and the CLI.

Every error carries a machine-readable ``category`` so callers can present a
stable message without string-matching on the text."""

from typing import Optional


class PortfolioError(Exception):
    """Base class for all errors raised by this package."""

    category = "error"

    def __init__(self, message: str, category: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if category:
            self.category = category


class ConfigurationError(PortfolioError):
    """Required settings are missing. Raised before any network call."""

    category = "configuration"

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            "Missing required configuration: " + ", ".join(self.missing)
        )


class ValidationError(PortfolioError):
    """Bad request input. ``details`` lists per-field problems, if any."""

    category = "validation"

    def __init__(self, message: str, details: Optional[list[str]] = None):
        super().__init__(message)
        self.details = list(details or [])


class UpstreamError(PortfolioError):
    """A third-party API call failed (non-2xx, timeout, connection)."""

    category = "upstream"

    def __init__(
        self,
        message: str,
        category: Optional[str] = None,
        status_code: Optional[int] = None,
        payload: Optional[dict] = None,
    ):
        super().__init__(message, category)
        self.status_code = status_code
        self.payload = payload


class YouTubeAPIError(UpstreamError):
    pass


class GenerationError(UpstreamError):
    """The generative model call failed."""


class AnalysisError(UpstreamError):
    """Reel content analysis could not be produced."""


class IntegrityViolation(PortfolioError):
    category = "integrity"

    def __init__(self, message: str, debug: Optional[dict] = None):
        super().__init__(message)
        self.debug = debug or {}


class ChannelIntegrityError(IntegrityViolation):
    """Every fetched video failed the trusted-channel check."""

"""
standin Errors

Exception types raised by the mock server.

Match failures are not errors: an unmatched request is answered with a 404 and
a diagnostic report. Exceptions are reserved for misconfiguration, missing
content codecs and failed verification.
"""

from typing import Optional


class StandinError(Exception):
    """Base exception with an optional hint for fixing the problem."""

    def __init__(self, message: str, suggestion: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.suggestion = suggestion

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message} ({self.suggestion})"
        return self.message


class ConfigurationError(StandinError, ValueError):
    """Invalid server or expectation configuration, raised at registration time."""


class DecoderNotFoundError(StandinError, LookupError):
    """No request decoder is registered for a content type."""

    def __init__(self, content_type: str):
        super().__init__(
            f"No request decoder registered for content type '{content_type}'",
            suggestion="register one with server.decoder(content_type, fn) or expectation.decoder(...)"
        )
        self.content_type = content_type


class EncoderNotFoundError(StandinError, LookupError):
    """No response encoder is registered for a content type and object type."""

    def __init__(self, content_type: str, object_type: type):
        super().__init__(
            f"No response encoder registered for content type '{content_type}' "
            f"and object type {object_type.__name__}",
            suggestion="register one with server.encoder(content_type, type, fn) or response.encoder(...)"
        )
        self.content_type = content_type
        self.object_type = object_type


class VerificationError(StandinError, AssertionError):
    """An expectation's call-count condition was not met within the timeout."""

    def __init__(self, description: str, timeout: float):
        super().__init__(f"Expectation not satisfied within {timeout:g}s: {description}")
        self.description = description
        self.timeout = timeout

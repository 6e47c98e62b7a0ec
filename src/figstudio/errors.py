"""
Exception hierarchy for figstudio.

Configuration errors are raised at the step that detects them. Publishing
errors wrap failures at the hosting-service boundary and are never retried.
"""

from typing import Any


class FigstudioError(Exception):
    """Base exception for all figstudio errors."""

    def __init__(self, message: str, *, context: dict[str, Any] | None = None) -> None:
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, context={self.context!r})"


class ConfigurationError(FigstudioError, ValueError):
    """Raised for an unresolved channel, an unknown trace type, layout option or palette."""


class PublishError(FigstudioError):
    """Raised when the hosting service rejects or cannot process a figure."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message, context=ctx)
        self.status_code = status_code


class AuthenticationError(PublishError):
    """Raised when credentials are missing or refused by the hosting service."""


class NetworkError(PublishError):
    """Raised when the hosting service cannot be reached or does not answer in time."""

"""Exception types raised by the companion AI core."""

from typing import Optional


class CompanionError(Exception):
    """Base exception for the companion AI core."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.message = message
        self.original_error = original_error
        super().__init__(self.message)

    def __str__(self):
        if self.original_error:
            return f"{self.message} (Caused by: {self.original_error})"
        return self.message


class ConfigurationError(CompanionError):
    """Raised when the caller supplied an unusable configuration (missing API key)."""


class UnknownProviderError(CompanionError):
    """Raised when a provider tag has no registered adapter."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"Unknown provider: {provider}")


class ProviderError(CompanionError):
    """Raised when a provider answers with a non-success status."""

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class TransportError(CompanionError):
    """Raised when the response body is missing or cannot be read."""

    def __init__(
        self, provider: str, message: str, original_error: Optional[Exception] = None
    ):
        self.provider = provider
        super().__init__(message, original_error)

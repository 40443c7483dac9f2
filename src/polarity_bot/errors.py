"""Exception types raised by the Polarity bot."""

from typing import Any


class PolarityBotError(Exception):
    """Base class for all bot errors."""


class ApiError(PolarityBotError):
    """Raised when the Polarity API responds with a non-2xx status.

    Carries both the user-facing message and the raw error metadata returned
    by the server, so the metadata can be offered as a drill-down later.

    Args:
        message: Human readable error message.
        meta: Arbitrary structured metadata describing the failure.
    """

    def __init__(self, message: str, meta: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.meta: dict[str, Any] = meta or {}


class LookupTimeoutError(PolarityBotError):
    """Raised when a single integration lookup exceeds its deadline."""

    def __init__(self, integration_id: str, timeout: float) -> None:
        super().__init__(f"Lookup timed out after {timeout:g} seconds")
        self.integration_id = integration_id
        self.timeout = timeout


class ProgressBarDestroyedError(PolarityBotError):
    """Raised when a destroyed progress bar is used again."""

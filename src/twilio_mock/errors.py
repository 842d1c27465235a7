"""
Exception hierarchy for the API double.
"""

from typing import Any


class TwilioMockError(Exception):
    """Base exception for twilio-mock errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.details = details or {}


class UnmatchedRequestError(TwilioMockError, AssertionError):
    """An intercepted request matched no bound stub.

    Subclasses AssertionError so test runners report it as a failure of the
    test arrangement rather than an error in the code under test.
    """


class StubArrangementError(TwilioMockError, ValueError):
    """Stub arrangement cannot produce a valid response body."""


class InvalidAreaCodeError(StubArrangementError):
    """Area code is not exactly three digits."""


class NumberPoolExhaustedError(TwilioMockError):
    """Every test number for a prefix and area code was already issued."""

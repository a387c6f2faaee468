"""Exception hierarchy for the malware scan SDK."""

from __future__ import annotations

from collections.abc import Iterable


class MalScanError(Exception):
    """Base exception for all malware scan SDK errors."""


class ValidationError(MalScanError):
    """Raised when a candidate file is rejected before any network call.

    Every violated rule is reported, in order, on :attr:`errors`.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors = tuple(errors)
        super().__init__("; ".join(self.errors) or "Invalid file")


class NetworkError(MalScanError):
    """Raised when the scanning service cannot be reached (no response)."""


class ProtocolError(MalScanError):
    """Raised for a non-success response or an unparsable response body.

    Carries the server-provided text as the message when there is one.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MissingIdentifierError(MalScanError):
    """Raised when a successful response omits the expected identifier."""


class ScanTimeoutError(MalScanError):
    """Raised when polling hits its attempt ceiling without a terminal status."""

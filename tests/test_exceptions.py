"""Tests for malscan_sdk.exceptions."""

from malscan_sdk.exceptions import (
    MalScanError,
    MissingIdentifierError,
    NetworkError,
    ProtocolError,
    ScanTimeoutError,
    ValidationError,
)


def test_hierarchy():
    assert issubclass(ValidationError, MalScanError)
    assert issubclass(NetworkError, MalScanError)
    assert issubclass(ProtocolError, MalScanError)
    assert issubclass(MissingIdentifierError, MalScanError)
    assert issubclass(ScanTimeoutError, MalScanError)


def test_base_is_exception():
    assert issubclass(MalScanError, Exception)


def test_timeout_does_not_shadow_builtin():
    assert not issubclass(ScanTimeoutError, TimeoutError)


def test_validation_errors_aggregated():
    exc = ValidationError(["File size exceeds 10MB limit", "File type not allowed. Detected: "])
    assert exc.errors == ("File size exceeds 10MB limit", "File type not allowed. Detected: ")
    assert "10MB" in str(exc)


def test_protocol_error_carries_status():
    exc = ProtocolError("Unknown file id", 404)
    assert exc.status_code == 404
    assert str(exc) == "Unknown file id"
    assert ProtocolError("Invalid JSON response").status_code is None

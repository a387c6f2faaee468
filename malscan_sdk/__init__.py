"""Malware scan SDK: REST clients and a client-side scan orchestrator."""

import logging

from malscan_sdk.client import MalScanClient
from malscan_sdk.config import ScanSettings
from malscan_sdk.exceptions import (
    MalScanError,
    MissingIdentifierError,
    NetworkError,
    ProtocolError,
    ScanTimeoutError,
    ValidationError,
)
from malscan_sdk.models import (
    CandidateFile,
    HealthCheckResult,
    ScanPhase,
    ScanResult,
    ScanSession,
    ValidationResult,
)
from malscan_sdk.normalizer import extract_identifier, normalize_scan_result
from malscan_sdk.orchestrator import ScanOrchestrator, ScanService
from malscan_sdk.validation import is_allowed, validate_file

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "MalScanClient",
    "AsyncMalScanClient",
    "ScanOrchestrator",
    "ScanService",
    "ScanSettings",
    "CandidateFile",
    "ValidationResult",
    "ScanResult",
    "ScanPhase",
    "ScanSession",
    "HealthCheckResult",
    "validate_file",
    "is_allowed",
    "normalize_scan_result",
    "extract_identifier",
    "MalScanError",
    "ValidationError",
    "NetworkError",
    "ProtocolError",
    "MissingIdentifierError",
    "ScanTimeoutError",
]


def __getattr__(name: str) -> object:
    """Lazy-import the async client so ``httpx`` is optional at import time."""
    if name == "AsyncMalScanClient":
        from malscan_sdk.async_client import AsyncMalScanClient

        return AsyncMalScanClient
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

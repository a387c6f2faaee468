"""Data models for the malware scan SDK."""

from __future__ import annotations

import dataclasses
import mimetypes
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Union


@dataclass(frozen=True, slots=True)
class CandidateFile:
    """A file selected by the user, not yet validated or uploaded.

    Attributes:
        name: Declared file name (used for the extension check and upload).
        content_type: Declared MIME type, or ``""`` when unknown.
        size: Length of the content in bytes.
        data: Raw file content sent on upload.
    """

    name: str
    content_type: str
    size: int
    data: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes, name: str, content_type: str | None = None) -> CandidateFile:
        """Wrap in-memory bytes, guessing the content type from *name* if not given."""
        if content_type is None:
            content_type = mimetypes.guess_type(name)[0] or ""
        return cls(name=name, content_type=content_type, size=len(data), data=data)

    @classmethod
    def from_path(cls, file_path: Union[str, Path], content_type: str | None = None) -> CandidateFile:
        """Read a file from disk.

        Raises:
            FileNotFoundError: If *file_path* does not exist.
        """
        path = Path(file_path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        return cls.from_bytes(path.read_bytes(), path.name, content_type)


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """Outcome of client-side file validation.

    Attributes:
        is_valid: ``True`` when no rule was violated.
        errors: Human-readable violations, in rule order.
    """

    is_valid: bool
    errors: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ScanResult:
    """Canonical verdict of a finished scan.

    Attributes:
        status: ``"clean"``, ``"infected"`` or ``"error"``. This is the scan
            verdict, independent of the session's :class:`ScanPhase`.
        meta: Read-only file metadata (``originalName``, ``size``,
            ``mimetype`` when the service sends them).
        signature: Malware signature name, only set when infected.
        message: Human-readable detail, typically set on error.
        scanned_at: Timestamp string reported by the service.
    """

    status: str
    meta: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    signature: str | None = None
    message: str | None = None
    scanned_at: str | None = None

    @property
    def is_clean(self) -> bool:
        return self.status == "clean"

    @property
    def is_infected(self) -> bool:
        return self.status == "infected"

    @property
    def original_name(self) -> str | None:
        return self.meta.get("originalName")

    @property
    def size(self) -> int | None:
        return self.meta.get("size")

    @property
    def mimetype(self) -> str | None:
        return self.meta.get("mimetype")


@dataclass(frozen=True, slots=True)
class HealthCheckResult:
    """Health status of the scanning service.

    Attributes:
        healthy: ``True`` when the service reports itself operational.
        message: Status description sent by the service.
        details: The full response body.
    """

    healthy: bool
    message: str
    details: Mapping[str, Any] = field(default_factory=dict)


class ScanPhase(str, Enum):
    """Lifecycle phase of a scan session.

    ``COMPLETED`` means the lifecycle finished and a verdict exists (which may
    itself be ``"error"``); ``FAILED`` means the pipeline broke and there is
    no verdict.
    """

    IDLE = "idle"
    UPLOADING = "uploading"
    SCANNING = "scanning"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class ScanSession:
    """State of the single scan attempt driven by a ScanOrchestrator.

    Only the orchestrator mutates a session; observers get copies.
    """

    phase: ScanPhase = ScanPhase.IDLE
    upload_id: str | None = None
    scan_id: str | None = None
    progress_percent: int = 0
    poll_attempt: int = 0
    last_status: str | None = None
    result: ScanResult | None = None
    error: str | None = None
    status_text: str = "Waiting for file..."
    severity: str = "neutral"

    @property
    def is_active(self) -> bool:
        return self.phase in (ScanPhase.UPLOADING, ScanPhase.SCANNING)

    @property
    def is_terminal(self) -> bool:
        return self.phase in (ScanPhase.COMPLETED, ScanPhase.FAILED)

    def copy(self) -> ScanSession:
        return dataclasses.replace(self)

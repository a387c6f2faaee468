"""Client-side scan lifecycle: upload, start scan, poll status, fetch result.

A :class:`ScanOrchestrator` owns exactly one :class:`ScanSession` at a time
and drives it through the phases::

    idle -> uploading -> scanning -> completed
                 \\           \\
                  +-----------+--> failed

Polling runs as a single asyncio task per session. Every mutation after an
``await`` first checks that the session it started with is still the current
one, so a reset or a superseding submit makes in-flight work inert.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Optional, Protocol

from malscan_sdk._upload import ProgressCallback
from malscan_sdk.config import ScanSettings
from malscan_sdk.exceptions import (
    MissingIdentifierError,
    ScanTimeoutError,
    ValidationError,
)
from malscan_sdk.models import CandidateFile, ScanPhase, ScanResult, ScanSession, ValidationResult
from malscan_sdk.normalizer import extract_identifier, normalize_scan_result
from malscan_sdk.validation import validate_file

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 1.5
DEFAULT_MAX_POLL_ATTEMPTS = 120  # 3 minutes at 1.5s

TERMINAL_STATUSES = frozenset({"completed", "error"})

_STATUS_DISPLAY = {
    "pending": ("Queued...", "warn"),
    "scanning": ("Scanning...", "warn"),
    "completed": ("Completed", "success"),
    "error": ("Error", "danger"),
}

_VERDICT_DISPLAY = {
    "clean": ("File is clean", "success"),
    "infected": ("File is infected", "danger"),
    "error": ("Scan error", "danger"),
}

Listener = Callable[[ScanSession], None]


class ScanService(Protocol):
    """The remote operations the orchestrator depends on."""

    async def upload(self, file: CandidateFile, on_progress: Optional[ProgressCallback] = None) -> Any: ...

    async def start_scan(self, upload_id: str) -> Any: ...

    async def get_status(self, scan_id: str) -> str: ...

    async def get_result(self, scan_id: str) -> Any: ...


class ScanOrchestrator:
    """Drives a single scan attempt against a :class:`ScanService`.

    Args:
        service: The remote service, usually an
            :class:`~malscan_sdk.async_client.AsyncMalScanClient`.
        poll_interval: Seconds between status checks.
        max_poll_attempts: Status checks allowed before the scan times out.
        validator: Pre-upload check; defaults to
            :func:`~malscan_sdk.validation.validate_file`.

    Example::

        orchestrator = ScanOrchestrator(service)
        orchestrator.subscribe(lambda s: print(s.phase, s.status_text))
        await orchestrator.submit(CandidateFile.from_path("report.pdf"))
        session = await orchestrator.wait()
    """

    def __init__(
        self,
        service: ScanService,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_attempts: int = DEFAULT_MAX_POLL_ATTEMPTS,
        validator: Callable[[Optional[CandidateFile]], ValidationResult] = validate_file,
    ) -> None:
        if poll_interval < 0:
            raise ValueError("poll_interval must not be negative")
        if max_poll_attempts < 1:
            raise ValueError("max_poll_attempts must be at least 1")
        self._service = service
        self._poll_interval = poll_interval
        self._max_poll_attempts = max_poll_attempts
        self._validator = validator
        self._session = ScanSession()
        self._poll_task: asyncio.Task[None] | None = None
        self._listeners: list[Listener] = []

    @classmethod
    def from_settings(cls, service: ScanService, settings: ScanSettings) -> ScanOrchestrator:
        """Build an orchestrator from the polling part of *settings*."""
        return cls(
            service,
            poll_interval=settings.poll_interval,
            max_poll_attempts=settings.max_poll_attempts,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def session(self) -> ScanSession:
        """A copy of the current session."""
        return self._session.copy()

    @property
    def phase(self) -> ScanPhase:
        return self._session.phase

    @property
    def polling(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register *listener* for session changes.

        Returns:
            A callable that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def submit(self, file: Optional[CandidateFile]) -> ScanSession:
        """Validate, upload and start scanning *file*, then start polling.

        Returns as soon as polling has started (or the session failed); use
        :meth:`wait` for the verdict. Ignored while a scan is in flight.

        Raises:
            ValidationError: If *file* fails validation. The session is left
                untouched.
        """
        if self._session.is_active:
            logger.warning("Ignoring submit while a scan is %s", self._session.phase.value)
            return self.session

        validation = self._validator(file)
        if not validation.is_valid:
            raise ValidationError(validation.errors)
        if file is None:
            raise ValidationError(("No file provided",))

        self._stop_polling()
        session = ScanSession(
            phase=ScanPhase.UPLOADING,
            status_text="Uploading file...",
            severity="warn",
        )
        self._session = session
        logger.info("Uploading %s (%d bytes)", file.name, file.size)

        try:
            self._emit()
            upload = await self._service.upload(file, lambda percent: self._on_progress(session, percent))
            if not self._is_current(session):
                return self.session
            upload_id = extract_identifier(upload, "fileId", "uploadId", "id")
            if upload_id is None:
                raise MissingIdentifierError("No valid file id received")

            session.upload_id = upload_id
            session.phase = ScanPhase.SCANNING
            session.status_text = "Starting scan..."
            logger.info("Upload %s accepted, starting scan", upload_id)
            self._emit()

            scan = await self._service.start_scan(upload_id)
            if not self._is_current(session):
                return self.session
            scan_id = extract_identifier(scan, "scanId", "id")
            if scan_id is None:
                raise MissingIdentifierError("No valid scan id received")

            session.scan_id = scan_id
            session.poll_attempt = 0
            self._emit()
        except Exception as exc:
            self._fail(session, exc)
            return self.session

        self._start_polling(session)
        return self.session

    async def wait(self) -> ScanSession:
        """Wait until the current poll loop (if any) ends and return the session."""
        task = self._poll_task
        if task is not None:
            await asyncio.wait({task})
        return self.session

    async def scan(self, file: Optional[CandidateFile]) -> ScanSession:
        """Submit *file* and wait for the lifecycle to finish."""
        await self.submit(file)
        return await self.wait()

    def reset(self) -> None:
        """Stop polling and return to a fresh idle session."""
        self._stop_polling()
        self._session = ScanSession()
        logger.info("Scan session reset")
        self._emit()

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def _start_polling(self, session: ScanSession) -> None:
        if self.polling:
            return
        self._poll_task = asyncio.get_running_loop().create_task(self._poll(session))

    def _stop_polling(self) -> None:
        task, self._poll_task = self._poll_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _poll(self, session: ScanSession) -> None:
        try:
            await self._poll_until_done(session)
        except Exception as exc:
            # service errors and observer errors alike end the session
            try:
                self._fail(session, exc)
            except Exception:
                logger.exception("Observer raised while reporting a failed scan")
        finally:
            if self._poll_task is asyncio.current_task():
                self._poll_task = None

    async def _poll_until_done(self, session: ScanSession) -> None:
        while True:
            await asyncio.sleep(self._poll_interval)
            if not self._is_current(session):
                return
            session.poll_attempt += 1
            logger.debug("Polling scan %s (attempt %d)", session.scan_id, session.poll_attempt)
            status = await self._service.get_status(session.scan_id)
            if not self._is_current(session):
                return

            session.last_status = status
            session.status_text, session.severity = _STATUS_DISPLAY.get(status, (status, "neutral"))
            self._emit()

            if status in TERMINAL_STATUSES:
                await self._complete(session)
                return
            if session.poll_attempt >= self._max_poll_attempts:
                raise ScanTimeoutError("Scan timeout - operation took too long")

    async def _complete(self, session: ScanSession) -> None:
        raw = await self._service.get_result(session.scan_id)
        if not self._is_current(session):
            return

        result: ScanResult = normalize_scan_result(raw)
        session.result = result
        session.phase = ScanPhase.COMPLETED
        session.status_text, session.severity = _VERDICT_DISPLAY[result.status]
        logger.info("Scan %s completed: %s", session.scan_id, result.status)
        self._emit()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _is_current(self, session: ScanSession) -> bool:
        return session is self._session

    def _on_progress(self, session: ScanSession, percent: int) -> None:
        if not self._is_current(session) or session.phase is not ScanPhase.UPLOADING:
            return
        session.progress_percent = max(0, min(100, int(percent)))
        self._emit()

    def _fail(self, session: ScanSession, exc: BaseException) -> None:
        if not self._is_current(session):
            return
        message = str(exc) or type(exc).__name__
        logger.warning("Scan failed during %s: %s", session.phase.value, message)
        session.phase = ScanPhase.FAILED
        session.error = message
        session.status_text = "Scan failed"
        session.severity = "danger"
        self._emit()

    def _emit(self) -> None:
        snapshot = self._session.copy()
        for listener in list(self._listeners):
            listener(snapshot)

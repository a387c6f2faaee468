"""Synchronous REST client for the malware scanning service."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import requests

from malscan_sdk._upload import ProgressCallback, ProgressReader, encode_upload
from malscan_sdk.exceptions import NetworkError, ProtocolError
from malscan_sdk.models import CandidateFile, HealthCheckResult

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8080/api"


class MalScanClient:
    """Synchronous client for the scanning service REST API.

    The client is stateless: every method is a single request with no retry.
    Orchestration (polling, timeouts) lives in
    :class:`~malscan_sdk.orchestrator.ScanOrchestrator`.

    Args:
        base_url: Root URL of the scanning API.
        timeout: Request timeout in seconds.
        session: Optional pre-configured :class:`requests.Session` for
            connection pooling or custom headers.

    Example::

        client = MalScanClient("http://localhost:8080/api")
        upload = client.upload(CandidateFile.from_path("report.pdf"))
        scan = client.start_scan(upload["fileId"])
        print(client.get_status(scan["scanId"]))
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._session = session or requests.Session()

    def upload(self, file: CandidateFile, on_progress: Optional[ProgressCallback] = None) -> dict:
        """Upload *file* as multipart form data.

        Args:
            file: The file to upload.
            on_progress: Called with a non-decreasing integer percentage
                (0-100) as the body is sent, and with 100 once accepted.

        Returns:
            The raw response mapping, carrying ``fileId`` or ``id``.

        Raises:
            NetworkError: If the service is unreachable.
            ProtocolError: On a non-success status or an unparsable body.
        """
        body, content_type = encode_upload(file)
        reader = ProgressReader(body, on_progress)
        resp = self._send(
            "POST",
            "/upload",
            data=reader,
            headers={"Content-Type": content_type, "Content-Length": str(len(body))},
        )
        data = self._parse(resp, "Upload failed")
        reader.tracker.finish()
        return data

    def start_scan(self, upload_id: str) -> dict:
        """Ask the service to scan a previously uploaded file.

        Returns:
            The raw response mapping, carrying ``scanId`` or ``id``.

        Raises:
            ProtocolError: If the service rejects *upload_id*.
        """
        resp = self._send("POST", f"/scan/{quote(str(upload_id), safe='')}")
        return self._parse(resp, "Scan failed to start")

    def get_status(self, scan_id: str) -> str:
        """Return the lower-cased status of a scan.

        One of ``pending``, ``scanning``, ``completed`` or ``error``.
        """
        resp = self._send("GET", f"/status/{quote(str(scan_id), safe='')}")
        return _status_from(self._parse(resp, "Failed to get scan status"))

    def get_result(self, scan_id: str) -> Any:
        """Return the raw, un-normalized result payload of a finished scan."""
        resp = self._send("GET", f"/result/{quote(str(scan_id), safe='')}")
        return self._parse(resp, "Failed to get scan result")

    def health_check(self) -> HealthCheckResult:
        """Check whether the scanning service is healthy."""
        resp = self._send("GET", "/health")
        return _health_from(resp.status_code, self._parse_lenient(resp))

    def stats(self) -> Any:
        """Return the service statistics payload as sent by the server."""
        resp = self._send("GET", "/health/stats")
        return self._parse(resp, "Failed to get service stats")

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            return self._session.request(method, url, timeout=self._timeout, **kwargs)
        except (requests.ConnectionError, requests.Timeout) as exc:
            raise NetworkError(str(exc) or "Network error") from exc

    @staticmethod
    def _parse(resp: requests.Response, default_message: str) -> Any:
        if not 200 <= resp.status_code < 300:
            raise ProtocolError(_error_text(resp.text, default_message), resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProtocolError("Invalid JSON response", resp.status_code) from exc

    @staticmethod
    def _parse_lenient(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except ValueError:
            return {"message": resp.text}


def _error_text(text: str, default_message: str) -> str:
    """Prefer a JSON ``message``/``error`` field, then the raw body."""
    try:
        body = json.loads(text)
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("message", "error"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return text.strip() or default_message


def _status_from(data: Any) -> str:
    status = data.get("status") if isinstance(data, dict) else None
    if not isinstance(status, str) or not status:
        raise ProtocolError("Missing status in response")
    return status.strip().lower()


def _health_from(status_code: int, data: Any) -> HealthCheckResult:
    details = data if isinstance(data, dict) else {}
    message = str(details.get("message") or details.get("status") or "")
    healthy = 200 <= status_code < 300 and message.lower() in ("ok", "healthy", "up", "")
    return HealthCheckResult(healthy=healthy, message=message, details=details)

"""Asynchronous REST client for the malware scanning service (requires ``httpx``)."""

from __future__ import annotations

import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from malscan_sdk._upload import ProgressCallback, ProgressStream, encode_upload
from malscan_sdk.client import DEFAULT_BASE_URL, _error_text, _health_from, _status_from
from malscan_sdk.exceptions import NetworkError, ProtocolError
from malscan_sdk.models import CandidateFile, HealthCheckResult

logger = logging.getLogger(__name__)


class AsyncMalScanClient:
    """Asynchronous client for the scanning service REST API.

    Requires the ``httpx`` package (install with ``pip install malscan-sdk[async]``).
    This is the service a :class:`~malscan_sdk.orchestrator.ScanOrchestrator`
    is normally built on.

    Args:
        base_url: Root URL of the scanning API.
        timeout: Request timeout in seconds.
        client: Optional pre-configured :class:`httpx.AsyncClient`.

    Example::

        async with AsyncMalScanClient("http://localhost:8080/api") as service:
            orchestrator = ScanOrchestrator(service)
            session = await orchestrator.scan(CandidateFile.from_path("report.pdf"))
            print(session.phase, session.result)
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def upload(self, file: CandidateFile, on_progress: Optional[ProgressCallback] = None) -> dict:
        """Upload *file* as multipart form data, streaming it in chunks.

        Args:
            file: The file to upload.
            on_progress: Called with a non-decreasing integer percentage
                (0-100) per chunk sent, and with 100 once accepted.

        Returns:
            The raw response mapping, carrying ``fileId`` or ``id``.
        """
        body, content_type = encode_upload(file)
        stream = ProgressStream(body, on_progress)
        resp = await self._send(
            "POST",
            "/upload",
            content=stream,
            headers={"Content-Type": content_type, "Content-Length": str(len(body))},
        )
        data = self._parse(resp, "Upload failed")
        stream.tracker.finish()
        return data

    async def start_scan(self, upload_id: str) -> dict:
        """Ask the service to scan a previously uploaded file.

        Returns:
            The raw response mapping, carrying ``scanId`` or ``id``.
        """
        resp = await self._send("POST", f"/scan/{quote(str(upload_id), safe='')}")
        return self._parse(resp, "Scan failed to start")

    async def get_status(self, scan_id: str) -> str:
        """Return the lower-cased status of a scan."""
        resp = await self._send("GET", f"/status/{quote(str(scan_id), safe='')}")
        return _status_from(self._parse(resp, "Failed to get scan status"))

    async def get_result(self, scan_id: str) -> Any:
        """Return the raw, un-normalized result payload of a finished scan."""
        resp = await self._send("GET", f"/result/{quote(str(scan_id), safe='')}")
        return self._parse(resp, "Failed to get scan result")

    async def health_check(self) -> HealthCheckResult:
        resp = await self._send("GET", "/health")
        try:
            data = resp.json()
        except ValueError:
            data = {"message": resp.text}
        return _health_from(resp.status_code, data)

    async def stats(self) -> Any:
        resp = await self._send("GET", "/health/stats")
        return self._parse(resp, "Failed to get service stats")

    async def close(self) -> None:
        """Close the underlying HTTP client if owned by this instance."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> AsyncMalScanClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s", method, url)
        try:
            return await self._client.request(method, url, timeout=self._timeout, **kwargs)
        except httpx.TransportError as exc:
            raise NetworkError(str(exc) or "Network error") from exc

    @staticmethod
    def _parse(resp: httpx.Response, default_message: str) -> Any:
        if not resp.is_success:
            raise ProtocolError(_error_text(resp.text, default_message), resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ProtocolError("Invalid JSON response", resp.status_code) from exc

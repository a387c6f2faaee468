"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any, Optional

import pytest

from malscan_sdk.models import CandidateFile


@pytest.fixture()
def sample_bytes() -> bytes:
    return b"Quarterly report, nothing to see here."


@pytest.fixture()
def eicar_bytes() -> bytes:
    """EICAR anti-malware test string (safe; every AV recognises it)."""
    return b"X5O!P%@AP[4\\PZX54(P^)7CC)7}$EICAR-STANDARD-ANTIVIRUS-TEST-FILE!$H+H*"


@pytest.fixture()
def pdf_file(sample_bytes: bytes) -> CandidateFile:
    return CandidateFile.from_bytes(sample_bytes, "report.pdf", "application/pdf")


class FakeScanService:
    """Scripted stand-in for the remote scanning service."""

    def __init__(
        self,
        statuses: Iterable[Any] = ("completed",),
        result: Any = None,
        upload_response: Any = None,
        scan_response: Any = None,
        progress: Iterable[int] = (25, 50, 100),
    ) -> None:
        self.statuses = list(statuses)
        self.result = result if result is not None else {"status": "clean", "meta": {"originalName": "report.pdf"}}
        self.upload_response = upload_response if upload_response is not None else {"fileId": "f-1"}
        self.scan_response = scan_response if scan_response is not None else {"scanId": "s-1"}
        self.progress = list(progress)
        self.upload_calls: list[CandidateFile] = []
        self.start_scan_calls: list[str] = []
        self.status_calls: list[str] = []
        self.result_calls: list[str] = []
        self.upload_gate: Optional[asyncio.Event] = None
        self.status_gate: Optional[asyncio.Event] = None
        self.status_entered = asyncio.Event()

    async def upload(self, file, on_progress=None):
        self.upload_calls.append(file)
        if self.upload_gate is not None:
            await self.upload_gate.wait()
        if on_progress is not None:
            for percent in self.progress:
                on_progress(percent)
        if isinstance(self.upload_response, Exception):
            raise self.upload_response
        return self.upload_response

    async def start_scan(self, upload_id):
        self.start_scan_calls.append(upload_id)
        if isinstance(self.scan_response, Exception):
            raise self.scan_response
        return self.scan_response

    async def get_status(self, scan_id):
        self.status_calls.append(scan_id)
        self.status_entered.set()
        if self.status_gate is not None:
            await self.status_gate.wait()
        index = min(len(self.status_calls), len(self.statuses)) - 1
        status = self.statuses[index]
        if isinstance(status, Exception):
            raise status
        return status

    async def get_result(self, scan_id):
        self.result_calls.append(scan_id)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.fixture()
def fake_service() -> FakeScanService:
    return FakeScanService()


@pytest.fixture()
def make_service() -> type[FakeScanService]:
    return FakeScanService

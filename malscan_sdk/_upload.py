"""Multipart encoding and byte-progress reporting shared by both clients."""

from __future__ import annotations

import io
from collections.abc import AsyncIterator, Callable
from typing import Optional

from urllib3.filepost import encode_multipart_formdata

from malscan_sdk.models import CandidateFile

ProgressCallback = Callable[[int], None]

CHUNK_SIZE = 64 * 1024


def encode_upload(file: CandidateFile) -> tuple[bytes, str]:
    """Encode *file* as a ``multipart/form-data`` body with a single ``file`` field.

    Returns:
        The body bytes and the matching ``Content-Type`` header value.
    """
    content_type = file.content_type or "application/octet-stream"
    return encode_multipart_formdata({"file": (file.name, file.data, content_type)})


class _ProgressTracker:
    """Turns byte counts into non-decreasing integer percentages."""

    def __init__(self, total: int, callback: Optional[ProgressCallback]) -> None:
        self._total = total
        self._sent = 0
        self._last = -1
        self._callback = callback

    def advance(self, nbytes: int) -> None:
        self._sent = min(self._sent + nbytes, self._total)
        self._report(round(self._sent * 100 / self._total) if self._total else 100)

    def finish(self) -> None:
        self._report(100)

    def _report(self, percent: int) -> None:
        if self._callback is None or percent <= self._last:
            return
        self._last = percent
        self._callback(percent)


class ProgressReader(io.BytesIO):
    """In-memory body that reports progress as the transport reads it."""

    def __init__(self, body: bytes, callback: Optional[ProgressCallback]) -> None:
        super().__init__(body)
        self.tracker = _ProgressTracker(len(body), callback)

    def read(self, size: int | None = -1) -> bytes:
        chunk = super().read(size)
        if chunk:
            self.tracker.advance(len(chunk))
        return chunk


class ProgressStream:
    """Async chunk iterator over a body that reports progress per chunk."""

    def __init__(self, body: bytes, callback: Optional[ProgressCallback]) -> None:
        self._body = body
        self.tracker = _ProgressTracker(len(body), callback)

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for start in range(0, len(self._body), CHUNK_SIZE):
            chunk = self._body[start : start + CHUNK_SIZE]
            self.tracker.advance(len(chunk))
            yield chunk

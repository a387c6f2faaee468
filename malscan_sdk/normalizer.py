"""Mapping of heterogeneous service payloads onto canonical models.

The scanning service returns results either flat (``status``, ``meta``,
``signature`` at the top level) or nested under ``details``. Everything here
is total: missing or malformed fields fall back to defaults, never raise.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from malscan_sdk.models import ScanResult

_STATUS_ALIASES = {
    "clean": "clean",
    "ok": "clean",
    "infected": "infected",
    "found": "infected",
    "error": "error",
}


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _pick(nested: Mapping[str, Any], flat: Mapping[str, Any], key: str, kind: type = object) -> Any:
    """Return ``details[key]`` if present, else the top-level value, else None.

    Values that are not instances of *kind* count as absent.
    """
    for source in (nested, flat):
        value = source.get(key)
        if _present(value) and isinstance(value, kind):
            return value
    return None


def _as_text(value: Any) -> str | None:
    return str(value) if _present(value) else None


def _canonical_status(value: Any) -> str:
    if not isinstance(value, str):
        return "error"
    return _STATUS_ALIASES.get(value.strip().lower(), "error")


def normalize_scan_result(raw: Any) -> ScanResult:
    """Build a :class:`ScanResult` from any result payload.

    Args:
        raw: Decoded JSON of ``GET /result/{scanId}``. Non-mapping input is
            treated as an empty payload.

    Returns:
        The canonical result. ``signature`` is dropped unless the status is
        ``"infected"``; ``scanned_at`` falls back to ``meta.scannedAt``.
    """
    flat: Mapping[str, Any] = raw if isinstance(raw, Mapping) else {}
    nested = flat.get("details")
    if not isinstance(nested, Mapping):
        nested = {}

    status = _canonical_status(_pick(nested, flat, "status"))

    meta = _pick(nested, flat, "meta", Mapping) or {}

    signature = _as_text(_pick(nested, flat, "signature")) if status == "infected" else None

    scanned_at = _pick(nested, flat, "scannedAt")
    if not _present(scanned_at):
        scanned_at = meta.get("scannedAt")

    return ScanResult(
        status=status,
        meta=MappingProxyType(dict(meta)),
        signature=signature,
        message=_as_text(_pick(nested, flat, "message")),
        scanned_at=_as_text(scanned_at),
    )


def extract_identifier(payload: Any, *keys: str) -> str | None:
    """Return the first non-empty identifier found under *keys*.

    Used for the service's dual naming (``fileId``/``uploadId``/``id`` after
    upload, ``scanId``/``id`` after scan start).
    """
    if not isinstance(payload, Mapping):
        return None
    for key in keys:
        value = payload.get(key)
        if _present(value):
            return str(value)
    return None

"""Settings shared by the clients and the orchestrator."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

_T = TypeVar("_T")

ENV_PREFIX = "MALSCAN_"


@dataclass(frozen=True, slots=True)
class ScanSettings:
    """Connection and polling settings.

    Attributes:
        base_url: Root URL of the scanning API.
        request_timeout: Per-request timeout in seconds.
        poll_interval: Seconds between status checks.
        max_poll_attempts: Status checks allowed before a scan times out.
    """

    base_url: str = "http://localhost:8080/api"
    request_timeout: float = 30
    poll_interval: float = 1.5
    max_poll_attempts: int = 120

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> ScanSettings:
        """Read overrides from ``MALSCAN_API_URL``, ``MALSCAN_REQUEST_TIMEOUT``,
        ``MALSCAN_POLL_INTERVAL`` and ``MALSCAN_MAX_POLL_ATTEMPTS``.

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            base_url=env.get(f"{ENV_PREFIX}API_URL", defaults.base_url),
            request_timeout=_read(env, "REQUEST_TIMEOUT", float, defaults.request_timeout),
            poll_interval=_read(env, "POLL_INTERVAL", float, defaults.poll_interval),
            max_poll_attempts=_read(env, "MAX_POLL_ATTEMPTS", int, defaults.max_poll_attempts),
        )


def _read(env: Mapping[str, str], name: str, convert: Callable[[str], _T], default: _T) -> _T:
    raw = env.get(f"{ENV_PREFIX}{name}")
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid value for {ENV_PREFIX}{name}: {raw!r}") from exc

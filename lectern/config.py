"""Runtime settings read from ``LECTERN_*`` environment variables."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

DEFAULT_PAGE_ORIGIN = "http://localhost"


def _flag(env: Mapping[str, str], name: str) -> bool:
    value = env.get(name, "")
    return value.strip().lower() not in ("", "0", "false", "no", "off")


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class LecternConfig:
    debug: bool = False
    locale: Optional[str] = None
    page_origin: str = DEFAULT_PAGE_ORIGIN
    load_timeout_ms: int = 8000
    poll_interval_ms: int = 1000
    progress_interval_ms: int = 5000
    preflight: bool = False

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "LecternConfig":
        env = os.environ if env is None else env
        origin = (env.get("LECTERN_PAGE_ORIGIN") or DEFAULT_PAGE_ORIGIN).strip().rstrip("/")
        return cls(
            debug=_flag(env, "LECTERN_DEBUG"),
            locale=env.get("LECTERN_LOCALE") or None,
            page_origin=origin,
            load_timeout_ms=_int(env, "LECTERN_LOAD_TIMEOUT_MS", cls.load_timeout_ms),
            poll_interval_ms=_int(env, "LECTERN_POLL_INTERVAL_MS", cls.poll_interval_ms),
            progress_interval_ms=_int(env, "LECTERN_PROGRESS_INTERVAL_MS", cls.progress_interval_ms),
            preflight=_flag(env, "LECTERN_PREFLIGHT"),
        )

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO

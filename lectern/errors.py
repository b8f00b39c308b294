"""Exception types raised by Lectern."""

from __future__ import annotations


class LecternError(Exception):
    """Base class for Lectern errors."""


class UnsupportedPlatformError(LecternError, ValueError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Unsupported video platform: {value!r}")
        self.value = value


class InvalidTransition(LecternError):
    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot move embed from {current} to {requested}")
        self.current = current
        self.requested = requested

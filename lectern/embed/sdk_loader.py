"""Reference-counted access to the runtime shared by every embed.

Embeds mount and unmount independently, so nobody owns the shared
runtime outright. Each embed ``acquire``s it with a callback, receives the
resource once it is ready, and ``release``s it on teardown. The runtime is
built on the first acquire and torn down when the last holder leaves.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Subscriber = Callable[[Any], None]


class LoaderState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"


class SharedRuntimeLoader(Generic[T]):
    """``factory`` returns the resource, or ``None`` if it will arrive
    later through :meth:`mark_ready`."""

    def __init__(
        self,
        factory: Callable[["SharedRuntimeLoader[T]"], Optional[T]],
        teardown: Optional[Callable[[T], None]] = None,
        *,
        name: str = "runtime",
    ) -> None:
        self._factory = factory
        self._teardown = teardown
        self.name = name
        self.state = LoaderState.IDLE
        self.resource: Optional[T] = None
        self.refcount = 0
        self._waiting: list[Subscriber] = []

    def acquire(self, subscriber: Subscriber) -> None:
        self.refcount += 1
        if self.state is LoaderState.READY:
            subscriber(self.resource)
            return

        self._waiting.append(subscriber)
        if self.state is LoaderState.IDLE:
            self.state = LoaderState.LOADING
            logger.debug("Initialising shared %s", self.name)
            resource = self._factory(self)
            if resource is not None and self.state is LoaderState.LOADING:
                self.mark_ready(resource)

    def mark_ready(self, resource: T) -> None:
        if self.state is not LoaderState.LOADING:
            logger.debug("Ignoring late ready for %s in state %s", self.name, self.state.value)
            return
        self.resource = resource
        self.state = LoaderState.READY
        waiting, self._waiting = self._waiting, []
        for subscriber in waiting:
            subscriber(resource)

    def release(self, subscriber: Optional[Subscriber] = None) -> None:
        if self.refcount <= 0:
            raise RuntimeError(f"Unbalanced release of shared {self.name}")
        self.refcount -= 1
        if subscriber is not None and subscriber in self._waiting:
            self._waiting.remove(subscriber)
        if self.refcount == 0:
            self._shutdown()

    def _shutdown(self) -> None:
        resource, self.resource = self.resource, None
        self._waiting.clear()
        previous, self.state = self.state, LoaderState.IDLE
        if previous is LoaderState.READY and resource is not None and self._teardown:
            logger.debug("Tearing down shared %s", self.name)
            self._teardown(resource)

    @property
    def subscriber_count(self) -> int:
        return len(self._waiting)


# === Web engine profile ===

EMBED_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_5) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/124.0.0.0 Safari/537.36"  # trimmed UA avoids YouTube embed error 15
)

_profile_loader: Optional[SharedRuntimeLoader] = None


def _create_profile(_loader):
    from PyQt6.QtWebEngineCore import QWebEngineProfile

    # Off-the-record: no cookies or cache survive the session.
    profile = QWebEngineProfile()
    profile.setHttpUserAgent(EMBED_USER_AGENT)
    return profile


def _destroy_profile(profile) -> None:
    profile.deleteLater()


def engine_profile_loader() -> SharedRuntimeLoader:
    global _profile_loader
    if _profile_loader is None:
        _profile_loader = SharedRuntimeLoader(
            _create_profile, _destroy_profile, name="web engine profile"
        )
    return _profile_loader

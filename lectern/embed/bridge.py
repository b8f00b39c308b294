"""Remote control of an embedded player over postMessage.

The web view's shell page relays every ``message`` event it sees to
:class:`EmbedChannel` through QWebChannel. :class:`RemoteControlBridge`
listens on that channel while attached, filters by origin, and turns the
provider's events into Qt signals. Commands travel the other way through
the ``post`` callable, which ends up as ``contentWindow.postMessage``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from PyQt6.QtCore import QObject, QTimer, pyqtSignal, pyqtSlot

from lectern.embed.messages import (
    STATE_PLAYING,
    YOUTUBE_ORIGINS,
    Ignored,
    InfoDelivery,
    PlayerError,
    Progress,
    Ready,
    StateChange,
    decode_message,
    encode_command,
    encode_listening,
)

logger = logging.getLogger(__name__)


class EmbedChannel(QObject):
    """Object exposed to the shell page as ``embedChannel``."""

    messageReceived = pyqtSignal(str, str)
    frameLoaded = pyqtSignal()
    frameFailed = pyqtSignal()
    shellReady = pyqtSignal()

    @pyqtSlot(str, str)
    def receiveMessage(self, origin: str, data: str) -> None:
        self.messageReceived.emit(origin, data)

    @pyqtSlot()
    def reportFrameLoaded(self) -> None:
        self.frameLoaded.emit()

    @pyqtSlot()
    def reportFrameError(self) -> None:
        self.frameFailed.emit()

    @pyqtSlot()
    def signalShellReady(self) -> None:
        self.shellReady.emit()


class RemoteControlBridge(QObject):
    ready = pyqtSignal()
    stateChanged = pyqtSignal(int)
    durationChanged = pyqtSignal(float)
    timeChanged = pyqtSignal(float)
    progressReported = pyqtSignal(float)
    playerError = pyqtSignal(int)

    def __init__(
        self,
        channel: EmbedChannel,
        post: Callable[[str], None],
        *,
        allowed_origins: Iterable[str] = YOUTUBE_ORIGINS,
        poll_interval_ms: int = 1000,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._channel = channel
        self._post = post
        self._allowed_origins = frozenset(allowed_origins)
        self._attached = False
        self._ready = False

        self._poll_timer = QTimer(self)
        self._poll_timer.setInterval(poll_interval_ms)
        self._poll_timer.timeout.connect(self._poll_current_time)

        self._scheduled: dict[str, QTimer] = {}

    # ------------------------------------------------------------------
    @property
    def is_attached(self) -> bool:
        return self._attached

    @property
    def is_ready(self) -> bool:
        return self._ready

    def attach(self) -> None:
        if self._attached:
            return
        self._channel.messageReceived.connect(self._on_message)
        self._attached = True
        self._ready = False

    def detach(self) -> None:
        if not self._attached:
            return
        try:
            self._channel.messageReceived.disconnect(self._on_message)
        except TypeError:
            # already disconnected, e.g. channel torn down first
            pass
        self._attached = False
        self._ready = False
        self._poll_timer.stop()
        for timer in self._scheduled.values():
            timer.stop()
            timer.deleteLater()
        self._scheduled.clear()

    def pending_timer_count(self) -> int:
        active = sum(1 for timer in self._scheduled.values() if timer.isActive())
        return active + (1 if self._poll_timer.isActive() else 0)

    # ------------------------------------------------------------------
    def send_command(self, func: str, args: Optional[Sequence[Any]] = None) -> None:
        if not self._attached:
            logger.debug("Dropping %s: bridge detached", func)
            return
        self._post(encode_command(func, args))

    def handshake(self, video_id: Optional[str] = None) -> None:
        """Ask the player to start pushing events to this window."""

        if not self._attached:
            return
        self._post(encode_listening(video_id))
        for name in ("onReady", "onStateChange", "onError"):
            self.send_command("addEventListener", [name])

    def schedule_command(
        self, func: str, delay_ms: int, args: Optional[Sequence[Any]] = None
    ) -> None:
        """Send ``func`` after ``delay_ms``; a newer request for the same
        command replaces the pending one."""

        if not self._attached:
            return
        timer = self._scheduled.get(func)
        if timer is None:
            timer = QTimer(self)
            timer.setSingleShot(True)
            self._scheduled[func] = timer
        else:
            timer.stop()
            timer.timeout.disconnect()
        payload = list(args or [])
        timer.timeout.connect(lambda: self.send_command(func, payload))
        timer.start(delay_ms)

    def set_polling(self, active: bool) -> None:
        if active and self._attached:
            if not self._poll_timer.isActive():
                self._poll_timer.start()
        else:
            self._poll_timer.stop()

    # ------------------------------------------------------------------
    def _poll_current_time(self) -> None:
        self.send_command("getCurrentTime")

    def _on_message(self, origin: str, data: Any) -> None:
        if not self._attached:
            return
        event = decode_message(origin, data, self._allowed_origins)

        if isinstance(event, Ignored):
            if event.reason != "origin":
                logger.debug("Ignoring player message (%s) from %s", event.reason, origin)
            return

        if isinstance(event, Ready):
            self._ready = True
            self.send_command("getDuration")
            self.send_command("getCurrentTime")
            self.ready.emit()
        elif isinstance(event, StateChange):
            self._apply_state(event.code)
        elif isinstance(event, InfoDelivery):
            if event.duration is not None:
                self.durationChanged.emit(event.duration)
            if event.current_time is not None:
                self.timeChanged.emit(event.current_time)
            if event.player_state is not None:
                self._apply_state(event.player_state)
        elif isinstance(event, Progress):
            self.progressReported.emit(event.time)
            self.timeChanged.emit(event.time)
        elif isinstance(event, PlayerError):
            logger.info("Embedded player reported error %s", event.code)
            self.playerError.emit(event.code)

    def _apply_state(self, code: int) -> None:
        self.set_polling(code == STATE_PLAYING)
        self.stateChanged.emit(code)

"""The embed as a whole: frame, overlay, controls and failure handling.

Load problems never leave this widget. A failed URL silently moves to the
next candidate; when none are left the user gets either an error card
(Retry / Open in <Platform>) or, for platforms whose embeds are known to
be flaky, a plain "watch it there" card.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import markdown
from PyQt6.QtCore import QTimer, QUrl, Qt, pyqtSignal
from PyQt6.QtGui import QDesktopServices
from PyQt6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QStackedLayout,
    QVBoxLayout,
    QWidget,
)

from lectern.config import LecternConfig
from lectern.embed.bridge import RemoteControlBridge
from lectern.embed.controls import SeekControls
from lectern.embed.lifecycle import EmbedLifecycle, EmbedPhase
from lectern.embed.overlay import ProtectionOverlay, ShortcutGuard
from lectern.embed.platforms import (
    EmbedKind,
    EmbedSpec,
    EmbedTarget,
    FallbackLadder,
    Platform,
    build_embed,
    ladder_for,
    platform_label,
)
from lectern.embed.playback import PlaybackStore
from lectern.embed.spinner import SpinnerWidget

logger = logging.getLogger(__name__)

ProgressCallback = Callable[..., None]

# Platforms whose iframe speaks the postMessage control protocol.
CONTROLLABLE = {Platform.YOUTUBE}

GUIDANCE_MD = """Make sure the video is:

- Public or Unlisted (not Private)
- Embeddable (not restricted)
- A valid {platform} video
"""

# onError codes that mean "this will never play here"
FATAL_PLAYER_ERRORS = {
    2: "The video identifier was rejected by the player.",
    5: "The video cannot be played in an embedded player.",
    100: "The video was removed or made private.",
    101: "The owner does not allow this video to be embedded.",
    150: "The owner does not allow this video to be embedded.",
}


def format_markdown(text: str) -> str:
    """Convert Markdown into HTML so Qt labels render bullets/lists."""
    return markdown.markdown(text)


def _default_view_factory(page_origin: str, parent: QWidget):
    from lectern.embed.embed_view import ProtectedEmbedView

    return ProtectedEmbedView(page_origin, parent)


class _FrameHost(QWidget):
    """Holds the web view; overlay patches and the spinner float above it."""

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setStyleSheet("background-color: #000;")
        self.spinner = SpinnerWidget(self)


class EmbedPlayerWidget(QWidget):
    phaseChanged = pyqtSignal(str)
    externalRequested = pyqtSignal(str)

    def __init__(
        self,
        config: Optional[LecternConfig] = None,
        *,
        view_factory=None,
        on_progress: Optional[ProgressCallback] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.config = config or LecternConfig.from_env()
        self.on_progress = on_progress
        self.lifecycle = EmbedLifecycle()
        self.target: Optional[EmbedTarget] = None
        self.spec: Optional[EmbedSpec] = None
        self._ladder: Optional[FallbackLadder] = None
        self._overlay: Optional[ProtectionOverlay] = None
        self.error_message = ""

        self._build_ui(view_factory or _default_view_factory)

        self.bridge = RemoteControlBridge(
            self.view.channel,
            self.view.post_message,
            poll_interval_ms=self.config.poll_interval_ms,
            parent=self,
        )
        self.store = PlaybackStore(self.bridge, self)
        self.controls = SeekControls(self.store, self.player_page)
        self.controls.setVisible(False)
        self.player_page.layout().addWidget(self.controls)

        self.guard = ShortcutGuard(self)

        # Timers
        self._load_timer = QTimer(self)
        self._load_timer.setSingleShot(True)
        self._load_timer.setInterval(self.config.load_timeout_ms)
        self._load_timer.timeout.connect(lambda: self._on_load_failed("timeout"))

        self._progress_timer = QTimer(self)
        self._progress_timer.setInterval(self.config.progress_interval_ms)
        self._progress_timer.timeout.connect(self._report_progress)

        self.view.channel.frameLoaded.connect(self._on_frame_loaded)
        self.view.channel.frameFailed.connect(lambda: self._on_load_failed("frame error"))
        self.bridge.ready.connect(self._on_player_ready)
        self.bridge.playerError.connect(self._on_player_error)
        self.store.changed.connect(self._on_store_changed)
        self.store.ended.connect(self._on_ended)

    def _build_ui(self, view_factory) -> None:
        self.stack = QStackedLayout(self)

        # Player page
        self.player_page = QWidget()
        player_layout = QVBoxLayout(self.player_page)
        player_layout.setContentsMargins(0, 0, 0, 0)
        player_layout.setSpacing(0)
        self.frame_host = _FrameHost()
        host_layout = QVBoxLayout(self.frame_host)
        host_layout.setContentsMargins(0, 0, 0, 0)
        self.view = view_factory(self.config.page_origin, self.frame_host)
        host_layout.addWidget(self.view)
        player_layout.addWidget(self.frame_host, stretch=1)
        self.spinner = self.frame_host.spinner
        self.stack.addWidget(self.player_page)

        # Error card
        self.error_page = QWidget()
        self.error_page.setStyleSheet("background-color: #111827; color: #f3f4f6;")
        err_layout = QVBoxLayout(self.error_page)
        err_layout.addStretch(1)
        self.error_title = QLabel(self.tr("Video Loading Issue"))
        self.error_title.setStyleSheet("font-size: 16px; font-weight: bold;")
        self.error_label = QLabel()
        self.error_label.setWordWrap(True)
        self.error_detail = QLabel()
        self.error_detail.setTextFormat(Qt.TextFormat.RichText)
        self.error_detail.setWordWrap(True)
        self.error_detail.setStyleSheet("color: #9ca3af; font-size: 11px;")
        for label in (self.error_title, self.error_label, self.error_detail):
            label.setAlignment(Qt.AlignmentFlag.AlignCenter)
            err_layout.addWidget(label)
        err_buttons = QHBoxLayout()
        err_buttons.addStretch(1)
        self.retry_btn = QPushButton(self.tr("Retry"))
        self.retry_btn.clicked.connect(self.retry)
        self.error_open_btn = QPushButton()
        self.error_open_btn.clicked.connect(self.open_external)
        err_buttons.addWidget(self.retry_btn)
        err_buttons.addWidget(self.error_open_btn)
        err_buttons.addStretch(1)
        err_layout.addLayout(err_buttons)
        err_layout.addStretch(1)
        self.stack.addWidget(self.error_page)

        # External-link card
        self.external_page = QWidget()
        self.external_page.setStyleSheet("background-color: #f3f4f6;")
        ext_layout = QVBoxLayout(self.external_page)
        ext_layout.addStretch(1)
        self.external_label = QLabel()
        self.external_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.external_label.setWordWrap(True)
        ext_layout.addWidget(self.external_label)
        self.external_btn = QPushButton()
        self.external_btn.clicked.connect(self.open_external)
        ext_row = QHBoxLayout()
        ext_row.addStretch(1)
        ext_row.addWidget(self.external_btn)
        ext_row.addStretch(1)
        ext_layout.addLayout(ext_row)
        ext_layout.addStretch(1)
        self.stack.addWidget(self.external_page)

    # ------------------------------------------------------------------
    @property
    def phase(self) -> EmbedPhase:
        return self.lifecycle.phase

    @property
    def controllable(self) -> bool:
        return self.target is not None and self.target.platform in CONTROLLABLE

    @property
    def ladder(self) -> Optional[FallbackLadder]:
        return self._ladder

    def load(self, target: EmbedTarget) -> None:
        if self.phase is EmbedPhase.UNMOUNTED:
            logger.warning("Ignoring load after shutdown")
            return
        self._teardown_attempt()
        self.guard.uninstall()
        self._remove_overlay()
        self.lifecycle = EmbedLifecycle()
        self.store.reset()
        self.target = target
        self.spec = build_embed(target.platform, target, page_origin=self.config.page_origin)
        self._ladder = None
        logger.info("Loading %s video %s", target.platform.value, target.canonical_id or target.raw_reference)

        if target.platform is Platform.YOUTUBE and not target.canonical_id:
            self._show_error(self.tr("Could not parse video identifier."), retry=False)
            return

        if self.spec.kind is not EmbedKind.IFRAME:
            self._show_external()
            return

        self._ladder = ladder_for(self.spec)
        self._start_attempt()

    def retry(self) -> None:
        if self.phase is not EmbedPhase.ERROR or self._ladder is None or not len(self._ladder):
            return
        logger.info("Retrying embed for %s", self.target.raw_reference)
        self._ladder.reset()
        self._start_attempt()

    def open_external(self) -> None:
        url = self.spec.external_url if self.spec else None
        if not url:
            return
        self.externalRequested.emit(url)
        QDesktopServices.openUrl(QUrl(url))

    def shutdown(self) -> None:
        if self.phase is EmbedPhase.UNMOUNTED:
            return
        self._teardown_attempt()
        self.guard.uninstall()
        self._remove_overlay()
        self.view.shutdown()
        self._enter(EmbedPhase.UNMOUNTED)

    def closeEvent(self, event):  # type: ignore[override]
        self.shutdown()
        super().closeEvent(event)

    # ------------------------------------------------------------------
    def _start_attempt(self) -> None:
        src = self._ladder.current
        self._teardown_attempt()
        self._enter(EmbedPhase.LOADING)
        self.stack.setCurrentWidget(self.player_page)
        self.spinner.start()
        self.controls.setVisible(self.controllable)

        if self._overlay is None:
            self._overlay = ProtectionOverlay(self.target.platform, self.frame_host)
        if self.controllable:
            self.guard.install()
            self.bridge.attach()

        logger.debug("Embed attempt %d/%d", self._ladder.attempts, len(self._ladder))
        self.view.load_frame(src, self.spec.allowed_permissions)
        self._load_timer.start()

    def _teardown_attempt(self) -> None:
        self._load_timer.stop()
        self._progress_timer.stop()
        self.bridge.detach()
        self.spinner.stop()

    def _remove_overlay(self) -> None:
        if self._overlay is not None:
            self._overlay.remove()
            self._overlay.deleteLater()
            self._overlay = None

    def _enter(self, phase: EmbedPhase) -> None:
        if self.lifecycle.advance(phase):
            self.phaseChanged.emit(phase.value)

    def _mark_ready(self) -> None:
        self._load_timer.stop()
        self.spinner.stop()
        self._enter(EmbedPhase.READY)

    def _on_frame_loaded(self) -> None:
        if self.phase is not EmbedPhase.LOADING:
            return
        if self.controllable:
            # the player only starts talking after the handshake
            self.bridge.handshake(self.target.canonical_id)
        else:
            self._mark_ready()

    def _on_player_ready(self) -> None:
        if self.phase is EmbedPhase.LOADING:
            self._mark_ready()

    def _on_load_failed(self, reason: str) -> None:
        if self.phase is not EmbedPhase.LOADING or self._ladder is None:
            return
        failed = self._ladder.current
        next_src = self._ladder.advance()
        if next_src:
            logger.info("Embed failed (%s) for %s; trying fallback %s", reason, failed, next_src)
            self._start_attempt()
            return

        logger.warning(
            "All %d embed strategies failed for %s (%s)",
            len(self._ladder),
            self.target.raw_reference,
            reason,
        )
        if self.spec.exhausted_kind is EmbedKind.EXTERNAL_LINK:
            self._show_external()
        else:
            self._show_error(
                self.tr(
                    "Video could not be loaded. Please check that the video ID is "
                    "correct and the video is accessible."
                ),
                retry=True,
            )

    def _on_player_error(self, code: int) -> None:
        if self.phase is EmbedPhase.LOADING:
            self._on_load_failed(f"player error {code}")
        elif self.lifecycle.is_active and code in FATAL_PLAYER_ERRORS:
            self._show_error(self.tr(FATAL_PLAYER_ERRORS[code]), retry=True)

    def _on_store_changed(self) -> None:
        if not self.lifecycle.is_active:
            return
        state = self.store.state
        if state.is_playing:
            self._enter(EmbedPhase.PLAYING)
            if not self._progress_timer.isActive():
                self._progress_timer.start()
        else:
            self._progress_timer.stop()
            if self.phase is EmbedPhase.PLAYING:
                self._enter(EmbedPhase.PAUSED)

    def _on_ended(self) -> None:
        state = self.store.state
        self._emit_progress(state.duration or state.current_time, True)

    def _report_progress(self) -> None:
        if self.store.state.is_playing:
            self._emit_progress(self.store.state.current_time)

    def _emit_progress(self, watch_time: float, completed: Optional[bool] = None) -> None:
        if self.on_progress is None:
            return
        try:
            if completed is None:
                self.on_progress(watch_time)
            else:
                self.on_progress(watch_time, completed)
        except Exception:
            logger.exception("Progress callback failed")

    # ------------------------------------------------------------------
    def _show_error(self, message: str, *, retry: bool) -> None:
        self._teardown_attempt()
        self.guard.uninstall()
        self.view.clear_frame()
        self.error_message = message
        label = platform_label(self.target.platform)
        self.error_label.setText(message)
        ident = self.target.canonical_id or self.target.raw_reference or "-"
        self.error_detail.setText(
            self.tr("Video ID: <code>{ident}</code>").format(ident=ident)
            + format_markdown(GUIDANCE_MD.format(platform=label))
        )
        self.retry_btn.setVisible(retry)
        self.error_open_btn.setText(self.tr("Open in {platform}").format(platform=label))
        self.error_open_btn.setVisible(bool(self.spec and self.spec.external_url))
        self.stack.setCurrentWidget(self.error_page)
        self._enter(EmbedPhase.ERROR)

    def _show_external(self) -> None:
        self._teardown_attempt()
        self.guard.uninstall()
        self.view.clear_frame()
        label = platform_label(self.target.platform)
        self.external_label.setText(
            self.tr("Watch this video on {platform}").format(platform=label)
        )
        self.external_btn.setText(self.tr("Open in {platform}").format(platform=label))
        self.external_btn.setEnabled(bool(self.spec and self.spec.external_url))
        self.stack.setCurrentWidget(self.external_page)
        self._enter(EmbedPhase.EXTERNAL)

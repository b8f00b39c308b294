from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PyQt6.QtCore import QSettings, Qt
from PyQt6.QtGui import QAction, QIcon, QKeySequence
from PyQt6.QtWidgets import QLabel, QVBoxLayout, QWidget

from lectern.config import LecternConfig
from lectern.embed.controls import format_time
from lectern.embed.platforms import EmbedTarget, platform_label
from lectern.embed.player_widget import EmbedPlayerWidget

logger = logging.getLogger(__name__)


class PlayerWindow(QWidget):
    """Top-level window around a single embed."""

    def __init__(
        self,
        target: EmbedTarget,
        config: Optional[LecternConfig] = None,
        *,
        view_factory=None,
    ):
        super().__init__()
        self.config = config or LecternConfig.from_env()
        self.target = target
        self.setWindowTitle(
            self.tr("Lectern – {platform}").format(platform=platform_label(target.platform))
        )
        self.setMinimumSize(800, 520)
        self.setFocusPolicy(Qt.FocusPolicy.StrongFocus)

        try:
            icon_path = Path(__file__).resolve().parent.parent / "images" / "app_icon.png"
            if icon_path.exists():
                self.setWindowIcon(QIcon(str(icon_path)))
        except OSError as exc:
            logger.debug("Window icon unavailable: %s", exc)

        self.settings = QSettings("Lectern", "PlayerWindow")
        self.watched_seconds = 0.0
        self.completed = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.embed = EmbedPlayerWidget(
            self.config,
            view_factory=view_factory,
            on_progress=self.record_progress,
            parent=self,
        )
        self.status_label = QLabel()
        self.status_label.setContentsMargins(8, 4, 8, 4)
        self.status_label.setStyleSheet("color: #6b7280; font-size: 11px;")
        layout.addWidget(self.embed, stretch=1)
        layout.addWidget(self.status_label)

        self.embed.phaseChanged.connect(self._on_phase_changed)

        # Keyboard shortcuts only make sense when the player takes commands
        self.play_action = QAction(self.tr("Play/Pause"), self)
        self.play_action.setShortcut(QKeySequence("Space"))
        self.play_action.setShortcutContext(Qt.ShortcutContext.WindowShortcut)
        self.play_action.triggered.connect(self.toggle_play)
        self.addAction(self.play_action)

        self.back_action = QAction(self.tr("Skip back"), self)
        self.back_action.setShortcut(QKeySequence(Qt.Key.Key_Left))
        self.back_action.triggered.connect(self._skip_backward)
        self.addAction(self.back_action)

        self.forward_action = QAction(self.tr("Skip forward"), self)
        self.forward_action.setShortcut(QKeySequence(Qt.Key.Key_Right))
        self.forward_action.triggered.connect(self._skip_forward)
        self.addAction(self.forward_action)

        self.embed.load(target)

    def _commands_enabled(self) -> bool:
        return self.embed.controllable and self.embed.lifecycle.is_active

    def toggle_play(self):
        if self._commands_enabled():
            self.embed.store.handle_play_pause()

    def _skip_backward(self):
        if self._commands_enabled():
            self.embed.store.handle_skip_backward()

    def _skip_forward(self):
        if self._commands_enabled():
            self.embed.store.handle_skip_forward()

    def record_progress(self, watch_time: float, completed: bool = False) -> None:
        self.watched_seconds = max(self.watched_seconds, watch_time)
        self.completed = self.completed or completed
        logger.info(
            "Progress for %s: %s%s",
            self.target.canonical_id or self.target.raw_reference,
            format_time(watch_time),
            " (completed)" if completed else "",
        )
        self.settings.setValue("last_position", watch_time)

    def _on_phase_changed(self, phase: str):
        self.status_label.setText(
            self.tr("{platform} · {phase}").format(
                platform=platform_label(self.target.platform), phase=phase
            )
        )

    def closeEvent(self, event):  # type: ignore[override]
        self.embed.shutdown()
        super().closeEvent(event)

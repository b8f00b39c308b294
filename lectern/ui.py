from __future__ import annotations

import logging
from typing import Optional

from PyQt6.QtCore import QSettings, pyqtSignal
from PyQt6.QtWidgets import (
    QComboBox,
    QLabel,
    QLineEdit,
    QMessageBox,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from lectern.config import LecternConfig
from lectern.embed.oembed import with_preflight
from lectern.embed.platforms import (
    EmbedTarget,
    detect_platform,
    known_platforms,
    make_target,
    platform_label,
)
from lectern.errors import UnsupportedPlatformError
from lectern.player import PlayerWindow

logger = logging.getLogger(__name__)

AUTO = "auto"


class VideoSelectorUI(QWidget):
    # Emitted when a new Player window is launched
    playerLaunched = pyqtSignal()

    def __init__(self, config: Optional[LecternConfig] = None, *, view_factory=None):
        super().__init__()
        self.config = config or LecternConfig.from_env()
        self._view_factory = view_factory
        self.setWindowTitle(self.tr("Lectern – Select Video"))
        self.setMinimumSize(420, 180)

        self.settings = QSettings("Lectern", "VideoSelectorUI")

        layout = QVBoxLayout(self)

        self.platform_combo = QComboBox()
        self.platform_combo.addItem(self.tr("Detect from link"), AUTO)
        for platform in known_platforms():
            self.platform_combo.addItem(platform_label(platform), platform.value)

        self.reference_input = QLineEdit()
        self.reference_input.setPlaceholderText(self.tr("Video link or ID"))
        self.start_btn = QPushButton(self.tr("Start"))

        layout.addWidget(QLabel(self.tr("Platform")))
        layout.addWidget(self.platform_combo)
        layout.addWidget(QLabel(self.tr("Video")))
        layout.addWidget(self.reference_input)
        layout.addStretch(1)
        layout.addWidget(self.start_btn)

        self.start_btn.clicked.connect(self.start_player)
        self.reference_input.returnPressed.connect(self.start_player)

        self.player: Optional[PlayerWindow] = None
        self._restore_last()

    def _restore_last(self):
        last_platform = self.settings.value("last_platform", AUTO) or AUTO
        index = self.platform_combo.findData(last_platform)
        if index >= 0:
            self.platform_combo.setCurrentIndex(index)
        self.reference_input.setText(self.settings.value("last_reference", "") or "")

    def build_target(self) -> EmbedTarget:
        """Turn the form into a target; raises UnsupportedPlatformError."""

        reference = self.reference_input.text().strip()
        choice = self.platform_combo.currentData()
        if choice == AUTO:
            detected = detect_platform(reference)
            if detected is None:
                raise UnsupportedPlatformError(reference)
            choice = detected
        target = make_target(choice, reference)
        if self.config.preflight:
            target = with_preflight(target)
        return target

    def _warn(self, title: str, text: str):
        box = QMessageBox(self)
        box.setIcon(QMessageBox.Icon.Warning)
        box.setWindowTitle(title)
        box.setText(text)
        box.exec()

    def start_player(self):
        reference = self.reference_input.text().strip()
        if not reference:
            self._warn(self.tr("Missing Video"), self.tr("Please enter a video link or ID."))
            return

        try:
            target = self.build_target()
        except UnsupportedPlatformError as e:
            logger.info("Unsupported platform for %r", e.value)
            self._warn(
                self.tr("Unsupported Platform"),
                self.tr("Could not tell which platform this link belongs to:\n{value}").format(
                    value=e.value
                ),
            )
            return

        self.settings.setValue("last_platform", self.platform_combo.currentData())
        self.settings.setValue("last_reference", reference)

        self.player = PlayerWindow(target, self.config, view_factory=self._view_factory)
        self.player.show()
        self.playerLaunched.emit()
        self.close()

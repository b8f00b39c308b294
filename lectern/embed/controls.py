"""Scrub bar and transport buttons driven by a :class:`PlaybackStore`."""

from __future__ import annotations

import math
from typing import Optional

import qtawesome as qta
from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSlider,
    QVBoxLayout,
    QWidget,
)

from lectern.embed.playback import QUALITY_LEVELS, PlaybackStore

QUALITY_LABELS = {
    "auto": "Auto",
    "2160p": "2160p (4K)",
    "1440p": "1440p (2K)",
    "1080p": "1080p (HD)",
    "720p": "720p",
    "480p": "480p",
    "360p": "360p",
    "240p": "240p",
}

ICON_COLOR = "#ffffff"


def format_time(seconds: float) -> str:
    if not math.isfinite(seconds) or seconds < 0:
        seconds = 0
    total = int(seconds)
    m, s = divmod(total, 60)
    return f"{m}:{s:02}"


def progress_percent(local_time: float, duration: float) -> Optional[int]:
    if duration <= 0:
        return None
    return round(local_time / duration * 100)


class ScrubState:
    """Keeps the scrub handle under the user's thumb while dragging.

    Outside a drag, ``local_time`` follows the player on every sync; during
    one it only moves with the gesture until ``commit``.
    """

    def __init__(self, local_time: float = 0.0) -> None:
        self.is_dragging = False
        self.local_time = local_time

    def sync(self, current_time: float) -> None:
        if not self.is_dragging:
            self.local_time = current_time

    def drag_to(self, seconds: float) -> None:
        self.is_dragging = True
        self.local_time = seconds

    def commit(self) -> float:
        self.is_dragging = False
        return self.local_time


class SeekControls(QWidget):
    def __init__(self, store: PlaybackStore, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.store = store
        self.scrub = ScrubState(store.state.current_time)
        self.setObjectName("seekControls")
        self.setStyleSheet(
            "#seekControls { background-color: rgba(0, 0, 0, 230); }"
            "QLabel { color: #ffffff; font-size: 10px; }"
            "QPushButton { border: none; background: transparent; padding: 2px; }"
            "QPushButton:hover { background: rgba(255, 255, 255, 50); }"
        )
        self._build()

        store.changed.connect(self.refresh)
        self.refresh()

    def _build(self) -> None:
        layout = QVBoxLayout(self)
        layout.setContentsMargins(8, 2, 8, 2)
        layout.setSpacing(2)

        # Seek row
        seek_row = QHBoxLayout()
        self.time_label = QLabel(format_time(0))
        self.duration_label = QLabel(format_time(0))
        self.pos_slider = QSlider(Qt.Orientation.Horizontal)
        self.pos_slider.setRange(0, 0)
        self.pos_slider.setSingleStep(1000)
        self.pos_slider.sliderPressed.connect(self.on_slider_pressed)
        self.pos_slider.sliderMoved.connect(self.on_slider_moved)
        self.pos_slider.sliderReleased.connect(self.on_slider_released)
        seek_row.addWidget(self.time_label)
        seek_row.addWidget(self.pos_slider, stretch=1)
        seek_row.addWidget(self.duration_label)
        layout.addLayout(seek_row)

        # Button row
        buttons = QHBoxLayout()
        self.back_btn = QPushButton()
        self.back_btn.setIcon(qta.icon("fa5s.undo", color=ICON_COLOR))
        self.back_btn.setToolTip(self.tr("Skip backward 10 seconds"))
        self.back_btn.clicked.connect(self.store.handle_skip_backward)

        self.play_btn = QPushButton()
        self.play_btn.clicked.connect(self.store.handle_play_pause)

        self.forward_btn = QPushButton()
        self.forward_btn.setIcon(qta.icon("fa5s.redo", color=ICON_COLOR))
        self.forward_btn.setToolTip(self.tr("Skip forward 10 seconds"))
        self.forward_btn.clicked.connect(self.store.handle_skip_forward)

        buttons.addWidget(self.back_btn)
        buttons.addWidget(self.play_btn)
        buttons.addWidget(self.forward_btn)
        buttons.addStretch(1)

        self.mute_btn = QPushButton()
        self.mute_btn.clicked.connect(self.store.toggle_mute)
        self.volume_slider = QSlider(Qt.Orientation.Horizontal)
        self.volume_slider.setRange(0, 100)
        self.volume_slider.setFixedWidth(64)
        self.volume_slider.valueChanged.connect(self.on_volume_changed)

        self.quality_combo = QComboBox()
        self.quality_combo.setToolTip(self.tr("Quality"))
        for key in QUALITY_LEVELS:
            self.quality_combo.addItem(QUALITY_LABELS.get(key, key), key)
        self.quality_combo.currentIndexChanged.connect(self.on_quality_selected)

        self.percent_label = QLabel("")
        self.percent_label.setMinimumWidth(30)
        self.percent_label.setAlignment(Qt.AlignmentFlag.AlignRight | Qt.AlignmentFlag.AlignVCenter)

        buttons.addWidget(self.mute_btn)
        buttons.addWidget(self.volume_slider)
        buttons.addWidget(self.quality_combo)
        buttons.addWidget(self.percent_label)
        layout.addLayout(buttons)

    # === Slider ===
    def on_slider_pressed(self) -> None:
        self.scrub.drag_to(self.pos_slider.value() / 1000.0)
        self._update_time_labels()

    def on_slider_moved(self, value: int) -> None:
        self.scrub.drag_to(value / 1000.0)
        self._update_time_labels()

    def on_slider_released(self) -> None:
        self.scrub.drag_to(self.pos_slider.value() / 1000.0)
        target = self.scrub.commit()
        self.store.handle_seek(target)

    def on_volume_changed(self, value: int) -> None:
        if value != self.store.state.volume:
            self.store.handle_volume_change(value)

    def on_quality_selected(self, index: int) -> None:
        key = self.quality_combo.itemData(index)
        if key and key != self.store.state.quality:
            self.store.handle_quality_change(key)

    # === Store -> UI ===
    def refresh(self) -> None:
        state = self.store.state
        self.scrub.sync(state.current_time)

        if not self.scrub.is_dragging:
            duration_ms = int(state.duration * 1000)
            upper = max(duration_ms, int(self.scrub.local_time * 1000))
            self.pos_slider.blockSignals(True)
            self.pos_slider.setRange(0, upper)
            self.pos_slider.setValue(int(self.scrub.local_time * 1000))
            self.pos_slider.blockSignals(False)

        self.duration_label.setText(format_time(state.duration))
        self._update_time_labels()

        if state.is_playing:
            self.play_btn.setIcon(qta.icon("fa5s.pause", color=ICON_COLOR))
            self.play_btn.setToolTip(self.tr("Pause"))
        else:
            self.play_btn.setIcon(qta.icon("fa5s.play", color=ICON_COLOR))
            self.play_btn.setToolTip(self.tr("Play"))

        if state.is_muted:
            self.mute_btn.setIcon(qta.icon("fa5s.volume-mute", color=ICON_COLOR))
            self.mute_btn.setToolTip(self.tr("Unmute"))
        else:
            self.mute_btn.setIcon(qta.icon("fa5s.volume-up", color=ICON_COLOR))
            self.mute_btn.setToolTip(self.tr("Mute"))

        self.volume_slider.blockSignals(True)
        self.volume_slider.setValue(0 if state.is_muted else state.volume)
        self.volume_slider.blockSignals(False)

        index = self.quality_combo.findData(state.quality)
        if index >= 0 and index != self.quality_combo.currentIndex():
            self.quality_combo.blockSignals(True)
            self.quality_combo.setCurrentIndex(index)
            self.quality_combo.blockSignals(False)

    def _update_time_labels(self) -> None:
        self.time_label.setText(format_time(self.scrub.local_time))
        percent = progress_percent(self.scrub.local_time, self.store.state.duration)
        self.percent_label.setText("" if percent is None else f"{percent}%")

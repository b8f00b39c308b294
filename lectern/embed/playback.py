"""Local mirror of the remote player's state.

The store is optimistic: commands update the local fields immediately and
the provider's next event (or the poll backstop) overwrites them. Fields
change independently, so consumers must tolerate ``is_playing`` being
true while ``duration`` is still 0 right after load.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from PyQt6.QtCore import QObject, pyqtSignal

from lectern.embed.bridge import RemoteControlBridge
from lectern.embed.messages import STATE_ENDED, STATE_PLAYING

logger = logging.getLogger(__name__)

DEFAULT_VOLUME = 75
SKIP_SECONDS = 10.0
RECONCILE_DELAY_MS = 500

QUALITY_LEVELS = {
    "auto": "default",
    "2160p": "hd2160",
    "1440p": "hd1440",
    "1080p": "hd1080",
    "720p": "hd720",
    "480p": "large",
    "360p": "medium",
    "240p": "small",
}


@dataclass
class PlaybackState:
    is_playing: bool = False
    current_time: float = 0.0
    duration: float = 0.0
    volume: int = DEFAULT_VOLUME
    is_muted: bool = False
    quality: str = "auto"


def clamp_time(seconds: float, duration: float) -> float:
    """Clamp to ``[0, duration]``; an unknown (0) duration is unbounded."""

    upper = duration if duration > 0 else math.inf
    return max(0.0, min(float(seconds), upper))


class PlaybackStore(QObject):
    changed = pyqtSignal()
    ended = pyqtSignal()

    def __init__(self, bridge: RemoteControlBridge, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.bridge = bridge
        self.state = PlaybackState()
        self.player_state: Optional[int] = None

        bridge.stateChanged.connect(self._on_state)
        bridge.durationChanged.connect(self._on_duration)
        bridge.timeChanged.connect(self._on_time)

    def reset(self) -> None:
        self.state = PlaybackState()
        self.player_state = None
        self.changed.emit()

    # === Commands ===
    def handle_seek(self, seconds: float) -> None:
        target = clamp_time(seconds, self.state.duration)
        self.bridge.send_command("seekTo", [target, True])
        self.state.current_time = target
        self.changed.emit()
        # Seeks land on the nearest keyframe, so ask where we really are.
        self.bridge.schedule_command("getCurrentTime", RECONCILE_DELAY_MS)

    def handle_skip_backward(self) -> None:
        self.handle_seek(self.state.current_time - SKIP_SECONDS)

    def handle_skip_forward(self) -> None:
        self.handle_seek(self.state.current_time + SKIP_SECONDS)

    def handle_play_pause(self) -> None:
        if self.state.is_playing:
            self.bridge.send_command("pauseVideo")
        else:
            self.bridge.send_command("playVideo")
        self.state.is_playing = not self.state.is_playing
        self.changed.emit()

    def handle_quality_change(self, label: str) -> None:
        level = QUALITY_LEVELS.get(label, "default")
        self.state.quality = label if label in QUALITY_LEVELS else "auto"
        self.bridge.send_command("setPlaybackQuality", [level])
        self.changed.emit()

    def handle_volume_change(self, volume: int) -> None:
        volume = max(0, min(100, int(volume)))
        self.state.volume = volume
        self.state.is_muted = volume == 0
        self.bridge.send_command("setVolume", [volume])
        self.changed.emit()

    def handle_mute(self) -> None:
        self.bridge.send_command("mute")
        self.state.volume = 0
        self.state.is_muted = True
        self.changed.emit()

    def handle_unmute(self) -> None:
        # Restores the fixed default rather than the pre-mute level.
        self.bridge.send_command("unMute")
        self.bridge.send_command("setVolume", [DEFAULT_VOLUME])
        self.state.volume = DEFAULT_VOLUME
        self.state.is_muted = False
        self.changed.emit()

    def toggle_mute(self) -> None:
        if self.state.is_muted:
            self.handle_unmute()
        else:
            self.handle_mute()

    # === Provider events ===
    def _on_state(self, code: int) -> None:
        # The player repeats each state in infoDelivery; only a change counts.
        previous, self.player_state = self.player_state, code
        self.state.is_playing = code == STATE_PLAYING
        self.changed.emit()
        if code == STATE_ENDED and previous != STATE_ENDED:
            self.ended.emit()

    def _on_duration(self, seconds: float) -> None:
        self.state.duration = max(0.0, seconds)
        self.changed.emit()

    def _on_time(self, seconds: float) -> None:
        self.state.current_time = max(0.0, seconds)
        self.changed.emit()

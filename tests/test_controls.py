import json

import pytest

from lectern.embed.bridge import EmbedChannel, RemoteControlBridge
from lectern.embed.controls import ScrubState, SeekControls, format_time, progress_percent
from lectern.embed.playback import PlaybackStore

YT = "https://www.youtube.com"


@pytest.mark.parametrize(
    "seconds, text",
    [(0, "0:00"), (5.9, "0:05"), (65, "1:05"), (3600, "60:00"), (-3, "0:00"), (float("nan"), "0:00")],
)
def test_format_time(seconds, text):
    assert format_time(seconds) == text


def test_progress_percent():
    assert progress_percent(30, 120) == 25
    assert progress_percent(10, 0) is None


def test_scrub_ignores_player_while_dragging():
    scrub = ScrubState()
    scrub.sync(10)
    assert scrub.local_time == 10
    scrub.drag_to(42)
    scrub.sync(11)
    scrub.sync(12)
    assert scrub.local_time == 42
    assert scrub.commit() == 42
    assert not scrub.is_dragging
    scrub.sync(43)
    assert scrub.local_time == 43


@pytest.fixture
def rig(qtbot):
    channel = EmbedChannel()
    sent = []
    bridge = RemoteControlBridge(channel, sent.append)
    bridge.attach()
    store = PlaybackStore(bridge)
    controls = SeekControls(store)
    qtbot.addWidget(controls)
    controls.show()
    yield channel, store, controls, sent
    bridge.detach()


def push(channel, info):
    channel.receiveMessage(YT, json.dumps({"event": "infoDelivery", "info": info}))


def test_slider_follows_player(rig):
    channel, store, controls, _ = rig
    push(channel, {"duration": 120, "currentTime": 30})
    assert controls.pos_slider.maximum() == 120_000
    assert controls.pos_slider.value() == 30_000
    assert controls.time_label.text() == "0:30"
    assert controls.duration_label.text() == "2:00"
    assert controls.percent_label.text() == "25%"


def test_drag_is_isolated_from_updates(rig):
    channel, store, controls, sent = rig
    push(channel, {"duration": 120, "currentTime": 30})

    controls.on_slider_pressed()
    controls.on_slider_moved(90_000)
    push(channel, {"currentTime": 31})
    push(channel, {"currentTime": 32})
    assert controls.scrub.local_time == 90.0
    assert controls.time_label.text() == "1:30"

    controls.pos_slider.setValue(90_000)
    controls.on_slider_released()
    assert not controls.scrub.is_dragging
    seek = json.loads(sent[-1])
    assert seek["func"] == "seekTo"
    assert seek["args"] == [90.0, True]
    assert store.state.current_time == 90.0


def test_buttons_drive_store(rig, qtbot):
    from PyQt6.QtCore import Qt

    _, store, controls, sent = rig
    qtbot.mouseClick(controls.play_btn, Qt.MouseButton.LeftButton)
    assert store.state.is_playing
    qtbot.mouseClick(controls.mute_btn, Qt.MouseButton.LeftButton)
    assert store.state.is_muted
    assert controls.volume_slider.value() == 0


def test_quality_combo(rig):
    _, store, controls, sent = rig
    controls.quality_combo.setCurrentIndex(controls.quality_combo.findData("1080p"))
    assert store.state.quality == "1080p"
    assert json.loads(sent[-1])["args"] == ["hd1080"]

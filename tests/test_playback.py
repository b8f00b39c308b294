import json

import pytest

from lectern.embed.bridge import EmbedChannel, RemoteControlBridge
from lectern.embed.playback import DEFAULT_VOLUME, PlaybackStore, clamp_time

YT = "https://www.youtube.com"


@pytest.fixture
def sent():
    return []


@pytest.fixture
def channel(qtbot):
    return EmbedChannel()


@pytest.fixture
def store(channel, sent):
    bridge = RemoteControlBridge(channel, sent.append)
    bridge.attach()
    yield PlaybackStore(bridge)
    bridge.detach()


def decoded(sent):
    return [json.loads(m) for m in sent]


def test_clamp_time():
    assert clamp_time(-5, 100) == 0
    assert clamp_time(150, 100) == 100
    assert clamp_time(150, 0) == 150


def test_seek_is_clamped_and_optimistic(store, sent):
    store.state.duration = 100.0
    store.handle_seek(250)
    assert store.state.current_time == 100.0
    assert decoded(sent)[-1] == {"event": "command", "func": "seekTo", "args": [100.0, True]}


def test_seek_schedules_reconcile(store, sent, qtbot):
    store.handle_seek(10)
    qtbot.waitUntil(lambda: decoded(sent)[-1]["func"] == "getCurrentTime", timeout=2000)


def test_skip_backward_near_start(store, sent):
    store.state.duration = 60.0
    store.state.current_time = 4.0
    store.handle_skip_backward()
    assert store.state.current_time == 0.0
    assert decoded(sent)[-1]["args"] == [0.0, True]


def test_skip_forward_near_end(store):
    store.state.duration = 60.0
    store.state.current_time = 55.0
    store.handle_skip_forward()
    assert store.state.current_time == 60.0


def test_play_pause_flips_before_confirmation(store, sent):
    store.handle_play_pause()
    assert store.state.is_playing
    assert decoded(sent)[-1]["func"] == "playVideo"
    store.handle_play_pause()
    assert not store.state.is_playing
    assert decoded(sent)[-1]["func"] == "pauseVideo"


def test_state_event_overwrites_optimistic_value(store, channel):
    store.handle_play_pause()
    channel.receiveMessage(YT, json.dumps({"event": "onStateChange", "info": 2}))
    assert not store.state.is_playing


def test_mute_unmute_round_trip(store, sent):
    store.handle_volume_change(40)
    store.handle_mute()
    assert store.state.is_muted
    assert store.state.volume == 0
    store.handle_unmute()
    assert not store.state.is_muted
    assert store.state.volume == DEFAULT_VOLUME
    assert [m["func"] for m in decoded(sent)[-2:]] == ["unMute", "setVolume"]
    assert decoded(sent)[-1]["args"] == [DEFAULT_VOLUME]


def test_volume_zero_counts_as_muted(store):
    store.handle_volume_change(0)
    assert store.state.is_muted
    store.handle_volume_change(130)
    assert store.state.volume == 100
    assert not store.state.is_muted


def test_quality_change(store, sent):
    store.handle_quality_change("720p")
    assert store.state.quality == "720p"
    assert decoded(sent)[-1] == {"event": "command", "func": "setPlaybackQuality", "args": ["hd720"]}
    store.handle_quality_change("8k")
    assert store.state.quality == "auto"
    assert decoded(sent)[-1]["args"] == ["default"]


def test_ended_event(store, channel, qtbot):
    with qtbot.waitSignal(store.ended, timeout=500):
        channel.receiveMessage(YT, json.dumps({"event": "onStateChange", "info": 0}))
    assert not store.state.is_playing


def test_reset(store):
    store.state.current_time = 30
    store.reset()
    assert store.state.current_time == 0
    assert store.state.volume == DEFAULT_VOLUME


def test_foreign_origin_does_not_change_playing(store, channel):
    channel.receiveMessage("https://evil.example", json.dumps({"event": "onStateChange", "info": 1}))
    assert not store.state.is_playing


def test_toggle_mute_restores_default(store):
    assert store.state.volume == DEFAULT_VOLUME
    store.toggle_mute()
    assert (store.state.volume, store.state.is_muted) == (0, True)
    store.toggle_mute()
    assert (store.state.volume, store.state.is_muted) == (DEFAULT_VOLUME, False)


def test_ended_fires_once_per_finish(store, channel):
    endings = []
    store.ended.connect(lambda: endings.append(store.state.current_time))
    channel.receiveMessage(YT, json.dumps({"event": "onStateChange", "info": 0}))
    channel.receiveMessage(YT, json.dumps({"event": "infoDelivery", "info": {"playerState": 0}}))
    assert len(endings) == 1

    # replaying to the end counts again
    channel.receiveMessage(YT, json.dumps({"event": "onStateChange", "info": 1}))
    channel.receiveMessage(YT, json.dumps({"event": "onStateChange", "info": 0}))
    assert len(endings) == 2

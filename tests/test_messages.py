import json

import pytest

from lectern.embed.messages import (
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

YT = "https://www.youtube.com"


def test_encode_command_shape():
    assert json.loads(encode_command("seekTo", [12.5, True])) == {
        "event": "command",
        "func": "seekTo",
        "args": [12.5, True],
    }
    assert json.loads(encode_command("playVideo"))["args"] == []


def test_encode_listening():
    msg = json.loads(encode_listening("dQw4w9WgXcQ"))
    assert msg == {"event": "listening", "id": "dQw4w9WgXcQ", "channel": "widget"}


def test_foreign_origin_is_ignored():
    data = json.dumps({"event": "onReady"})
    assert decode_message("https://evil.example", data) == Ignored("origin")


@pytest.mark.parametrize("data", ["{not json", "[1, 2]", "42", None])
def test_malformed_payloads(data):
    assert decode_message(YT, data) == Ignored("malformed")


def test_ready_variants():
    assert decode_message(YT, '{"event": "onReady"}') == Ready()
    assert decode_message(YT, {"event": "video-ready"}) == Ready()


def test_state_change():
    assert decode_message(YT, '{"event": "onStateChange", "info": 1}') == StateChange(1)
    assert decode_message(YT, '{"event": "onStateChange", "info": "1"}') == Ignored("malformed")


def test_info_delivery_partial_fields():
    event = decode_message(
        YT, json.dumps({"event": "infoDelivery", "info": {"currentTime": 12.25, "duration": "x"}})
    )
    assert event == InfoDelivery(duration=None, current_time=12.25, player_state=None)


def test_info_delivery_rejects_booleans():
    event = decode_message(YT, {"event": "infoDelivery", "info": {"duration": True, "playerState": 2}})
    assert isinstance(event, InfoDelivery)
    assert event.duration is None
    assert event.player_state == 2


def test_progress_and_error():
    assert decode_message(YT, '{"event": "video-progress", "info": 3.5}') == Progress(3.5)
    assert decode_message(YT, '{"event": "onError", "info": 150}') == PlayerError(150)
    assert decode_message(YT, '{"event": "onError"}') == PlayerError(-1)


def test_unknown_event():
    assert decode_message(YT, '{"event": "onPlaybackRateChange", "info": 1}') == Ignored("unknown")


def test_bytes_payload():
    assert decode_message(YT, b'{"event": "onReady"}') == Ready()

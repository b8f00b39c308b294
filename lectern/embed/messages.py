"""Wire format for the embedded player's postMessage remote-control API.

Outbound traffic is ``{"event": "command", "func": ..., "args": [...]}``
serialized to JSON. Inbound traffic is decoded into one of a handful of
event classes; anything the player does not understand becomes
:class:`Ignored` so callers can dispatch on type without guessing at
optional keys.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

YOUTUBE_ORIGINS = frozenset(
    {
        "https://www.youtube-nocookie.com",
        "https://www.youtube.com",
    }
)

# onStateChange codes
STATE_UNSTARTED = -1
STATE_ENDED = 0
STATE_PLAYING = 1
STATE_PAUSED = 2
STATE_BUFFERING = 3
STATE_CUED = 5


@dataclass(frozen=True)
class Ready:
    pass


@dataclass(frozen=True)
class StateChange:
    code: int


@dataclass(frozen=True)
class InfoDelivery:
    duration: Optional[float] = None
    current_time: Optional[float] = None
    player_state: Optional[int] = None


@dataclass(frozen=True)
class Progress:
    time: float


@dataclass(frozen=True)
class PlayerError:
    code: int


@dataclass(frozen=True)
class Ignored:
    reason: str


InboundEvent = Union[Ready, StateChange, InfoDelivery, Progress, PlayerError, Ignored]


def encode_command(func: str, args: Optional[Sequence[Any]] = None) -> str:
    return json.dumps({"event": "command", "func": func, "args": list(args or [])})


def encode_listening(video_id: Optional[str]) -> str:
    return json.dumps({"event": "listening", "id": video_id or 1, "channel": "widget"})


def _number(value: Any) -> Optional[float]:
    # bool is an int subclass; "true" is never a timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def _integer(value: Any) -> Optional[int]:
    number = _number(value)
    if number is None or number != int(number):
        return None
    return int(number)


def _payload(data: Any) -> Optional[Mapping[str, Any]]:
    if isinstance(data, (bytes, bytearray)):
        data = data.decode("utf-8", errors="replace")
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None
    if not isinstance(data, Mapping):
        return None
    return data


def decode_message(
    origin: str,
    data: Any,
    allowed_origins: Iterable[str] = YOUTUBE_ORIGINS,
) -> InboundEvent:
    if origin not in allowed_origins:
        return Ignored("origin")

    payload = _payload(data)
    if payload is None:
        return Ignored("malformed")

    event = payload.get("event")
    info = payload.get("info")

    if event in ("onReady", "video-ready"):
        return Ready()

    if event == "onStateChange":
        code = _integer(info)
        if code is None:
            return Ignored("malformed")
        return StateChange(code)

    if event in ("infoDelivery", "initialDelivery"):
        if not isinstance(info, Mapping):
            return Ignored("malformed")
        return InfoDelivery(
            duration=_number(info.get("duration")),
            current_time=_number(info.get("currentTime")),
            player_state=_integer(info.get("playerState")),
        )

    if event == "video-progress":
        time = _number(info)
        if time is None:
            time = _number(payload.get("currentTime"))
        if time is None:
            return Ignored("malformed")
        return Progress(time)

    if event == "onError":
        code = _integer(info)
        return PlayerError(code if code is not None else -1)

    return Ignored("unknown")

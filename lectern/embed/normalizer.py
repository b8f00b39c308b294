"""YouTube reference parsing.

Accepts the URL shapes lesson authors paste (watch pages, short links,
embed and shorts URLs) as well as bare video IDs and reduces them to the
canonical 11-character ID.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")

_ID = r"([A-Za-z0-9_-]{11})"

# Order matters: the first pattern that matches wins.
URL_PATTERNS = (
    re.compile(r"youtube\.com/watch\?v=" + _ID),
    re.compile(r"youtu\.be/" + _ID),
    re.compile(r"youtube\.com/embed/" + _ID),
    re.compile(r"youtube\.com/shorts/" + _ID),
    re.compile(r"youtube\.com/v/" + _ID),
    # watch pages where ``v`` is not the first query parameter
    re.compile(r"youtube\.com/watch\?(?:[^#]*&)?v=" + _ID),
)


@dataclass(frozen=True)
class NormalizedId:
    id: Optional[str]
    valid: bool
    original: str = ""


def is_valid_video_id(value: str) -> bool:
    return bool(value) and VIDEO_ID_RE.match(value) is not None


def normalize(reference: str) -> NormalizedId:
    """Resolve ``reference`` to a canonical YouTube video ID.

    Returns ``NormalizedId(id=None, valid=False)`` when nothing matches; the
    raw string is never passed off as an ID.
    """

    original = (reference or "").strip()
    if not original:
        return NormalizedId(None, False, original)

    if VIDEO_ID_RE.match(original):
        return NormalizedId(original, True, original)

    for pattern in URL_PATTERNS:
        match = pattern.search(original)
        if match:
            return NormalizedId(match.group(1), True, original)

    return NormalizedId(None, False, original)

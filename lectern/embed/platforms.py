"""Per-platform embed URL construction.

Nothing here touches the network; the iframe does the fetching. The
functions only decide which URL(s) to try, which iframe permissions to
grant and where to send the user when embedding is not possible.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence
from urllib.parse import quote, urlencode, urlparse

from lectern.embed.normalizer import normalize
from lectern.errors import UnsupportedPlatformError

logger = logging.getLogger(__name__)


class Platform(str, Enum):
    YOUTUBE = "youtube"
    VIMEO = "vimeo"
    FACEBOOK = "facebook"
    DAILYMOTION = "dailymotion"
    TWITCH = "twitch"
    PEERTUBE = "peertube"
    RUMBLE = "rumble"
    TELEGRAM = "telegram"

    @classmethod
    def parse(cls, value) -> "Platform":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedPlatformError(str(value)) from None


class EmbedKind(str, Enum):
    IFRAME = "iframe"
    EXTERNAL_LINK = "external-link"
    UNAVAILABLE = "unavailable"


PLATFORM_LABELS = {
    Platform.YOUTUBE: "YouTube",
    Platform.VIMEO: "Vimeo",
    Platform.FACEBOOK: "Facebook",
    Platform.DAILYMOTION: "Dailymotion",
    Platform.TWITCH: "Twitch",
    Platform.PEERTUBE: "PeerTube",
    Platform.RUMBLE: "Rumble",
    Platform.TELEGRAM: "Telegram",
}

IFRAME_PERMISSIONS = {
    Platform.YOUTUBE: (
        "accelerometer",
        "autoplay",
        "clipboard-write",
        "encrypted-media",
        "gyroscope",
        "picture-in-picture",
        "web-share",
    ),
    Platform.VIMEO: ("autoplay", "fullscreen", "picture-in-picture"),
    Platform.FACEBOOK: (
        "autoplay",
        "clipboard-write",
        "encrypted-media",
        "picture-in-picture",
        "web-share",
    ),
    Platform.DAILYMOTION: ("autoplay", "fullscreen"),
    Platform.TWITCH: ("autoplay", "fullscreen"),
}

# Host suffix -> platform, used when the launcher is left on "auto".
_HOST_PLATFORMS = (
    ("youtube.com", Platform.YOUTUBE),
    ("youtube-nocookie.com", Platform.YOUTUBE),
    ("youtu.be", Platform.YOUTUBE),
    ("vimeo.com", Platform.VIMEO),
    ("facebook.com", Platform.FACEBOOK),
    ("fb.watch", Platform.FACEBOOK),
    ("dailymotion.com", Platform.DAILYMOTION),
    ("dai.ly", Platform.DAILYMOTION),
    ("twitch.tv", Platform.TWITCH),
    ("rumble.com", Platform.RUMBLE),
    ("t.me", Platform.TELEGRAM),
    ("telegram.me", Platform.TELEGRAM),
)

_VIMEO_ID_RE = re.compile(r"vimeo\.com/(?:video/)?(\d+)")
_DAILYMOTION_ID_RE = re.compile(r"(?:dailymotion\.com/(?:embed/)?video/|dai\.ly/)([A-Za-z0-9]+)")
_TWITCH_ID_RE = re.compile(r"twitch\.tv/videos/(\d+)")
# Live channel pages: twitch.tv/<login>, nothing after the login.
_TWITCH_CHANNEL_RE = re.compile(
    r"^(?:https?://)?(?:www\.|m\.)?twitch\.tv/(?!videos\b)([A-Za-z0-9_]{2,25})/?(?:[?#].*)?$"
)
_PEERTUBE_SHORT_RE = re.compile(r"/w/([^/?#]+)")


@dataclass(frozen=True)
class EmbedTarget:
    """A video reference as handed to the player, resolved once."""

    platform: Platform
    raw_reference: str
    canonical_id: Optional[str]
    embeddable: bool = True


@dataclass(frozen=True)
class EmbedSpec:
    kind: EmbedKind
    src: Optional[str] = None
    allowed_permissions: tuple[str, ...] = ()
    fallbacks: tuple[str, ...] = ()
    external_url: Optional[str] = None
    # What the player falls back to once every candidate URL has failed.
    exhausted_kind: EmbedKind = EmbedKind.UNAVAILABLE

    @property
    def candidates(self) -> tuple[str, ...]:
        if not self.src:
            return ()
        return (self.src, *self.fallbacks)

    @property
    def allow_attribute(self) -> str:
        return "; ".join(self.allowed_permissions)


class FallbackLadder:
    """Ordered embed URLs for one source; advances on failure, never loops."""

    def __init__(self, candidates: Iterable[str]) -> None:
        self._candidates = [c for c in candidates if c]
        self._index = 0
        self._exhausted = not self._candidates

    @property
    def current(self) -> Optional[str]:
        if self._exhausted:
            return None
        return self._candidates[self._index]

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def attempts(self) -> int:
        if not self._candidates:
            return 0
        return len(self._candidates) if self._exhausted else self._index + 1

    def advance(self) -> Optional[str]:
        if self._exhausted:
            return None
        if self._index + 1 < len(self._candidates):
            self._index += 1
            return self._candidates[self._index]
        self._exhausted = True
        return None

    def reset(self) -> None:
        self._index = 0
        self._exhausted = not self._candidates

    def __len__(self) -> int:
        return len(self._candidates)


def platform_label(platform: Platform) -> str:
    return PLATFORM_LABELS.get(platform, str(platform.value).title())


def detect_platform(url: str) -> Optional[Platform]:
    value = (url or "").strip()
    if not value:
        return None
    parsed = urlparse(value if "://" in value else "https://" + value)
    host = parsed.netloc.lower().split(":")[0]
    for suffix, platform in _HOST_PLATFORMS:
        if host == suffix or host.endswith("." + suffix):
            return platform
    if "/videos/watch/" in parsed.path or "/w/" in parsed.path:
        # PeerTube instances are self-hosted; recognise them by path shape.
        return Platform.PEERTUBE
    return None


def make_target(platform, reference: str) -> EmbedTarget:
    platform = Platform.parse(platform)
    raw = (reference or "").strip()
    canonical: Optional[str] = None

    if platform is Platform.YOUTUBE:
        canonical = normalize(raw).id
    elif platform is Platform.VIMEO:
        canonical = _match_id(_VIMEO_ID_RE, raw) or (raw if raw.isdigit() else None)
    elif platform is Platform.DAILYMOTION:
        canonical = _match_id(_DAILYMOTION_ID_RE, raw) or (raw if raw and "/" not in raw else None)
    elif platform is Platform.TWITCH:
        canonical = _match_id(_TWITCH_ID_RE, raw) or (raw if raw.isdigit() else None)

    return EmbedTarget(platform=platform, raw_reference=raw, canonical_id=canonical)


def _match_id(pattern: re.Pattern, value: str) -> Optional[str]:
    match = pattern.search(value)
    return match.group(1) if match else None


def youtube_embed_urls(video_id: str, page_origin: str) -> tuple[str, str]:
    """Return the privacy-enhanced embed URL and the regular-domain fallback."""

    origin = quote(page_origin, safe="")
    primary = (
        f"https://www.youtube-nocookie.com/embed/{video_id}?"
        "rel=0&modestbranding=1&showinfo=0&fs=0&cc_load_policy=0&iv_load_policy=3&"
        "autohide=1&controls=1&disablekb=0&enablejsapi=1&playsinline=1&autoplay=0&"
        f"origin={origin}&widget_referrer={origin}"
    )
    fallback = (
        f"https://www.youtube.com/embed/{video_id}?"
        "rel=0&modestbranding=1&showinfo=0&fs=0&controls=1&disablekb=0&enablejsapi=1&"
        f"playsinline=1&autoplay=0&origin={origin}"
    )
    return primary, fallback


def facebook_embed_urls(video_url: str) -> list[str]:
    encoded = quote(video_url, safe="")
    urls = [
        "https://www.facebook.com/plugins/video.php?"
        f"href={encoded}&width=560&show_text=false&height=315&auto_play=false&allowfullscreen=true",
        "https://www.facebook.com/plugins/video.php?"
        f"href={encoded}&width=100%25&show_text=false&height=315&appId",
    ]
    if "/videos/" in video_url:
        video_id = video_url.split("/videos/", 1)[1].split("/", 1)[0].split("?", 1)[0]
        if video_id:
            urls.append(f"https://www.facebook.com/video/embed?video_id={video_id}")
    return urls


_WATCH_PAGES = {
    Platform.YOUTUBE: "https://www.youtube.com/watch?v={id}",
    Platform.VIMEO: "https://vimeo.com/{id}",
    Platform.DAILYMOTION: "https://www.dailymotion.com/video/{id}",
    Platform.TWITCH: "https://www.twitch.tv/videos/{id}",
}


def peertube_embed_url(video_url: str) -> Optional[str]:
    """``/videos/watch/<id>`` and the short ``/w/<id>`` form both embed at
    ``/videos/embed/<id>``."""

    if "/watch/" in video_url:
        return video_url.replace("/watch/", "/embed/", 1)
    parsed = urlparse(video_url)
    match = _PEERTUBE_SHORT_RE.search(parsed.path)
    if match and parsed.netloc:
        return f"{parsed.scheme or 'https'}://{parsed.netloc}/videos/embed/{match.group(1)}"
    return None


def watch_url(target: EmbedTarget) -> Optional[str]:
    page = _WATCH_PAGES.get(target.platform)
    if page and target.canonical_id:
        return page.format(id=target.canonical_id)
    if target.raw_reference.startswith(("http://", "https://")):
        return target.raw_reference
    return None


def build_embed(platform, reference, *, page_origin: str = "http://localhost") -> EmbedSpec:
    """Decide how to show ``reference`` on ``platform``.

    ``reference`` may be a raw string or an :class:`EmbedTarget`.
    ``page_origin`` is the origin of the page hosting the iframe; YouTube
    wants it echoed back and Twitch refuses to play without its hostname.
    """

    target = reference if isinstance(reference, EmbedTarget) else make_target(platform, reference)
    platform = target.platform
    external = watch_url(target)
    permissions = IFRAME_PERMISSIONS.get(platform, ())
    vid = target.canonical_id
    url = target.raw_reference

    def unavailable() -> EmbedSpec:
        return EmbedSpec(EmbedKind.UNAVAILABLE, external_url=external)

    if not target.embeddable:
        return EmbedSpec(EmbedKind.EXTERNAL_LINK, external_url=external)

    if platform is Platform.YOUTUBE:
        if not vid:
            return unavailable()
        primary, fallback = youtube_embed_urls(vid, page_origin)
        return EmbedSpec(
            EmbedKind.IFRAME,
            src=primary,
            allowed_permissions=permissions,
            fallbacks=(fallback,),
            external_url=external,
        )

    if platform is Platform.VIMEO:
        if not vid:
            return unavailable()
        query = urlencode({"badge": 0, "autopause": 0, "player_id": 0, "app_id": 58479})
        src = f"https://player.vimeo.com/video/{vid}?{query}"
        return EmbedSpec(EmbedKind.IFRAME, src=src, allowed_permissions=permissions, external_url=external)

    if platform is Platform.DAILYMOTION:
        if not vid:
            return unavailable()
        src = f"https://www.dailymotion.com/embed/video/{vid}"
        return EmbedSpec(EmbedKind.IFRAME, src=src, allowed_permissions=permissions, external_url=external)

    if platform is Platform.TWITCH:
        parent = urlparse(page_origin).hostname or "localhost"
        if vid:
            src = f"https://player.twitch.tv/?video={vid}&parent={parent}"
        else:
            channel = _match_id(_TWITCH_CHANNEL_RE, url)
            if not channel:
                return unavailable()
            src = f"https://player.twitch.tv/?channel={channel}&parent={parent}"
        return EmbedSpec(EmbedKind.IFRAME, src=src, allowed_permissions=permissions, external_url=external)

    if platform is Platform.FACEBOOK:
        if not url:
            return unavailable()
        first, *rest = facebook_embed_urls(url)
        return EmbedSpec(
            EmbedKind.IFRAME,
            src=first,
            allowed_permissions=permissions,
            fallbacks=tuple(rest),
            external_url=external,
            exhausted_kind=EmbedKind.EXTERNAL_LINK,
        )

    if platform is Platform.PEERTUBE:
        src = peertube_embed_url(url)
        if not src:
            return unavailable()
        return EmbedSpec(EmbedKind.IFRAME, src=src, external_url=external)

    if platform is Platform.RUMBLE:
        if "rumble.com/" not in url:
            return unavailable()
        return EmbedSpec(
            EmbedKind.IFRAME,
            src=url.replace("rumble.com/", "rumble.com/embed/", 1),
            external_url=external,
        )

    # Telegram does not allow third-party embedding at all.
    logger.debug("No embed available for %s", platform.value)
    return unavailable()


def ladder_for(spec: EmbedSpec) -> FallbackLadder:
    return FallbackLadder(spec.candidates)


def known_platforms() -> Sequence[Platform]:
    return tuple(Platform)

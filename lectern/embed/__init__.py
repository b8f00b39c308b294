"""Embedded player facade: URL building, remote control and protection."""

from .normalizer import normalize, NormalizedId  # noqa: F401
from .platforms import (  # noqa: F401
    EmbedKind,
    EmbedSpec,
    EmbedTarget,
    FallbackLadder,
    Platform,
    build_embed,
    make_target,
)
from .player_widget import EmbedPlayerWidget  # noqa: F401

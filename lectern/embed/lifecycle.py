"""Per-embed phase tracking."""

from __future__ import annotations

import logging
from enum import Enum

from lectern.errors import InvalidTransition

logger = logging.getLogger(__name__)


class EmbedPhase(str, Enum):
    LOADING = "loading"
    READY = "ready"
    PLAYING = "playing"
    PAUSED = "paused"
    ERROR = "error"
    EXTERNAL = "external"
    UNMOUNTED = "unmounted"


_ACTIVE = {EmbedPhase.READY, EmbedPhase.PLAYING, EmbedPhase.PAUSED}

TRANSITIONS: dict[EmbedPhase, frozenset[EmbedPhase]] = {
    EmbedPhase.LOADING: frozenset(
        {
            EmbedPhase.LOADING,
            EmbedPhase.READY,
            EmbedPhase.PLAYING,
            EmbedPhase.PAUSED,
            EmbedPhase.ERROR,
            EmbedPhase.EXTERNAL,
            EmbedPhase.UNMOUNTED,
        }
    ),
    EmbedPhase.READY: frozenset(_ACTIVE | {EmbedPhase.ERROR, EmbedPhase.UNMOUNTED}),
    EmbedPhase.PLAYING: frozenset(_ACTIVE | {EmbedPhase.ERROR, EmbedPhase.UNMOUNTED}),
    EmbedPhase.PAUSED: frozenset(_ACTIVE | {EmbedPhase.ERROR, EmbedPhase.UNMOUNTED}),
    EmbedPhase.ERROR: frozenset({EmbedPhase.LOADING, EmbedPhase.EXTERNAL, EmbedPhase.UNMOUNTED}),
    EmbedPhase.EXTERNAL: frozenset({EmbedPhase.LOADING, EmbedPhase.UNMOUNTED}),
    EmbedPhase.UNMOUNTED: frozenset(),
}


class EmbedLifecycle:
    def __init__(self, phase: EmbedPhase = EmbedPhase.LOADING) -> None:
        self.phase = phase
        self.history: list[EmbedPhase] = [phase]

    def can_advance(self, phase: EmbedPhase) -> bool:
        return phase in TRANSITIONS[self.phase]

    def advance(self, phase: EmbedPhase) -> bool:
        """Move to ``phase``; returns False when already there."""

        if phase is self.phase and phase is not EmbedPhase.LOADING:
            return False
        if not self.can_advance(phase):
            raise InvalidTransition(self.phase.value, phase.value)
        logger.debug("Embed phase %s -> %s", self.phase.value, phase.value)
        self.phase = phase
        self.history.append(phase)
        return True

    @property
    def is_active(self) -> bool:
        return self.phase in _ACTIVE

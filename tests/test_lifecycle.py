import pytest

from lectern.embed.lifecycle import EmbedLifecycle, EmbedPhase
from lectern.errors import InvalidTransition


def test_happy_path():
    lc = EmbedLifecycle()
    for phase in (EmbedPhase.READY, EmbedPhase.PLAYING, EmbedPhase.PAUSED, EmbedPhase.UNMOUNTED):
        assert lc.advance(phase)
    assert lc.history[0] is EmbedPhase.LOADING
    assert lc.phase is EmbedPhase.UNMOUNTED


def test_repeated_phase_is_a_no_op():
    lc = EmbedLifecycle()
    lc.advance(EmbedPhase.READY)
    assert lc.advance(EmbedPhase.READY) is False
    assert lc.history == [EmbedPhase.LOADING, EmbedPhase.READY]


def test_fallback_restarts_loading():
    lc = EmbedLifecycle()
    assert lc.advance(EmbedPhase.LOADING)
    assert lc.history.count(EmbedPhase.LOADING) == 2


def test_retry_from_error():
    lc = EmbedLifecycle()
    lc.advance(EmbedPhase.ERROR)
    assert lc.can_advance(EmbedPhase.LOADING)
    assert not lc.can_advance(EmbedPhase.PLAYING)


@pytest.mark.parametrize(
    "path, bad",
    [
        ([EmbedPhase.UNMOUNTED], EmbedPhase.LOADING),
        ([EmbedPhase.EXTERNAL], EmbedPhase.PLAYING),
        ([EmbedPhase.READY], EmbedPhase.EXTERNAL),
    ],
)
def test_illegal_transitions(path, bad):
    lc = EmbedLifecycle()
    for phase in path:
        lc.advance(phase)
    with pytest.raises(InvalidTransition) as exc:
        lc.advance(bad)
    assert exc.value.requested == bad.value


def test_is_active():
    lc = EmbedLifecycle()
    assert not lc.is_active
    lc.advance(EmbedPhase.READY)
    assert lc.is_active

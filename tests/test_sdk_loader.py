import pytest

from lectern.embed.sdk_loader import LoaderState, SharedRuntimeLoader


class Runtime:
    def __init__(self):
        self.closed = False


@pytest.fixture
def calls():
    return {"created": 0, "torn_down": []}


def sync_loader(calls):
    def factory(_loader):
        calls["created"] += 1
        return Runtime()

    return SharedRuntimeLoader(factory, calls["torn_down"].append, name="test")


def test_single_init_and_teardown_at_zero(calls):
    loader = sync_loader(calls)
    seen = []
    loader.acquire(seen.append)
    loader.acquire(seen.append)
    assert calls["created"] == 1
    assert len(seen) == 2 and seen[0] is seen[1]

    loader.release()
    assert calls["torn_down"] == []
    loader.release()
    assert calls["torn_down"] == [seen[0]]
    assert loader.state is LoaderState.IDLE

    # next acquire builds a fresh runtime
    loader.acquire(seen.append)
    assert calls["created"] == 2


def test_async_ready_fans_out_to_early_and_late(calls):
    loader = SharedRuntimeLoader(lambda _l: None, name="async")
    early = []
    loader.acquire(early.append)
    loader.acquire(early.append)
    assert loader.state is LoaderState.LOADING
    assert loader.subscriber_count == 2

    runtime = Runtime()
    loader.mark_ready(runtime)
    assert early == [runtime, runtime]

    late = []
    loader.acquire(late.append)
    assert late == [runtime]
    assert loader.refcount == 3


def test_release_before_ready_drops_callback():
    loader = SharedRuntimeLoader(lambda _l: None)
    got = []
    loader.acquire(got.append)
    loader.release(got.append)
    loader.mark_ready(Runtime())
    assert got == []
    assert loader.state is LoaderState.IDLE


def test_unbalanced_release(calls):
    loader = sync_loader(calls)
    with pytest.raises(RuntimeError):
        loader.release()

import pytest

from lectern.embed.normalizer import is_valid_video_id, normalize

VID = "dQw4w9WgXcQ"


@pytest.mark.parametrize(
    "reference",
    [
        VID,
        f"https://www.youtube.com/watch?v={VID}",
        f"https://youtu.be/{VID}",
        f"https://www.youtube.com/embed/{VID}",
        f"https://www.youtube.com/shorts/{VID}",
        f"https://www.youtube.com/v/{VID}",
        f"https://www.youtube.com/watch?feature=share&v={VID}",
        f"  https://youtu.be/{VID}?t=42  ",
    ],
)
def test_accepted_shapes_resolve_to_id(reference):
    result = normalize(reference)
    assert result.valid
    assert result.id == VID


def test_normalize_is_idempotent_on_ids():
    once = normalize(f"https://youtu.be/{VID}")
    twice = normalize(once.id)
    assert twice.id == once.id
    assert twice.valid


@pytest.mark.parametrize("reference", ["", "   ", None])
def test_empty_input_is_invalid(reference):
    result = normalize(reference)
    assert result.id is None
    assert not result.valid


def test_unmatched_reference_is_not_passed_through():
    result = normalize("not a video")
    assert result.id is None
    assert not result.valid
    assert result.original == "not a video"


def test_short_id_is_rejected():
    assert not normalize("abc123").valid
    assert not is_valid_video_id("abc123")
    assert is_valid_video_id("a-b_c123456")

import pytest

from asyncpageblob import (
    PAGE_SIZE,
    InvalidArgumentError,
    get_full_pages_size,
    grow_target,
    pad_to_page_boundary,
    pages_needed_after_append,
)
from asyncpageblob.page_utils import check_max_pages_per_round_trip


def test_get_full_pages_size():
    assert get_full_pages_size(0) == 0
    assert get_full_pages_size(1) == 512
    assert get_full_pages_size(512) == 512
    assert get_full_pages_size(513) == 1024
    assert get_full_pages_size(1024) == 1024


def test_pad_single_byte_to_full_page():
    padded = pad_to_page_boundary(b"\x01")
    assert len(padded) == PAGE_SIZE
    assert padded[0] == 1
    assert padded[1:] == bytes(PAGE_SIZE - 1)


def test_pad_empty_payload_stays_empty():
    assert pad_to_page_boundary(b"") == b""


def test_pad_aligned_payload_is_unchanged():
    payload = b"\xff" * (2 * PAGE_SIZE)
    assert pad_to_page_boundary(payload) == payload


def test_pad_accepts_bytearray():
    assert pad_to_page_boundary(bytearray(b"ab")) == b"ab" + bytes(PAGE_SIZE - 2)


@pytest.mark.parametrize("length", [1, 2, 511, 512, 513, 1000, 1023, 1024, 1025, 4097])
def test_pad_bounds(length):
    payload = b"\x07" * length
    padded = pad_to_page_boundary(payload)

    assert len(padded) % PAGE_SIZE == 0
    assert length <= len(padded) < length + PAGE_SIZE
    assert padded[:length] == payload


def test_pages_needed_after_append():
    assert pages_needed_after_append(2, 512) == 3
    assert pages_needed_after_append(0, 0) == 0
    assert pages_needed_after_append(5, 4 * PAGE_SIZE) == 9


@pytest.mark.parametrize(
    "pages_needed, ratio, expected",
    [
        (1, 2, 2),
        (2, 2, 2),
        (3, 2, 4),
        (4, 2, 4),
        (1, 3, 3),
        (2, 3, 3),
        (3, 3, 3),
        (4, 3, 6),
        (5, 3, 6),
        (6, 3, 6),
    ],
)
def test_grow_target(pages_needed, ratio, expected):
    assert grow_target(pages_needed, ratio) == expected


def test_grow_target_bounds():
    for ratio in range(1, 12):
        for pages_needed in range(1, 50):
            target = grow_target(pages_needed, ratio)
            assert target % ratio == 0
            assert pages_needed <= target < pages_needed + ratio


@pytest.mark.parametrize("ratio", [0, -1])
def test_grow_target_rejects_bad_ratio(ratio):
    with pytest.raises(InvalidArgumentError):
        grow_target(3, ratio)


def test_invalid_argument_is_a_value_error():
    with pytest.raises(ValueError):
        grow_target(3, 0)


@pytest.mark.parametrize("max_pages", [0, -3])
def test_round_trip_size_must_be_positive(max_pages):
    with pytest.raises(InvalidArgumentError):
        check_max_pages_per_round_trip(max_pages)

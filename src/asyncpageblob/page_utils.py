from .errors import InvalidArgumentError

PAGE_SIZE = 512


def get_full_pages_size(length: int) -> int:
    """Return the smallest multiple of PAGE_SIZE that is >= length."""
    if length < 0:
        raise InvalidArgumentError(f"Length must not be negative, got {length}")
    if length == 0:
        return 0
    pages = (length - 1) // PAGE_SIZE
    return (pages + 1) * PAGE_SIZE


def pad_to_page_boundary(payload: bytes) -> bytes:
    """
    Append zero bytes until the payload fills whole pages.
    An empty payload stays empty (zero pages).
    """
    padding = get_full_pages_size(len(payload)) - len(payload)
    if padding == 0:
        return bytes(payload)
    return bytes(payload) + b"\x00" * padding


def pages_needed_after_append(start_page: int, data_len: int) -> int:
    return start_page + data_len // PAGE_SIZE


def grow_target(pages_needed: int, resize_ratio: int) -> int:
    """
    Round pages_needed up to the next multiple of resize_ratio.

    grow_target(3, 2) == 4, grow_target(4, 3) == 6.
    """
    if resize_ratio < 1:
        raise InvalidArgumentError(
            f"Resize ratio must be at least 1, got {resize_ratio}"
        )
    return -(-pages_needed // resize_ratio) * resize_ratio


def check_non_negative(name: str, value: int) -> None:
    if value < 0:
        raise InvalidArgumentError(f"{name} must not be negative, got {value}")


def check_max_pages_per_round_trip(max_pages_per_round_trip: int) -> None:
    if max_pages_per_round_trip < 1:
        raise InvalidArgumentError(
            f"max_pages_per_round_trip must be at least 1, got {max_pages_per_round_trip}"
        )


def check_page_aligned(payload: bytes) -> None:
    if len(payload) % PAGE_SIZE != 0:
        raise InvalidArgumentError(
            f"Payload length {len(payload)} is not a multiple of {PAGE_SIZE}"
        )

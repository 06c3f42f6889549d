import logging
from typing import Awaitable, Callable

from .page_utils import PAGE_SIZE, check_max_pages_per_round_trip, check_page_aligned

logger = logging.getLogger(__name__)

WriteRound = Callable[[int, bytes], Awaitable[None]]


async def write_pages(
    write_round: WriteRound,
    start_page: int,
    max_pages_per_round_trip: int,
    payload: bytes,
) -> int:
    """
    Write a page-aligned payload through write_round in bounded chunks.

    Chunks are written one at a time in increasing page order. If a chunk
    fails the error propagates and the chunks already written stay applied.
    Returns the number of bytes written.
    """
    check_max_pages_per_round_trip(max_pages_per_round_trip)
    check_page_aligned(payload)

    max_write_chunk = max_pages_per_round_trip * PAGE_SIZE

    if len(payload) <= max_write_chunk:
        await write_round(start_page, payload)
        return len(payload)

    view = memoryview(payload)
    page_no = start_page
    pos = 0
    rounds = 0

    while pos < len(payload):
        chunk = bytes(view[pos : pos + max_write_chunk])
        logger.debug("Writing chunk of %d bytes at page %d", len(chunk), page_no)
        await write_round(page_no, chunk)

        pos += len(chunk)
        page_no += len(chunk) // PAGE_SIZE
        rounds += 1

    logger.debug(
        "Wrote %d bytes from page %d in %d round trips", pos, start_page, rounds
    )
    return pos

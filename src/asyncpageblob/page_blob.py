import logging
from dataclasses import dataclass

from .errors import CapacityExceededError, InvalidArgumentError
from .page_utils import (
    PAGE_SIZE,
    check_max_pages_per_round_trip,
    check_non_negative,
    grow_target,
    pad_to_page_boundary,
    pages_needed_after_append,
)
from .page_writer import write_pages
from .storage_protocols import AsyncPageBlobBackend, AsyncPageBlobHandle, BlobProperties

logger = logging.getLogger(__name__)


@dataclass
class PageCountCache:
    """
    Last known size of a blob, in pages.

    Set by create, create_if_not_exists and resize; cleared by the deletes.
    Reads and writes leave it alone, and changes made through other handles
    are never seen, so the value can go stale.
    """

    pages: int | None = None

    @property
    def is_known(self) -> bool:
        return self.pages is not None

    def store(self, pages: int) -> int:
        self.pages = pages
        return pages

    def clear(self) -> None:
        self.pages = None


class AsyncPageBlob(AsyncPageBlobHandle):
    """
    A page blob addressed by container and blob name on a backend.

    Not safe for concurrent use: callers must serialize operations on a
    handle. Multi-chunk writes are not atomic.
    """

    def __init__(
        self,
        backend: AsyncPageBlobBackend,
        container_name: str,
        blob_name: str,
    ) -> None:
        self.backend = backend
        self._container_name = container_name
        self._blob_name = blob_name
        self._size_cache = PageCountCache()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._container_name!r}, {self._blob_name!r})"

    @property
    def container_name(self) -> str:
        return self._container_name

    @property
    def blob_name(self) -> str:
        return self._blob_name

    @property
    def cached_page_count(self) -> int | None:
        return self._size_cache.pages

    async def create_container_if_not_exist(self) -> None:
        await self.backend.create_container_if_not_exist(self._container_name)

    async def create(self, pages_amount: int) -> None:
        check_non_negative("pages_amount", pages_amount)
        await self.backend.create_page_blob(
            self._container_name, self._blob_name, pages_amount
        )
        self._size_cache.store(pages_amount)

    async def create_if_not_exists(self, pages_amount: int) -> None:
        """Create the blob; an existing blob keeps whatever size it has."""
        check_non_negative("pages_amount", pages_amount)
        props = await self.backend.create_page_blob_if_not_exists(
            self._container_name, self._blob_name, pages_amount
        )
        self._size_cache.store(props.byte_size // PAGE_SIZE)

    async def get_blob_properties(self) -> BlobProperties:
        return await self.backend.get_blob_properties(
            self._container_name, self._blob_name
        )

    async def read_blob_size(self) -> int:
        """Fetch the page count from the backend and refresh the cache."""
        props = await self.get_blob_properties()
        pages = self._size_cache.store(props.byte_size // PAGE_SIZE)
        logger.debug("%s/%s has %d pages", self._container_name, self._blob_name, pages)
        return pages

    async def get_available_pages_amount(self) -> int:
        if self._size_cache.is_known:
            return self._size_cache.pages
        return await self.read_blob_size()

    async def resize(self, pages_amount: int) -> None:
        check_non_negative("pages_amount", pages_amount)
        await self.backend.resize_page_blob(
            self._container_name, self._blob_name, pages_amount
        )
        self._size_cache.store(pages_amount)

    async def get(self, start_page: int, pages_amount: int) -> bytes:
        check_non_negative("start_page", start_page)
        check_non_negative("pages_amount", pages_amount)
        return await self.backend.get_pages(
            self._container_name, self._blob_name, start_page, pages_amount
        )

    async def _write_round(self, start_page: int, payload: bytes) -> None:
        await self.backend.save_pages(
            self._container_name, self._blob_name, start_page, payload
        )

    async def save_pages(
        self,
        start_page: int,
        max_pages_per_round_trip: int,
        payload: bytes,
    ) -> int:
        """
        Write payload at start_page, padding it with zeros to whole pages.

        The blob must already be large enough, otherwise
        CapacityExceededError is raised and nothing is written. Returns the
        padded length in bytes. An empty payload writes nothing and returns 0.
        """
        check_non_negative("start_page", start_page)
        check_max_pages_per_round_trip(max_pages_per_round_trip)

        payload = pad_to_page_boundary(payload)
        if not payload:
            return 0

        required = pages_needed_after_append(start_page, len(payload))
        available = await self.get_available_pages_amount()
        if required > available:
            raise CapacityExceededError(required, available)

        return await write_pages(
            self._write_round, start_page, max_pages_per_round_trip, payload
        )

    async def auto_resize_and_save_pages(
        self,
        start_page: int,
        max_pages_per_round_trip: int,
        payload: bytes,
        resize_ratio: int,
    ) -> int:
        """
        Like save_pages, but first grows the blob to a multiple of
        resize_ratio pages when the write would not fit.
        """
        check_non_negative("start_page", start_page)
        check_max_pages_per_round_trip(max_pages_per_round_trip)
        if resize_ratio < 1:
            raise InvalidArgumentError(
                f"Resize ratio must be at least 1, got {resize_ratio}"
            )

        payload = pad_to_page_boundary(payload)
        if not payload:
            return 0

        required = pages_needed_after_append(start_page, len(payload))
        available = await self.get_available_pages_amount()

        if required > available:
            target = grow_target(required, resize_ratio)
            logger.debug(
                "%s/%s. Required size: %d. Current size: %d. Resizing to %d",
                self._container_name,
                self._blob_name,
                required,
                available,
                target,
            )
            await self.resize(target)

        return await self.save_pages(start_page, max_pages_per_round_trip, payload)

    async def delete(self) -> None:
        await self.backend.delete_blob(self._container_name, self._blob_name)
        self._size_cache.clear()

    async def delete_if_exists(self) -> None:
        await self.backend.delete_blob_if_exists(
            self._container_name, self._blob_name
        )
        self._size_cache.clear()

    async def download(self) -> bytes:
        """Read the whole blob as the backend reports it; the size cache is not consulted."""
        return await self.backend.download_blob(
            self._container_name, self._blob_name
        )

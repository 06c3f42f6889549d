from dataclasses import dataclass, field

from .errors import BlobNotFoundError, ContainerNotFoundError, PageRangeError
from .page_blob import AsyncPageBlob
from .page_utils import PAGE_SIZE, check_non_negative, check_page_aligned
from .storage_protocols import AsyncPageBlobBackend, BlobProperties

EMPTY_PAGE = bytes(PAGE_SIZE)


@dataclass
class _MemoryBlob:
    pages: list[bytes] = field(default_factory=list)
    version: int = 0

    def resize(self, pages_amount: int) -> None:
        if pages_amount < len(self.pages):
            del self.pages[pages_amount:]
        else:
            self.pages.extend(EMPTY_PAGE for _ in range(pages_amount - len(self.pages)))
        self.version += 1

    def properties(self) -> BlobProperties:
        return BlobProperties(
            byte_size=len(self.pages) * PAGE_SIZE, etag=f'"{self.version}"'
        )


class InMemoryPageBlobAdapter(AsyncPageBlobBackend):
    """
    Page blob backend kept entirely in memory.

    Mirrors the existence rules of the remote service: a container must be
    created before any blob in it, and the container check always comes first.
    """

    def __init__(self) -> None:
        self._containers: dict[str, dict[str, _MemoryBlob]] = {}

    async def __aenter__(self) -> "InMemoryPageBlobAdapter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def container_exists(self, container_name: str) -> bool:
        return container_name in self._containers

    def blob_exists(self, container_name: str, blob_name: str) -> bool:
        return blob_name in self._containers.get(container_name, {})

    def page_list(self, container_name: str, blob_name: str) -> list[bytes]:
        blob = self._containers.get(container_name, {}).get(blob_name)
        return list(blob.pages) if blob is not None else []

    def _get_container(self, container_name: str) -> dict[str, _MemoryBlob]:
        try:
            return self._containers[container_name]
        except KeyError:
            raise ContainerNotFoundError(f"Container '{container_name}' not found")

    def _get_blob(self, container_name: str, blob_name: str) -> _MemoryBlob:
        blobs = self._get_container(container_name)
        try:
            return blobs[blob_name]
        except KeyError:
            raise BlobNotFoundError(
                f"Blob '{container_name}/{blob_name}' not found"
            )

    @staticmethod
    def _check_range(blob: _MemoryBlob, start_page: int, pages_amount: int) -> None:
        if start_page + pages_amount > len(blob.pages):
            raise PageRangeError(
                f"Pages {start_page}..{start_page + pages_amount} are outside "
                f"a blob of {len(blob.pages)} pages"
            )

    async def create_container_if_not_exist(self, container_name: str) -> None:
        self._containers.setdefault(container_name, {})

    async def get_blob_properties(
        self, container_name: str, blob_name: str
    ) -> BlobProperties:
        return self._get_blob(container_name, blob_name).properties()

    async def create_page_blob(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> None:
        check_non_negative("pages_amount", pages_amount)
        blobs = self._get_container(container_name)
        blob = _MemoryBlob()
        blob.resize(pages_amount)
        blobs[blob_name] = blob

    async def create_page_blob_if_not_exists(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> BlobProperties:
        blobs = self._get_container(container_name)
        if blob_name not in blobs:
            await self.create_page_blob(container_name, blob_name, pages_amount)
        return blobs[blob_name].properties()

    async def resize_page_blob(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> None:
        check_non_negative("pages_amount", pages_amount)
        self._get_blob(container_name, blob_name).resize(pages_amount)

    async def get_pages(
        self, container_name: str, blob_name: str, start_page: int, pages_amount: int
    ) -> bytes:
        check_non_negative("start_page", start_page)
        check_non_negative("pages_amount", pages_amount)
        blob = self._get_blob(container_name, blob_name)
        self._check_range(blob, start_page, pages_amount)
        return b"".join(blob.pages[start_page : start_page + pages_amount])

    async def save_pages(
        self, container_name: str, blob_name: str, start_page: int, payload: bytes
    ) -> None:
        check_non_negative("start_page", start_page)
        check_page_aligned(payload)
        blob = self._get_blob(container_name, blob_name)
        pages_amount = len(payload) // PAGE_SIZE
        self._check_range(blob, start_page, pages_amount)

        for i in range(pages_amount):
            offset = i * PAGE_SIZE
            blob.pages[start_page + i] = bytes(payload[offset : offset + PAGE_SIZE])
        blob.version += 1

    async def delete_blob(self, container_name: str, blob_name: str) -> None:
        self._get_blob(container_name, blob_name)
        del self._containers[container_name][blob_name]

    async def delete_blob_if_exists(self, container_name: str, blob_name: str) -> None:
        self._containers.get(container_name, {}).pop(blob_name, None)

    async def download_blob(self, container_name: str, blob_name: str) -> bytes:
        return b"".join(self._get_blob(container_name, blob_name).pages)

    async def close(self) -> None:
        pass


class MockPageBlob(AsyncPageBlob):
    """
    A page blob backed by its own private in-memory store.

    Starts with neither container nor blob created. The state can be
    inspected through container_created, blob_created and pages.
    """

    def __init__(
        self, container_name: str = "mock-container", blob_name: str = "mock-blob"
    ) -> None:
        super().__init__(InMemoryPageBlobAdapter(), container_name, blob_name)

    @property
    def container_created(self) -> bool:
        return self.backend.container_exists(self.container_name)

    @property
    def blob_created(self) -> bool:
        return self.backend.blob_exists(self.container_name, self.blob_name)

    @property
    def pages(self) -> list[bytes]:
        return self.backend.page_list(self.container_name, self.blob_name)

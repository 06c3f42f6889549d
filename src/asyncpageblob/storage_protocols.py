from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass
class BlobProperties:
    byte_size: int
    etag: str | None = None
    last_modified: datetime | None = None


class AsyncPageBlobBackend(Protocol):
    """Protocol for a page blob storage backend."""

    async def create_container_if_not_exist(self, container_name: str) -> None:
        """Create the container unless it already exists."""
        ...

    async def get_blob_properties(
        self, container_name: str, blob_name: str
    ) -> BlobProperties:
        """Return blob size and metadata."""
        ...

    async def create_page_blob(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> None:
        """Create (or overwrite) a zero-filled page blob."""
        ...

    async def create_page_blob_if_not_exists(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> BlobProperties:
        """Create the page blob unless present; return the resulting properties."""
        ...

    async def resize_page_blob(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> None:
        """Truncate or zero-extend the blob to pages_amount pages."""
        ...

    async def get_pages(
        self, container_name: str, blob_name: str, start_page: int, pages_amount: int
    ) -> bytes:
        """Read pages_amount pages starting at start_page."""
        ...

    async def save_pages(
        self, container_name: str, blob_name: str, start_page: int, payload: bytes
    ) -> None:
        """Write a page-aligned payload at start_page."""
        ...

    async def delete_blob(self, container_name: str, blob_name: str) -> None:
        """Delete blob."""
        ...

    async def delete_blob_if_exists(self, container_name: str, blob_name: str) -> None:
        """Delete blob, ignoring a missing blob."""
        ...

    async def download_blob(self, container_name: str, blob_name: str) -> bytes:
        """Download blob contents as bytes."""
        ...

    async def close(self) -> None:
        """Close any resources/connections."""
        ...


class AsyncPageBlobHandle(Protocol):
    """Represents a single page blob in storage."""

    @property
    def container_name(self) -> str: ...

    @property
    def blob_name(self) -> str: ...

    async def create_container_if_not_exist(self) -> None: ...

    async def create(self, pages_amount: int) -> None: ...

    async def create_if_not_exists(self, pages_amount: int) -> None: ...

    async def get_available_pages_amount(self) -> int: ...

    async def resize(self, pages_amount: int) -> None: ...

    async def get(self, start_page: int, pages_amount: int) -> bytes: ...

    async def save_pages(
        self, start_page: int, max_pages_per_round_trip: int, payload: bytes
    ) -> int: ...

    async def auto_resize_and_save_pages(
        self,
        start_page: int,
        max_pages_per_round_trip: int,
        payload: bytes,
        resize_ratio: int,
    ) -> int: ...

    async def delete(self) -> None: ...

    async def delete_if_exists(self) -> None: ...

    async def download(self) -> bytes: ...

    async def get_blob_properties(self) -> BlobProperties: ...

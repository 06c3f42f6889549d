"""
asyncpageblob
=============

Async page blob storage: fixed 512-byte pages on Azure Blob Storage, with
an in-memory backend that behaves the same way for tests.

Main entry points:
- AsyncPageBlob: a blob handle with page count caching, chunked writes and auto-resize
- AzurePageBlobAdapter, InMemoryPageBlobAdapter: storage backends
- MockPageBlob: a blob handle with its own in-memory backend
- pad_to_page_boundary, pages_needed_after_append, grow_target: page arithmetic
- ContainerNotFoundError, BlobNotFoundError, CapacityExceededError, ...: exceptions

Example:
    from asyncpageblob import AsyncPageBlob, AzurePageBlobAdapter

    async with AzurePageBlobAdapter.from_connection_string(conn_str) as adapter:
        blob = AsyncPageBlob(adapter, "container", "journal")
        await blob.create_container_if_not_exist()
        await blob.create_if_not_exists(0)
        await blob.auto_resize_and_save_pages(0, 8, b"hello", resize_ratio=16)
"""

from .errors import (
    BackendError,
    BlobNotFoundError,
    CapacityExceededError,
    ContainerNotFoundError,
    InvalidArgumentError,
    PageBlobError,
    PageRangeError,
)
from .page_utils import (
    PAGE_SIZE,
    get_full_pages_size,
    grow_target,
    pad_to_page_boundary,
    pages_needed_after_append,
)
from .page_writer import write_pages
from .page_blob import AsyncPageBlob, PageCountCache
from .storage_protocols import (
    AsyncPageBlobBackend,
    AsyncPageBlobHandle,
    BlobProperties,
)
from .memory_adapter import InMemoryPageBlobAdapter, MockPageBlob
from .azure_page_blob_adapter import AzurePageBlobAdapter

import importlib.metadata

try:
    __version__ = importlib.metadata.version(__name__)
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AsyncPageBlob",
    "PageCountCache",
    "MockPageBlob",
    "AsyncPageBlobBackend",
    "AsyncPageBlobHandle",
    "BlobProperties",
    "InMemoryPageBlobAdapter",
    "AzurePageBlobAdapter",
    "PAGE_SIZE",
    "get_full_pages_size",
    "pad_to_page_boundary",
    "pages_needed_after_append",
    "grow_target",
    "write_pages",
    "PageBlobError",
    "ContainerNotFoundError",
    "BlobNotFoundError",
    "CapacityExceededError",
    "InvalidArgumentError",
    "BackendError",
    "PageRangeError",
]

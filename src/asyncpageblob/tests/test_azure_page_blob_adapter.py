from typing import Any

import pytest
from azure.core import MatchConditions
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceNotFoundError,
)

from asyncpageblob import (
    PAGE_SIZE,
    AsyncPageBlob,
    AzurePageBlobAdapter,
    BackendError,
    BlobNotFoundError,
    ContainerNotFoundError,
    PageRangeError,
)


def not_found(code: str) -> ResourceNotFoundError:
    err = ResourceNotFoundError(message=f"{code}: the resource does not exist")
    err.error_code = code
    return err


def http_error(status_code: int, code: str) -> HttpResponseError:
    err = HttpResponseError(message=code)
    err.status_code = status_code
    err.error_code = code
    return err


class FakeDownload:
    def __init__(self, data: bytes) -> None:
        self._data = data

    async def readall(self) -> bytes:
        return self._data


class FakeProperties:
    def __init__(self, size: int) -> None:
        self.size = size
        self.etag = '"0x1"'
        self.last_modified = None


class FakeBlobClient:
    def __init__(self, service: "FakeServiceClient", container: str, name: str) -> None:
        self._service = service
        self._container = container
        self._name = name

    def _check(self) -> bytearray:
        if self._container not in self._service.containers:
            raise not_found("ContainerNotFound")
        blobs = self._service.containers[self._container]
        if self._name not in blobs:
            raise not_found("BlobNotFound")
        return blobs[self._name]

    async def create_page_blob(self, size: int, **kwargs: Any) -> dict:
        self._service.calls.append(("create_page_blob", size, kwargs))
        if self._container not in self._service.containers:
            raise not_found("ContainerNotFound")
        blobs = self._service.containers[self._container]
        if kwargs.get("match_condition") == MatchConditions.IfMissing and self._name in blobs:
            raise ResourceExistsError(message="BlobAlreadyExists")
        blobs[self._name] = bytearray(size)
        return {"etag": '"0x2"', "last_modified": None}

    async def get_blob_properties(self) -> FakeProperties:
        return FakeProperties(len(self._check()))

    async def resize_blob(self, size: int) -> None:
        data = self._check()
        del data[size:]
        data.extend(bytes(size - len(data)))

    async def upload_page(self, page: bytes, offset: int, length: int) -> None:
        self._service.calls.append(("upload_page", offset, length))
        data = self._check()
        if offset + length > len(data):
            raise http_error(416, "InvalidPageRange")
        data[offset : offset + length] = page

    async def download_blob(self, offset: int | None = None, length: int | None = None):
        data = self._check()
        if offset is None:
            return FakeDownload(bytes(data))
        if offset >= len(data):
            raise http_error(416, "InvalidRange")
        return FakeDownload(bytes(data[offset : offset + length]))

    async def delete_blob(self) -> None:
        self._check()
        del self._service.containers[self._container][self._name]


class FakeContainerClient:
    def __init__(self, service: "FakeServiceClient", container: str) -> None:
        self._service = service
        self._container = container

    async def create_container(self) -> None:
        if self._container in self._service.containers:
            raise ResourceExistsError(message="ContainerAlreadyExists")
        self._service.containers[self._container] = {}


class FakeServiceClient:
    def __init__(self) -> None:
        self.containers: dict[str, dict[str, bytearray]] = {}
        self.calls: list[tuple] = []
        self.closed = False

    def get_container_client(self, container: str) -> FakeContainerClient:
        return FakeContainerClient(self, container)

    def get_blob_client(self, container: str, blob: str) -> FakeBlobClient:
        return FakeBlobClient(self, container, blob)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def service():
    return FakeServiceClient()


@pytest.fixture
def blob(service):
    return AsyncPageBlob(AzurePageBlobAdapter(service), "pages", "journal")


@pytest.mark.asyncio
async def test_sizes_are_sent_in_bytes(blob, service):
    await blob.create_container_if_not_exist()
    await blob.create_container_if_not_exist()
    await blob.create(3)
    await blob.save_pages(1, 8, b"abc")

    assert ("create_page_blob", 3 * PAGE_SIZE, {}) in service.calls
    assert ("upload_page", PAGE_SIZE, PAGE_SIZE) in service.calls
    assert (await blob.get(1, 1))[:3] == b"abc"


@pytest.mark.asyncio
async def test_chunked_upload_offsets(blob, service):
    await blob.create_container_if_not_exist()
    await blob.create(8)

    await blob.save_pages(2, 2, bytes(5 * PAGE_SIZE))

    uploads = [call for call in service.calls if call[0] == "upload_page"]
    assert uploads == [
        ("upload_page", 2 * PAGE_SIZE, 2 * PAGE_SIZE),
        ("upload_page", 4 * PAGE_SIZE, 2 * PAGE_SIZE),
        ("upload_page", 6 * PAGE_SIZE, PAGE_SIZE),
    ]


@pytest.mark.asyncio
async def test_create_if_not_exists_reads_existing_size(blob, service):
    await blob.create_container_if_not_exist()
    await blob.create(2)

    await blob.create_if_not_exists(6)

    assert blob.cached_page_count == 2
    assert len(service.containers["pages"]["journal"]) == 2 * PAGE_SIZE


@pytest.mark.asyncio
async def test_create_if_not_exists_new_blob(blob):
    await blob.create_container_if_not_exist()

    await blob.create_if_not_exists(6)

    assert blob.cached_page_count == 6


@pytest.mark.asyncio
async def test_not_found_errors_are_translated(blob):
    with pytest.raises(ContainerNotFoundError):
        await blob.create(1)

    await blob.create_container_if_not_exist()
    with pytest.raises(BlobNotFoundError) as excinfo:
        await blob.get_available_pages_amount()
    assert isinstance(excinfo.value.__cause__, ResourceNotFoundError)

    with pytest.raises(BlobNotFoundError):
        await blob.delete()
    with pytest.raises(BlobNotFoundError):
        await blob.download()
    with pytest.raises(BlobNotFoundError):
        await blob.get(0, 0)


@pytest.mark.asyncio
async def test_delete_if_exists_swallows_not_found(blob, service):
    await blob.delete_if_exists()

    await blob.create_container_if_not_exist()
    await blob.delete_if_exists()
    await blob.create(1)
    await blob.delete_if_exists()

    assert service.containers["pages"] == {}
    assert blob.cached_page_count is None


@pytest.mark.asyncio
async def test_out_of_range_reads(blob):
    await blob.create_container_if_not_exist()
    await blob.create(2)

    with pytest.raises(PageRangeError):
        await blob.get(5, 1)
    # The service answers a range running past the end with the bytes it has
    with pytest.raises(PageRangeError):
        await blob.get(1, 2)


@pytest.mark.asyncio
async def test_out_of_range_write_is_a_backend_error(blob):
    await blob.create_container_if_not_exist()
    await blob.create(2)

    with pytest.raises(BackendError):
        await blob.backend.save_pages("pages", "journal", 2, bytes(PAGE_SIZE))


@pytest.mark.asyncio
async def test_other_service_errors_pass_through(blob, monkeypatch):
    async def forbidden(self, *args, **kwargs):
        raise http_error(403, "AuthorizationFailure")

    monkeypatch.setattr(FakeBlobClient, "resize_blob", forbidden)
    await blob.create_container_if_not_exist()
    await blob.create(1)

    with pytest.raises(BackendError) as excinfo:
        await blob.resize(4)

    assert not isinstance(excinfo.value, PageRangeError)
    assert excinfo.value.__cause__.status_code == 403
    assert blob.cached_page_count == 1


@pytest.mark.asyncio
async def test_adapter_closes_client(service):
    async with AzurePageBlobAdapter(service):
        pass

    assert service.closed

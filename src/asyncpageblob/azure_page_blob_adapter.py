import logging

from azure.core import MatchConditions
from azure.core.exceptions import (
    HttpResponseError,
    ResourceExistsError,
    ResourceModifiedError,
    ResourceNotFoundError,
)
from azure.storage.blob.aio import BlobClient, BlobServiceClient

from .errors import (
    BackendError,
    BlobNotFoundError,
    ContainerNotFoundError,
    PageBlobError,
    PageRangeError,
)
from .page_utils import PAGE_SIZE, check_page_aligned
from .storage_protocols import AsyncPageBlobBackend, BlobProperties

logger = logging.getLogger(__name__)

_RANGE_ERROR_CODES = {"InvalidPageRange", "InvalidRange"}


def _translate_error(
    e: HttpResponseError, container_name: str, blob_name: str | None = None
) -> PageBlobError:
    code = getattr(e, "error_code", None)
    target = container_name if blob_name is None else f"{container_name}/{blob_name}"
    if isinstance(e, ResourceNotFoundError):
        if code == "ContainerNotFound" or blob_name is None:
            return ContainerNotFoundError(f"Container '{container_name}' not found")
        return BlobNotFoundError(f"Blob '{container_name}/{blob_name}' not found")
    if code in _RANGE_ERROR_CODES or getattr(e, "status_code", None) == 416:
        return PageRangeError(
            f"Page range is outside blob '{target}': {e.message}"
        )
    return BackendError(f"Storage request failed for '{target}': {e}")


def _to_properties(props) -> BlobProperties:
    return BlobProperties(
        byte_size=props.size, etag=props.etag, last_modified=props.last_modified
    )


class AzurePageBlobAdapter(AsyncPageBlobBackend):
    """Azure Blob Storage page blob backend."""

    def __init__(self, blob_service_client: BlobServiceClient):
        """
        Create an adapter from an existing BlobServiceClient.
        This allows custom authentication, retry policy and transport.
        """
        self._client = blob_service_client

    @classmethod
    def from_connection_string(cls, connection_string: str) -> "AzurePageBlobAdapter":
        """
        Convenience builder: create adapter from a connection string.
        """
        client = BlobServiceClient.from_connection_string(connection_string)
        return cls(client)

    async def __aenter__(self) -> "AzurePageBlobAdapter":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _blob_client(self, container_name: str, blob_name: str) -> BlobClient:
        return self._client.get_blob_client(container_name, blob_name)

    async def create_container_if_not_exist(self, container_name: str) -> None:
        container_client = self._client.get_container_client(container_name)
        try:
            await container_client.create_container()
        except ResourceExistsError:
            pass
        except HttpResponseError as e:
            raise _translate_error(e, container_name) from e

    async def get_blob_properties(
        self, container_name: str, blob_name: str
    ) -> BlobProperties:
        try:
            props = await self._blob_client(
                container_name, blob_name
            ).get_blob_properties()
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e
        return _to_properties(props)

    async def create_page_blob(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> None:
        try:
            await self._blob_client(container_name, blob_name).create_page_blob(
                size=pages_amount * PAGE_SIZE
            )
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

    async def create_page_blob_if_not_exists(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> BlobProperties:
        try:
            response = await self._blob_client(
                container_name, blob_name
            ).create_page_blob(
                size=pages_amount * PAGE_SIZE, match_condition=MatchConditions.IfMissing
            )
        except (ResourceExistsError, ResourceModifiedError):
            logger.debug("Page blob %s/%s already exists", container_name, blob_name)
            return await self.get_blob_properties(container_name, blob_name)
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

        return BlobProperties(
            byte_size=pages_amount * PAGE_SIZE,
            etag=response.get("etag"),
            last_modified=response.get("last_modified"),
        )

    async def resize_page_blob(
        self, container_name: str, blob_name: str, pages_amount: int
    ) -> None:
        try:
            await self._blob_client(container_name, blob_name).resize_blob(
                pages_amount * PAGE_SIZE
            )
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

    async def get_pages(
        self, container_name: str, blob_name: str, start_page: int, pages_amount: int
    ) -> bytes:
        if pages_amount == 0:
            # A zero-length range can not be expressed as a Range header.
            await self.get_blob_properties(container_name, blob_name)
            return b""
        try:
            stream = await self._blob_client(container_name, blob_name).download_blob(
                offset=start_page * PAGE_SIZE, length=pages_amount * PAGE_SIZE
            )
            data = await stream.readall()
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

        if len(data) != pages_amount * PAGE_SIZE:
            raise PageRangeError(
                f"Requested {pages_amount} pages from page {start_page} of "
                f"'{container_name}/{blob_name}' but got {len(data)} bytes"
            )
        return data

    async def save_pages(
        self, container_name: str, blob_name: str, start_page: int, payload: bytes
    ) -> None:
        check_page_aligned(payload)
        try:
            await self._blob_client(container_name, blob_name).upload_page(
                payload, offset=start_page * PAGE_SIZE, length=len(payload)
            )
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

    async def delete_blob(self, container_name: str, blob_name: str) -> None:
        try:
            await self._blob_client(container_name, blob_name).delete_blob()
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

    async def delete_blob_if_exists(self, container_name: str, blob_name: str) -> None:
        try:
            await self.delete_blob(container_name, blob_name)
        except (ContainerNotFoundError, BlobNotFoundError):
            logger.debug("Page blob %s/%s does not exist", container_name, blob_name)

    async def download_blob(self, container_name: str, blob_name: str) -> bytes:
        try:
            stream = await self._blob_client(container_name, blob_name).download_blob()
            return await stream.readall()
        except HttpResponseError as e:
            raise _translate_error(e, container_name, blob_name) from e

    async def close(self) -> None:
        await self._client.close()

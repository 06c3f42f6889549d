class PageBlobError(Exception):
    """Base class for all page blob errors."""

    pass


class ContainerNotFoundError(PageBlobError):
    """Raised when the blob's container does not exist."""

    pass


class BlobNotFoundError(PageBlobError):
    """Raised when a requested blob does not exist."""

    pass


class InvalidArgumentError(PageBlobError, ValueError):
    """Raised for malformed inputs such as a zero resize ratio."""

    pass


class CapacityExceededError(PageBlobError):
    """Raised when a write would run past the end of the blob."""

    def __init__(self, required_pages: int, available_pages: int) -> None:
        self.required_pages = required_pages
        self.available_pages = available_pages
        super().__init__(
            f"Can not save pages. Requires blob with the pages amount: {required_pages}. "
            f"Available pages amount is: {available_pages}"
        )


class BackendError(PageBlobError):
    """Raised for any other failure reported by the storage backend."""

    pass


class PageRangeError(BackendError):
    """Raised when a page range falls outside the blob."""

    pass

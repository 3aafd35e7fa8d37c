"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InventoryFetchError(ApplicationError):
    """Raised when identifiers cannot be retrieved from the inventory service."""


class OutputWriteError(ApplicationError):
    """Raised when shard output cannot be rendered or written."""

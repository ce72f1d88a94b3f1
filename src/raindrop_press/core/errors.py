"""Error kinds raised by the sync pipeline and its adapters."""

from typing import Any, Optional


class SyncError(Exception):
    """Base class for pipeline errors.

    Args:
        message: Human-readable description
        cause: Underlying exception, if any
        status: HTTP status code of the failed call, if any
    """

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.status = status
        if cause is not None:
            self.__cause__ = cause


class FetchError(SyncError):
    """Bookmarks could not be fetched from the bookmarking service."""


class PublishError(SyncError):
    """A post could not be created on the blog."""

    def __init__(
        self,
        message: str,
        cause: Optional[BaseException] = None,
        status: Optional[int] = None,
        code: Optional[str] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message, cause=cause, status=status)
        self.code = code
        self.data = data


class StoreError(SyncError):
    """The state store could not be read or written."""


class RenderError(SyncError):
    """Post content could not be built."""


class ConfigError(Exception):
    """Configuration is missing or invalid."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.field = field

"""Error taxonomy for the catalog engine."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure categories surfaced by the engine."""

    NETWORK = "network"
    CACHE = "cache"
    VALIDATION = "validation"


class CatalogError(Exception):
    """Base class for catalog failures.

    Attributes:
        kind: Failure category
        message: Human-readable description, safe to show in the UI
    """

    kind: ErrorKind = ErrorKind.NETWORK

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class NetworkError(CatalogError):
    """Request failed, timed out, or returned a non-2xx status."""

    kind = ErrorKind.NETWORK

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class CacheError(CatalogError):
    """Serialization or storage backend failure. Never reaches the UI."""

    kind = ErrorKind.CACHE


class ValidationError(CatalogError):
    """Remote payload is missing required fields or has the wrong shape."""

    kind = ErrorKind.VALIDATION

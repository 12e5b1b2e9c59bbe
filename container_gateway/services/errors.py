"""
Service layer exceptions.

Every failure carries an ErrorKind. Only TRANSIENT failures are retried by
the ServiceClient; everything else stops the call immediately.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Retry classification of a failed upstream call."""

    PERMANENT = "Permanent"
    TRANSIENT = "Transient"


class ServiceError(Exception):
    """Base exception for service layer errors."""

    kind: ErrorKind = ErrorKind.PERMANENT

    def __init__(
        self,
        message: str,
        service_id: str | None = None,
        kind: ErrorKind | None = None,
    ):
        self.message = message
        self.service_id = service_id
        if kind is not None:
            self.kind = kind
        super().__init__(message)

    @property
    def is_transient(self) -> bool:
        return self.kind == ErrorKind.TRANSIENT

    def __str__(self) -> str:
        return f"(kind: {self.kind.value}, message: {self.message})"


class ResourceNotFoundError(ServiceError):
    """Upstream answered 404."""

    def __init__(self, service_id: str | None = None):
        super().__init__("Resource not found", service_id=service_id)


class UpstreamServerError(ServiceError):
    """Upstream answered 500. The only retryable failure."""

    kind = ErrorKind.TRANSIENT

    def __init__(self, service_id: str | None = None):
        super().__init__("Internal server error", service_id=service_id)


class UnexpectedStatusError(ServiceError):
    """Upstream answered with a status that is neither 200, 404 nor 500."""

    def __init__(self, status_code: int, service_id: str | None = None):
        self.status_code = status_code
        super().__init__(
            f"Unexpected error (HTTP {status_code})", service_id=service_id
        )


class RequestTimeoutError(ServiceError):
    """Request timed out."""

    def __init__(self, service_id: str | None, timeout: float | None):
        self.timeout = timeout
        super().__init__(
            f"Request to service '{service_id}' timed out after {timeout}s",
            service_id=service_id,
        )


class TransportError(ServiceError):
    """Connection, DNS or protocol failure before a response was received."""

    pass


class DecodeError(ServiceError):
    """Response body did not match the expected shape."""

    pass

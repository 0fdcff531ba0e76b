from typing import Any, Mapping, Optional


class ServiceError(Exception):
    """Base class for errors raised by the service layer.

    Attributes:
        message: human-readable message
        details: optional mapping with extra context (field errors, validation info)
        code: optional machine-readable error code
        http_status: suggested HTTP status code for handlers
    """

    http_status = 500
    default_message = "Service error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Mapping[str, Any]] = None,
        code: Optional[str] = None,
    ):
        message = message or self.default_message
        super().__init__(message)
        self.message = message
        self.details = details
        self.code = code

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {"message": self.message}
        if self.code:
            payload["code"] = self.code
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return self.message


class ServiceValidationError(ServiceError):
    """Raised when input data is invalid or a precondition for a service call is not met.

    ``details`` maps a field name to the list of messages for that field.
    """

    http_status = 400
    default_message = "Invalid input"


class NotFoundError(ServiceError):
    """Raised when a requested resource was not found (or is hidden from the caller)."""

    http_status = 404
    default_message = "Not found"


class ConflictError(ServiceError):
    """Raised when a resource conflict occurs (e.g., duplicate dining table)."""

    http_status = 409
    default_message = "Conflict"


class UnprocessableEntityError(ServiceError):
    """Raised when a request is well-formed but collides with existing state
    (e.g., a second size/cost row with the same size for one meal)."""

    http_status = 422
    default_message = "Unprocessable entity"


class InternalServiceError(ServiceError):
    """Raised when an asset or transaction step fails."""

    http_status = 500
    default_message = "Internal error"


class UnauthorizedError(ServiceError):
    """Raised when authentication or authorization fails."""

    http_status = 401
    default_message = "Unauthorized"

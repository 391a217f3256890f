from typing import Any, Optional


class ServiceError(Exception):
    """Business-rule failure carrying the envelope error code and HTTP status."""

    code = "internal_error"
    status_code = 500

    def __init__(self, message: str, details: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ServiceError):
    code = "validation_error"
    status_code = 400


class ForbiddenError(ServiceError):
    code = "forbidden"
    status_code = 403


class NotFoundError(ServiceError):
    code = "not_found"
    status_code = 404


class ConflictError(ServiceError):
    code = "conflict"
    status_code = 409

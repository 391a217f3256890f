from fastapi import status
from .base import build_response


def validation_error(error: str = "Invalid input data", details=None):
    return build_response(
        status.HTTP_400_BAD_REQUEST,
        False,
        error="validation_error",
        message=error,
        details=details,
    )


def conflict_error(error: str = "Resource already exists"):
    return build_response(
        status.HTTP_409_CONFLICT,
        False,
        error="conflict",
        message=error,
    )


def unauthorized_error(error: str = "Authentication required"):
    return build_response(
        status.HTTP_401_UNAUTHORIZED,
        False,
        error="unauthorized",
        message=error,
    )


def invalid_credentials_error(error: str = "Invalid credentials"):
    return build_response(
        status.HTTP_401_UNAUTHORIZED,
        False,
        error="invalid_credentials",
        message=error,
    )


def internal_server_error(error: str = "Internal server error"):
    return build_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        False,
        error="internal_error",
        message=error,
    )


# HTTP status -> error code, used when translating framework exceptions
STATUS_ERROR_CODES = {
    status.HTTP_400_BAD_REQUEST: "validation_error",
    status.HTTP_401_UNAUTHORIZED: "unauthorized",
    status.HTTP_403_FORBIDDEN: "forbidden",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "validation_error",
    status.HTTP_409_CONFLICT: "conflict",
    422: "validation_error",
}


def error_from_status(status_code: int, message: str = None, details=None):
    return build_response(
        status_code,
        False,
        error=STATUS_ERROR_CODES.get(status_code, "internal_error"),
        message=message,
        details=details,
    )


def service_error(exc):
    """Translate a services.errors.ServiceError into its error envelope."""
    return build_response(
        exc.status_code,
        False,
        error=exc.code,
        message=exc.message,
        details=exc.details,
    )

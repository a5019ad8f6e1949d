"""
Custom exceptions and error handlers for consistent error responses.

Provides standardized error codes and global exception handlers.
"""

import logging
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from typing import Any, Dict

logger = logging.getLogger("zapshift")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class InsufficientPermissionsError(AppException):
    """Raised when user doesn't have permission to perform an action."""

    def __init__(self, message: str = "Insufficient permissions", details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_PERM_001",
            status_code=status.HTTP_403_FORBIDDEN,
            details=details
        )


class ResourceNotFoundError(AppException):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource, "id": resource_id}
        )


class AuthenticationError(AppException):
    """Raised for authentication failures."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class DuplicateResourceError(AppException):
    """Raised when a unique record already exists."""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            message=message,
            error_code="ERR_DUPLICATE_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class InvalidTransitionError(AppException):
    """Raised when a parcel cannot move from its current status to the requested one."""

    def __init__(self, current: str, requested: str, reason: str = None):
        message = f"Cannot move parcel from '{current}' to '{requested}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(
            message=message,
            error_code="ERR_PARCEL_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"current_status": current, "requested_status": requested}
        )


class ParcelNotAssignableError(AppException):
    """Raised when a parcel is no longer waiting for a rider."""

    def __init__(self, parcel_id: int, current: str):
        super().__init__(
            message=f"Parcel {parcel_id} cannot be assigned, current status: {current}",
            error_code="ERR_PARCEL_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"parcel_id": parcel_id, "delivery_status": current}
        )


class RiderUnavailableError(AppException):
    """Raised when a rider is not approved or is busy with another delivery."""

    def __init__(self, rider_id: int, reason: str):
        super().__init__(
            message=f"Rider {rider_id} is unavailable: {reason}",
            error_code="ERR_RIDER_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"rider_id": rider_id}
        )


class NotDeliveredError(AppException):
    """Raised on cash-out of a parcel that has not been delivered."""

    def __init__(self, parcel_id: int, current: str):
        super().__init__(
            message=f"Parcel {parcel_id} is not delivered yet, current status: {current}",
            error_code="ERR_CASHOUT_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"parcel_id": parcel_id, "delivery_status": current}
        )


class AlreadyPaidOutError(AppException):
    """Raised on a second cash-out of the same parcel."""

    def __init__(self, parcel_id: int):
        super().__init__(
            message=f"Parcel {parcel_id} has already been cashed out",
            error_code="ERR_CASHOUT_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"parcel_id": parcel_id}
        )


class ParcelAlreadyPaidError(AppException):
    """Raised when a payment is recorded for a parcel that is already paid."""

    def __init__(self, parcel_id: int):
        super().__init__(
            message=f"Parcel {parcel_id} is already paid",
            error_code="ERR_PAYMENT_001",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"parcel_id": parcel_id}
        )


class PaymentGatewayError(AppException):
    """Raised when the payment processor rejects or cannot serve a request."""

    def __init__(self, message: str = "Payment processor unavailable"):
        super().__init__(
            message=message,
            error_code="ERR_GATEWAY_001",
            status_code=status.HTTP_502_BAD_GATEWAY
        )


class StoreUnavailableError(AppException):
    """Raised when the entity store times out or refuses connections."""

    def __init__(self, message: str = "Data store is unavailable, try again later"):
        super().__init__(
            message=message,
            error_code="ERR_STORE_001",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        403: "ERR_FORBIDDEN",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        },
        headers=getattr(exc, "headers", None)
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_encoder(exc.errors())
            }
        }
    )


async def store_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for database driver failures and timeouts."""
    logger.error(
        "Store unavailable",
        extra={"path": request.url.path, "error": f"{type(exc).__name__}: {exc}"}
    )
    return await app_exception_handler(request, StoreUnavailableError())


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception: %s: %s", type(exc).__name__, exc)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )

from enum import Enum
from typing import Optional

from fastapi import HTTPException, status


class ErrorCode(str, Enum):
    # not-found
    NOT_FOUND = "NOT_FOUND"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"
    CATALOG_NOT_FOUND = "CATALOG_NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    HOTEL_NOT_FOUND = "HOTEL_NOT_FOUND"
    TRANSPORT_NOT_FOUND = "TRANSPORT_NOT_FOUND"
    FOOD_NOT_FOUND = "FOOD_NOT_FOUND"

    # conflict
    ALREADY_CANCELLED = "ALREADY_CANCELLED"
    PAYMENT_EXISTS = "PAYMENT_EXISTS"
    NOT_PENDING = "NOT_PENDING"
    CANCELLED_BOOKING = "CANCELLED_BOOKING"
    USERNAME_TAKEN = "USERNAME_TAKEN"
    EMAIL_TAKEN = "EMAIL_TAKEN"

    # validation
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    DATE_IN_PAST = "DATE_IN_PAST"
    INVALID_METHOD = "INVALID_METHOD"
    INVALID_STATUS = "INVALID_STATUS"
    NO_ITEMS_SPECIFIED = "NO_ITEMS_SPECIFIED"
    NO_PAYABLE_ITEMS = "NO_PAYABLE_ITEMS"

    # auth
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    ACCESS_DENIED = "ACCESS_DENIED"

    INTERNAL_ERROR = "INTERNAL_ERROR"


class AppException(HTTPException):
    """Expected, caller-recoverable failure with a machine-readable code."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal server error"

    def __init__(self, message: Optional[str] = None, code: Optional[ErrorCode] = None, headers: Optional[dict] = None):
        self.code = code or self.default_code
        self.message = message or self.default_message
        super().__init__(
            status_code=self.status_code,
            detail={"code": self.code.value, "message": self.message},
            headers=headers,
        )


class NotFoundException(AppException):
    status_code = status.HTTP_404_NOT_FOUND
    default_code = ErrorCode.NOT_FOUND
    default_message = "Resource not found"


class ConflictException(AppException):
    """State disallows the request. The code names which state."""
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict with current state"

    def __init__(self, message: Optional[str], code: ErrorCode, headers: Optional[dict] = None):
        super().__init__(message, code, headers)


class BadRequestException(AppException):
    """Malformed input. The code names which check failed."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"

    def __init__(self, message: Optional[str], code: ErrorCode, headers: Optional[dict] = None):
        super().__init__(message, code, headers)


class UnauthorizedException(AppException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = ErrorCode.INVALID_CREDENTIALS
    default_message = "Could not validate credentials"

    def __init__(self, message: Optional[str] = None, code: Optional[ErrorCode] = None):
        super().__init__(message, code, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenException(AppException):
    status_code = status.HTTP_403_FORBIDDEN
    default_code = ErrorCode.ACCESS_DENIED
    default_message = "Access denied"


class InternalServerException(AppException):
    """Opaque storage-layer failure, raised after the transaction was rolled back."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = ErrorCode.INTERNAL_ERROR
    default_message = "Internal server error"

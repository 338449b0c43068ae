"""Custom exception classes for Trade Journal API"""
from fastapi import HTTPException, status


class TradeJournalException(HTTPException):
    """Base exception with error_code support"""

    def __init__(self, error_code: str, message: str, status_code: int, details=None):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details


class ResourceNotFoundException(TradeJournalException):
    """Exception for when a resource is not found"""

    def __init__(self, resource: str, identifier: str = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(
            error_code="NOT_FOUND",
            message=message,
            status_code=status.HTTP_404_NOT_FOUND
        )


class InvalidInputException(TradeJournalException):
    """Exception for invalid input data"""

    def __init__(self, message: str, details=None):
        super().__init__(
            error_code="INVALID_INPUT",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class UnauthorizedException(TradeJournalException):
    """Exception for unauthorized access"""

    def __init__(self, message: str = "Unauthorized access"):
        super().__init__(
            error_code="UNAUTHORIZED",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class AlreadyExistsException(TradeJournalException):
    """Exception for duplicate resources"""

    def __init__(self, message: str):
        super().__init__(
            error_code="ALREADY_EXISTS",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST
        )

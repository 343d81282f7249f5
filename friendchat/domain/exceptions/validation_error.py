"""
DomainValidationError - Raised when input violates a business rule.
Maps to: HTTP 422 Unprocessable Entity
"""


class DomainValidationError(Exception):
    """Exception raised for domain validation errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyMessageError(DomainValidationError):
    """Message text is empty once trimmed."""

    def __init__(self, message: str = "Message text cannot be empty."):
        super().__init__(message)

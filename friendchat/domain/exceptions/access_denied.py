"""
AccessDeniedError - Raised when the access policy denies an action.
Maps to: HTTP 403 Forbidden
"""


class AccessDeniedError(Exception):
    """Raised when an account is not authorized to message or read a conversation"""

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)

"""
InvalidStateError - Raised when a friend-graph transition's precondition is violated.
Maps to: HTTP 409 Conflict
"""


class InvalidStateError(Exception):
    """Exception raised when an operation does not apply to the current pair state."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

"""
DOMAIN EXCEPTIONS - Business rule violations

These exceptions are raised by domain and application logic and caught by
the presentation layer, which maps them to HTTP status codes.
"""

from friendchat.domain.exceptions.entity_not_found import EntityNotFoundError
from friendchat.domain.exceptions.access_denied import AccessDeniedError
from friendchat.domain.exceptions.validation_error import (
    DomainValidationError,
    EmptyMessageError,
)
from friendchat.domain.exceptions.invalid_state import InvalidStateError
from friendchat.domain.exceptions.sync import (
    InconsistentFriendshipError,
    PartialSyncFailure,
)

__all__ = [
    "EntityNotFoundError",
    "AccessDeniedError",
    "DomainValidationError",
    "EmptyMessageError",
    "InvalidStateError",
    "InconsistentFriendshipError",
    "PartialSyncFailure",
]

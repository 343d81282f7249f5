"""Account commands."""

from .register_account import RegisterAccountCommand, RegisterAccountHandler
from .update_settings import UpdateAccountSettingsCommand, UpdateAccountSettingsHandler

__all__ = [
    "RegisterAccountCommand",
    "RegisterAccountHandler",
    "UpdateAccountSettingsCommand",
    "UpdateAccountSettingsHandler",
]

"""Use cases for managing users."""

from .push_tokens import clear_push_token, register_push_token, update_user_groups

__all__ = [
    "clear_push_token",
    "register_push_token",
    "update_user_groups",
]

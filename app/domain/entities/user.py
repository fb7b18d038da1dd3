"""Domain entity representing a festival app user."""

from dataclasses import dataclass, field
from datetime import datetime

ROLE_ADMIN = "admin"
ROLE_USER = "user"


@dataclass
class User:
    """Core attributes of a user relevant to push delivery."""

    id: str | None
    name: str
    email: str
    role: str = ROLE_USER
    push_token: str | None = None
    user_groups: list[str] = field(default_factory=list)
    created_at: datetime | None = None

    def has_role(self, alias: str) -> bool:
        """Return ``True`` when the user's role matches ``alias``."""

        return self.role.lower() == alias.lower()

    def is_admin(self) -> bool:
        """Return ``True`` when the user is an administrator."""

        return self.has_role(ROLE_ADMIN)

    def belongs_to_any(self, groups: set[str]) -> bool:
        return bool(groups.intersection(self.user_groups))

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

Role = Literal["student", "admin"]


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    ``roles`` are the platform roles the token was minted with.  The
    learner role used for progression is resolved separately (see
    ``course_view.resolve_role``) because the user profile wins over
    the token.
    """

    user_id: str
    roles: frozenset[str]

    def has_role(self, role: str) -> bool:
        return role in self.roles

    def is_platform_admin(self) -> bool:
        return "admin" in self.roles


@dataclass(frozen=True, slots=True)
class UserRole:
    """Role record returned by the user provider."""

    user_id: str
    is_admin: bool = False

    @property
    def role(self) -> Role:
        return "admin" if self.is_admin else "student"

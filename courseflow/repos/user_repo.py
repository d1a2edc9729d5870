from __future__ import annotations

from typing import Protocol

from courseflow.models.principal import UserRole


class UserRepo(Protocol):
    async def get_role(self, user_id: str) -> UserRole | None: ...


class InMemoryUserRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, UserRole] = {}

    async def get_role(self, user_id: str) -> UserRole | None:
        return self._by_id.get(user_id)

    def add(self, role: UserRole) -> None:
        self._by_id[role.user_id] = role

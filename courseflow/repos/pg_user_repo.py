"""PostgreSQL implementation of UserRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from courseflow.db.tables import UserRow
from courseflow.models.principal import UserRole


class PgUserRepo:
    """Satisfies the UserRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def get_role(self, user_id: str) -> UserRole | None:
        stmt = select(UserRow.roles).where(UserRow.id == user_id)
        async with self._sessions() as session:
            roles = (await session.execute(stmt)).scalar_one_or_none()
        if roles is None:
            return None
        return _roles_to_user_role(user_id, roles)


def _roles_to_user_role(user_id: str, roles: list[str]) -> UserRole:
    return UserRole(user_id=user_id, is_admin="admin" in roles)

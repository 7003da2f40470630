"""Persisted user profile repository.

Writers merge: ``merge`` only touches the fields it is given, so other
profile fields survive a location change. Reads after a merge observe it.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from smartdine.db.models.core import UserProfileRecord
from smartdine.domain.models import UserProfile
from smartdine.logging import logger


class ProfileStore(Protocol):
    async def get(self, user_id: int) -> UserProfile | None: ...

    async def merge(self, user_id: int, changes: dict[str, Any]) -> UserProfile: ...


class SessionSource(Protocol):
    def session(self) -> AbstractAsyncContextManager[AsyncSession]: ...


class InMemoryProfileStore:
    def __init__(self, profiles: dict[int, UserProfile] | None = None) -> None:
        self._profiles: dict[int, UserProfile] = dict(profiles or {})

    async def get(self, user_id: int) -> UserProfile | None:
        return self._profiles.get(user_id)

    async def merge(self, user_id: int, changes: dict[str, Any]) -> UserProfile:
        current = self._profiles.get(user_id) or UserProfile(id=user_id)
        updates = {key: value for key, value in changes.items() if key != "id"}
        merged = UserProfile.model_validate({**current.model_dump(), **updates})
        self._profiles[user_id] = merged
        return merged


class SqlProfileStore:
    """Profile slot stored in the ``user_profiles`` table."""

    def __init__(self, database: SessionSource) -> None:
        self._database = database

    async def get(self, user_id: int) -> UserProfile | None:
        async with self._database.session() as session:
            record = await session.get(UserProfileRecord, user_id)
            if record is None:
                return None
            return _to_profile(record)

    async def merge(self, user_id: int, changes: dict[str, Any]) -> UserProfile:
        async with self._database.session() as session:
            record = await session.get(UserProfileRecord, user_id)
            if record is None:
                record = UserProfileRecord(id=user_id)
                session.add(record)

            extra = dict(record.extra or {})
            for key, value in changes.items():
                if key == "id":
                    continue
                if key == "location":
                    record.location = value
                else:
                    extra[key] = value
            record.extra = extra or None
            await session.flush()
            profile = _to_profile(record)

        logger.info("profile_merged", user_id=user_id, fields=sorted(changes))
        return profile


def _to_profile(record: UserProfileRecord) -> UserProfile:
    return UserProfile(id=record.id, location=record.location, **(record.extra or {}))


__all__ = ["InMemoryProfileStore", "ProfileStore", "SessionSource", "SqlProfileStore"]

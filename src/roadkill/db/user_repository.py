"""
User Store

Persistence of identity users. Emails are matched case-insensitively through
the `normalized_email` column.
"""

from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.entities import Claim, User
from ..core.errors import NotFoundError
from .models import UserRecord
from .session import storage_errors


def normalize_email(email: str) -> str:
    return (email or "").strip().upper()


def _to_user(record: UserRecord) -> User:
    return User(
        id=record.id,
        email=record.email,
        user_name=record.user_name,
        password_hash=record.password_hash,
        email_confirmed=record.email_confirmed,
        claims=[Claim(type=c["type"], value=c["value"]) for c in record.claims or []],
        lockout_enabled=record.lockout_enabled,
        lockout_end=record.lockout_end,
        access_failed_count=record.access_failed_count,
    )


class UserRepository:
    """
    Async repository over the `identity_user` collection.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_by_email(self, email: str) -> Optional[User]:
        with storage_errors("find_by_email"):
            record = await self._get_record(email)
        return _to_user(record) if record else None

    async def all_users(self) -> List[User]:
        with storage_errors("all_users"):
            result = await self._session.execute(select(UserRecord).order_by(UserRecord.email))
        return [_to_user(r) for r in result.scalars().all()]

    async def users_for_claim(self, claim: Claim) -> List[User]:
        """
        Users holding exactly this (type, value) claim.

        Claims are a JSON document column, so this loads every user and
        filters after load. User counts stay small for a single wiki.
        """
        return [u for u in await self.all_users() if claim in u.claims]

    async def create(
        self,
        email: str,
        password_hash: str,
        email_confirmed: bool = False,
        claims: Optional[List[Claim]] = None,
    ) -> User:
        """
        Insert a new user. Uniqueness of the email is enforced by the store;
        a duplicate surfaces as StorageError, so callers check first.
        """
        record = UserRecord(
            id=str(uuid.uuid4()),
            email=email.strip(),
            normalized_email=normalize_email(email),
            user_name=email.strip(),
            password_hash=password_hash,
            email_confirmed=email_confirmed,
            claims=[c.model_dump() for c in claims or []],
            lockout_enabled=True,
            lockout_end=None,
            access_failed_count=0,
        )
        with storage_errors("create_user"):
            self._session.add(record)
            await self._session.flush()

        return _to_user(record)

    async def update(self, user: User) -> User:
        """
        Persist the mutable fields of an existing user.

        Raises
        ------
        NotFoundError
            If the user no longer exists.
        """
        with storage_errors("update_user"):
            record = await self._session.get(UserRecord, user.id)
            if record is None:
                raise NotFoundError(f"User {user.email} does not exist")

            record.password_hash = user.password_hash
            record.email_confirmed = user.email_confirmed
            record.claims = [c.model_dump() for c in user.claims]
            record.lockout_enabled = user.lockout_enabled
            record.lockout_end = user.lockout_end
            record.access_failed_count = user.access_failed_count
            await self._session.flush()

        return _to_user(record)

    async def _get_record(self, email: str) -> Optional[UserRecord]:
        result = await self._session.execute(
            select(UserRecord).where(UserRecord.normalized_email == normalize_email(email))
        )
        return result.scalar_one_or_none()

"""
User provisioning and soft deletion.

Users are never physically removed: deleting one locks it out permanently
(lockout enabled, lockout end at the maximum timestamp).
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..core.clock import NEVER_EXPIRES
from ..core.entities import Claim, User
from ..core.errors import (
    EmailExistsError,
    NotFoundError,
    UserIsLockedOutError,
    EMAIL_DOES_NOT_EXIST_MESSAGE,
    EMAIL_EXISTS_MESSAGE,
    USER_IS_LOCKED_OUT_MESSAGE,
)
from ..db.user_repository import UserRepository
from .passwords import hash_password
from .policies import RoleNames, role_claim

logger = logging.getLogger("roadkill.users")


class UserManager:

    def __init__(self, users: UserRepository) -> None:
        self._users = users

    async def get_user(self, email: str) -> Optional[User]:
        return await self._users.find_by_email(email)

    async def find_all(self) -> List[User]:
        return await self._users.all_users()

    async def find_users_with_claim(self, claim_type: str, claim_value: str) -> List[User]:
        return await self._users.users_for_claim(Claim(type=claim_type, value=claim_value))

    async def create_admin(self, email: str, password: str) -> User:
        return await self._create_with_role(email, password, RoleNames.ADMIN)

    async def create_editor(self, email: str, password: str) -> User:
        return await self._create_with_role(email, password, RoleNames.EDITOR)

    async def delete_user(self, email: str) -> User:
        """
        Lock a user out permanently.

        Raises
        ------
        NotFoundError
            If no user has `email`.
        UserIsLockedOutError
            If the user is already deleted (locked out permanently); nothing
            is changed. A timed failed-login lockout does not block deletion.
        """
        user = await self._users.find_by_email(email)
        if user is None:
            raise NotFoundError(EMAIL_DOES_NOT_EXIST_MESSAGE)

        if user.is_deleted():
            raise UserIsLockedOutError(USER_IS_LOCKED_OUT_MESSAGE)

        locked = await self._users.update(
            user.model_copy(update={"lockout_enabled": True, "lockout_end": NEVER_EXPIRES})
        )
        logger.info("Locked out user %s", locked.email)
        return locked

    async def _create_with_role(self, email: str, password: str, role: str) -> User:
        """
        Raises
        ------
        EmailExistsError
            If a user with `email` exists (case-insensitive); the existing
            record is left untouched.
        ValidationError
            If the password cannot be hashed.
        """
        if await self._users.find_by_email(email) is not None:
            raise EmailExistsError(EMAIL_EXISTS_MESSAGE)

        user = await self._users.create(
            email=email,
            password_hash=await hash_password(password),
            email_confirmed=True,
            claims=[role_claim(role)],
        )
        logger.info("Created %s user %s", role, user.email)
        return user

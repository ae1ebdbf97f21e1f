"""
Password sign-in with lockout-on-failure.

Each failed password check increments the user's failure counter; reaching
the configured limit locks the account for a fixed period. A successful
sign-in clears the counter.
"""

from __future__ import annotations

import enum
import logging
from datetime import timedelta

from ..core.clock import utc_now
from ..core.entities import User
from ..db.user_repository import UserRepository
from .passwords import verify_password

logger = logging.getLogger("roadkill.auth")


class SignInResult(enum.Enum):
    SUCCESS = "success"
    FAILED = "failed"
    LOCKED_OUT = "locked_out"
    NOT_ALLOWED = "not_allowed"

    @property
    def succeeded(self) -> bool:
        return self is SignInResult.SUCCESS


class SignInManager:

    def __init__(
        self,
        users: UserRepository,
        max_failed_attempts: int = 5,
        lockout_duration: timedelta = timedelta(minutes=5),
    ) -> None:
        self._users = users
        self._max_failed_attempts = max_failed_attempts
        self._lockout_duration = lockout_duration

    async def password_sign_in(
        self,
        user: User,
        password: str,
        lockout_on_failure: bool = True,
    ) -> SignInResult:
        if user.is_locked_out():
            logger.warning("Sign-in refused for locked out user %s", user.email)
            return SignInResult.LOCKED_OUT

        if not user.email_confirmed:
            return SignInResult.NOT_ALLOWED

        if await verify_password(password, user.password_hash):
            if user.access_failed_count:
                await self._users.update(
                    user.model_copy(update={"access_failed_count": 0, "lockout_end": None})
                )
            return SignInResult.SUCCESS

        if not lockout_on_failure or not user.lockout_enabled:
            return SignInResult.FAILED

        failures = user.access_failed_count + 1
        if failures >= self._max_failed_attempts:
            lockout_end = utc_now() + self._lockout_duration
            await self._users.update(
                user.model_copy(update={"access_failed_count": 0, "lockout_end": lockout_end})
            )
            logger.warning("User %s locked out until %s", user.email, lockout_end.isoformat())
            return SignInResult.LOCKED_OUT

        await self._users.update(user.model_copy(update={"access_failed_count": failures}))
        return SignInResult.FAILED

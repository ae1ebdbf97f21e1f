from datetime import timedelta
from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..db import (
    get_async_session,
    PageRepository,
    PageVersionRepository,
    UserRepository,
    RefreshTokenRepository,
)
from ..auth.jwt_utils import JwtTokenService
from ..auth.service import AuthenticationService
from ..auth.sign_in import SignInManager
from ..auth.user_manager import UserManager

SessionDep = Annotated[AsyncSession, Depends(get_async_session)]


@lru_cache
def get_jwt_token_service() -> JwtTokenService:
    return JwtTokenService(
        secret=settings.jwt_secret.get_secret_value(),
        algorithm=settings.jwt_algo,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        expiry=timedelta(days=settings.jwt_expiry_days),
    )


def get_page_repository(session: SessionDep) -> PageRepository:
    return PageRepository(session)


def get_page_version_repository(session: SessionDep) -> PageVersionRepository:
    return PageVersionRepository(session)


def get_user_manager(session: SessionDep) -> UserManager:
    return UserManager(UserRepository(session))


def get_authentication_service(
    session: SessionDep,
    tokens: Annotated[JwtTokenService, Depends(get_jwt_token_service)],
) -> AuthenticationService:
    users = UserRepository(session)
    return AuthenticationService(
        users=users,
        sign_in=SignInManager(
            users,
            max_failed_attempts=settings.lockout_max_failed_attempts,
            lockout_duration=timedelta(minutes=settings.lockout_minutes),
        ),
        tokens=tokens,
        refresh_tokens=RefreshTokenRepository(session),
        refresh_token_expiry=timedelta(days=settings.refresh_token_expiry_days),
    )

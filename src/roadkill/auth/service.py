"""
Authentication Service

Exchanges credentials for a token pair and refresh tokens for new pairs.

Login flow
----------
1. Look up the user by email (case-insensitive)       -> NotFoundError
2. Password sign-in with lockout-on-failure           -> ForbiddenError
3. Sign an access token carrying the user's claims
4. Persist a refresh token bound to (email, client IP, issue time)

Refresh tokens rotate on use: exchanging one revokes it and issues a
replacement together with the new access token.
"""

from __future__ import annotations

import logging
from datetime import timedelta

from ..core.clock import utc_now
from ..core.entities import RefreshToken, User
from ..core.errors import ForbiddenError, NotFoundError
from ..db.refresh_token_repository import RefreshTokenRepository
from ..db.user_repository import UserRepository
from .jwt_utils import JwtTokenService, generate_refresh_token
from .models import TokenPair
from .sign_in import SignInManager

logger = logging.getLogger("roadkill.auth")


class AuthenticationService:

    def __init__(
        self,
        users: UserRepository,
        sign_in: SignInManager,
        tokens: JwtTokenService,
        refresh_tokens: RefreshTokenRepository,
        refresh_token_expiry: timedelta = timedelta(days=30),
    ) -> None:
        self._users = users
        self._sign_in = sign_in
        self._tokens = tokens
        self._refresh_tokens = refresh_tokens
        self._refresh_token_expiry = refresh_token_expiry

    async def authenticate(self, email: str, password: str, client_ip: str) -> TokenPair:
        """
        Validate credentials and issue a token pair.

        Raises
        ------
        NotFoundError
            If no user has `email`.
        ForbiddenError
            If the sign-in check fails for any reason (wrong password,
            locked out, unconfirmed). The reason is not exposed.
        """
        user = await self._users.find_by_email(email)
        if user is None:
            logger.info("Authentication failed: unknown email")
            raise NotFoundError("The email address does not exist.")

        result = await self._sign_in.password_sign_in(user, password, lockout_on_failure=True)
        if not result.succeeded:
            logger.info("Authentication rejected for %s (%s)", user.email, result.value)
            raise ForbiddenError("Authentication rejected")

        pair = await self._issue(user, client_ip)
        logger.info("Issued tokens for %s from %s", user.email, client_ip)
        return pair

    async def refresh_token(self, refresh_token: str, client_ip: str) -> TokenPair:
        """
        Exchange an active refresh token for a new token pair.

        Raises
        ------
        NotFoundError
            If the token is unknown, revoked or expired.
        ForbiddenError
            If its user no longer exists or is locked out.
        """
        stored = await self._refresh_tokens.find(refresh_token)
        if stored is None or not stored.is_active():
            raise NotFoundError("Refresh token does not exist")

        user = await self._users.find_by_email(stored.email)
        if user is None or user.is_locked_out():
            raise ForbiddenError("Authentication rejected")

        # Only the caller whose revoke succeeds gets a new pair.
        await self._refresh_tokens.revoke(stored.token)
        return await self._issue(user, client_ip)

    async def revoke_refresh_token(self, refresh_token: str) -> None:
        """
        Raises
        ------
        NotFoundError
            If the token was never issued or is already revoked.
        """
        await self._refresh_tokens.revoke(refresh_token)

    async def _issue(self, user: User, client_ip: str) -> TokenPair:
        jwt_token = self._tokens.create_jwt_token(user.claims, user.email)

        issued_at = utc_now()
        stored = await self._refresh_tokens.store(
            RefreshToken(
                token=generate_refresh_token(),
                email=user.email,
                ip_address=client_ip,
                issued_at=issued_at,
                expires_at=issued_at + self._refresh_token_expiry,
            )
        )
        return TokenPair(jwt_token=jwt_token, refresh_token=stored.token)

"""
Refresh Token Store

Issued refresh tokens, keyed by the opaque token string. Writes are flushed
immediately so a token is readable by the same session right after issue.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.clock import utc_now
from ..core.entities import RefreshToken
from ..core.errors import NotFoundError
from .models import RefreshTokenRecord
from .session import storage_errors


class RefreshTokenRepository:

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def store(self, token: RefreshToken) -> RefreshToken:
        record = RefreshTokenRecord(
            token=token.token,
            email=token.email,
            ip_address=token.ip_address,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
            revoked_at=token.revoked_at,
        )
        with storage_errors("store_refresh_token"):
            self._session.add(record)
            await self._session.flush()
        return RefreshToken.model_validate(record)

    async def find(self, token: str) -> Optional[RefreshToken]:
        with storage_errors("find_refresh_token"):
            record = await self._session.get(RefreshTokenRecord, token)
        return RefreshToken.model_validate(record) if record else None

    async def revoke(self, token: str) -> None:
        """
        Mark a token revoked.

        The store only updates a row that is still unrevoked, so of two
        callers racing on the same token exactly one succeeds.

        Raises
        ------
        NotFoundError
            If the token was never issued or is already revoked.
        """
        stmt = (
            update(RefreshTokenRecord)
            .where(
                RefreshTokenRecord.token == token,
                RefreshTokenRecord.revoked_at.is_(None),
            )
            .values(revoked_at=utc_now())
        )
        with storage_errors("revoke_refresh_token"):
            result = await self._session.execute(stmt)
        if result.rowcount != 1:
            raise NotFoundError("Refresh token does not exist")

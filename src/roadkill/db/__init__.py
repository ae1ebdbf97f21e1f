"""
Database Package

Provides SQLAlchemy async session management, model definitions and the
repositories backing the page, version, user and refresh-token stores.
"""

from .session import get_async_session, async_engine, AsyncSessionLocal, create_schema
from .models import Base, PageRecord, PageVersionRecord, UserRecord, RefreshTokenRecord
from .page_repository import PageRepository
from .page_version_repository import PageVersionRepository
from .user_repository import UserRepository
from .refresh_token_repository import RefreshTokenRepository

__all__ = [
    "get_async_session",
    "async_engine",
    "AsyncSessionLocal",
    "create_schema",
    "Base",
    "PageRecord",
    "PageVersionRecord",
    "UserRecord",
    "RefreshTokenRecord",
    "PageRepository",
    "PageVersionRepository",
    "UserRepository",
    "RefreshTokenRepository",
]

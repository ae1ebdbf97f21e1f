"""
SQLAlchemy Models

Defines the document collections backing the stores:
- Pages (metadata only)
- Page versions (append-only revisions of page text)
- Users and their claims
- Refresh tokens

Set-valued fields (tags, claims) are stored as JSON documents. Secondary
indexes cover the query paths used by the repositories: page id, author and
revision date.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional, List

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


DOCUMENT_JSON = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


# ---------------------------------------------------------------------
# Page Model
# ---------------------------------------------------------------------

class PageRecord(Base):
    """
    Page metadata document.
    """
    __tablename__ = "page"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[List[str]] = mapped_column(DOCUMENT_JSON, nullable=False, default=list)
    created_by: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    created_on: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    last_modified_by: Mapped[Optional[str]] = mapped_column(String(256), nullable=True)
    last_modified_on: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)


Index("idx_page_title", func.lower(PageRecord.title))
Index("idx_page_created_by", func.lower(PageRecord.created_by))


# ---------------------------------------------------------------------
# Page Version Model
# ---------------------------------------------------------------------

class PageVersionRecord(Base):
    """
    A single revision of a page's text.

    `seq` is the store-assigned insertion order used to break ties between
    revisions sharing the same `date_time`. `page_id` is not a
    foreign key: versions outlive the page metadata.
    """
    __tablename__ = "page_version"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), nullable=False, unique=True)
    page_id: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    author: Mapped[str] = mapped_column(String(256), nullable=False, default="")
    date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    __table_args__ = (
        Index("idx_version_page_date", "page_id", "date_time"),
    )


Index("idx_version_author", func.lower(PageVersionRecord.author))


# ---------------------------------------------------------------------
# User Model
# ---------------------------------------------------------------------

class UserRecord(Base):
    """
    Identity user. Claims are stored inline as a list of
    {"type": ..., "value": ...} documents.
    """
    __tablename__ = "identity_user"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False)
    normalized_email: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)
    user_name: Mapped[str] = mapped_column(String(256), nullable=False)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    email_confirmed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    claims: Mapped[List[dict]] = mapped_column(DOCUMENT_JSON, nullable=False, default=list)
    lockout_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    lockout_end: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    access_failed_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


# ---------------------------------------------------------------------
# Refresh Token Model
# ---------------------------------------------------------------------

class RefreshTokenRecord(Base):
    """
    Opaque refresh token issued alongside an access token.
    """
    __tablename__ = "refresh_token"

    token: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    ip_address: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    issued_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    revoked_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

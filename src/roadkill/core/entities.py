"""
Domain Entities

Typed records returned by the stores. Route handlers never see ORM rows;
every repository converts rows into these models before returning them.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .clock import NEVER_EXPIRES, utc_now


# ---------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------

class Page(BaseModel):
    """
    Page metadata. The text of a page lives in its PageVersion entries.
    """
    id: Optional[int] = None
    title: str
    tags: List[str] = Field(default_factory=list)
    created_by: str = ""
    created_on: Optional[datetime] = None
    last_modified_by: Optional[str] = None
    last_modified_on: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @field_validator("tags", mode="before")
    @classmethod
    def dedupe_tags(cls, v):
        if v is None:
            return []
        seen = []
        for tag in v:
            tag = str(tag).strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen


class PageVersion(BaseModel):
    """
    A single revision of a page's text.

    `page_id` is a lookup reference only; a version is not owned by its page.
    """
    id: str
    page_id: int
    text: str
    author: str
    date_time: datetime

    model_config = ConfigDict(from_attributes=True)


# ---------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------

class Claim(BaseModel):
    """A (type, value) pair attached to an identity."""
    type: str = Field(..., min_length=1)
    value: str

    model_config = ConfigDict(frozen=True, from_attributes=True)


class User(BaseModel):
    id: str
    email: str
    user_name: str
    password_hash: str
    email_confirmed: bool = False
    claims: List[Claim] = Field(default_factory=list)
    lockout_enabled: bool = False
    lockout_end: Optional[datetime] = None
    access_failed_count: int = 0

    model_config = ConfigDict(from_attributes=True)

    def is_locked_out(self, now: Optional[datetime] = None) -> bool:
        """True while lockout applies and its end lies in the future."""
        if not self.lockout_enabled or self.lockout_end is None:
            return False
        return self.lockout_end > (now or utc_now())

    def is_deleted(self) -> bool:
        """True once the user has been soft-deleted (locked out for good)."""
        return self.lockout_enabled and self.lockout_end == NEVER_EXPIRES


class RefreshToken(BaseModel):
    token: str
    email: str
    ip_address: str
    issued_at: datetime
    expires_at: datetime
    revoked_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    def is_active(self, now: Optional[datetime] = None) -> bool:
        return self.revoked_at is None and self.expires_at > (now or utc_now())

"""
API Models for the Roadkill API

This module defines all Pydantic models used for request/response validation
across the pages, page versions, users and authorization endpoints.

Design Goals
------------
- Strong typing
- camelCase JSON on the wire (PascalCase accepted on input), snake_case in Python
- Explicit conversion to and from domain entities (no implicit mapping)
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, AliasGenerator, BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel, to_pascal

from ..core.entities import Page, PageVersion, User


# Requests also bind PascalCase names ("Email", "RefreshToken").
_REQUEST_CONFIG = ConfigDict(
    alias_generator=AliasGenerator(
        alias=to_camel,
        validation_alias=lambda name: AliasChoices(to_camel(name), to_pascal(name)),
    ),
    populate_by_name=True,
    extra="forbid",
)

_RESPONSE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
)


# ---------------------------------------------------------------------
# Authorization Models
# ---------------------------------------------------------------------

class AuthorizationRequest(BaseModel):
    """
    Credentials submitted to obtain a token pair.
    """
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    model_config = _REQUEST_CONFIG


class RefreshTokenRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)

    model_config = _REQUEST_CONFIG


class AuthorizationResponse(BaseModel):
    jwt_token: str
    refresh_token: str

    model_config = _RESPONSE_CONFIG


# ---------------------------------------------------------------------
# User Models
# ---------------------------------------------------------------------

class UserRequest(BaseModel):
    """
    Payload for the CreateAdmin / CreateEditor endpoints.
    """
    email: str = Field(..., min_length=3, max_length=256, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=1)

    model_config = _REQUEST_CONFIG


class ClaimResponse(BaseModel):
    type: str
    value: str

    model_config = _RESPONSE_CONFIG


class UserResponse(BaseModel):
    """
    Public view of a user; the password hash is never exposed.
    """
    id: str
    email: str
    user_name: str
    email_confirmed: bool
    claims: List[ClaimResponse] = Field(default_factory=list)
    lockout_enabled: bool
    lockout_end: Optional[datetime] = None

    model_config = _RESPONSE_CONFIG

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            user_name=user.user_name,
            email_confirmed=user.email_confirmed,
            claims=[ClaimResponse(type=c.type, value=c.value) for c in user.claims],
            lockout_enabled=user.lockout_enabled,
            lockout_end=user.lockout_end,
        )


# ---------------------------------------------------------------------
# Page Models
# ---------------------------------------------------------------------

class PageRequest(BaseModel):
    """
    Page metadata sent by editors.

    `id` is required for updates and ignored on create. On create, `text`
    (empty when omitted) is stored as the page's original version.
    """
    id: Optional[int] = None
    title: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    text: Optional[str] = None

    model_config = _REQUEST_CONFIG

    def to_page(self, username: str) -> Page:
        return Page(
            id=self.id,
            title=self.title,
            tags=self.tags,
            created_by=username,
            last_modified_by=username,
        )


class PageResponse(BaseModel):
    id: int
    title: str
    tags: List[str]
    created_by: str
    created_on: datetime
    last_modified_by: Optional[str] = None
    last_modified_on: Optional[datetime] = None

    model_config = _RESPONSE_CONFIG

    @classmethod
    def from_page(cls, page: Page) -> "PageResponse":
        return cls(**page.model_dump())


# ---------------------------------------------------------------------
# Page Version Models
# ---------------------------------------------------------------------

class PageVersionRequest(BaseModel):
    """
    A new or edited revision. `id` is required for updates only.
    """
    id: Optional[str] = None
    page_id: int
    text: str
    author: Optional[str] = None
    date_time: Optional[datetime] = None

    model_config = _REQUEST_CONFIG


class PageVersionResponse(BaseModel):
    id: str
    page_id: int
    text: str
    author: str
    date_time: datetime

    model_config = _RESPONSE_CONFIG

    @classmethod
    def from_version(cls, version: PageVersion) -> "PageVersionResponse":
        return cls(**version.model_dump())


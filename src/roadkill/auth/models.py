"""
Authentication Models

Strongly-typed authentication results and the identity context produced
after JWT verification.
"""

from typing import List
from pydantic import BaseModel, Field, ConfigDict

from ..core.entities import Claim
from .policies import ROLE_CLAIM_TYPE


class UserContext(BaseModel):
    """
    Authenticated user context derived from a verified access token.

    This object is injected into all protected routes.
    """

    email: str = Field(
        ...,
        min_length=1,
        description="Email address (subject) of the authenticated user.",
    )

    claims: List[Claim] = Field(
        default_factory=list,
        description="Claims carried by the access token.",
    )

    model_config = ConfigDict(
        frozen=True,                # Makes UserContext immutable after creation
        extra="forbid",             # Prevents claim injection via unexpected fields
    )

    @property
    def roles(self) -> List[str]:
        return [c.value for c in self.claims if c.type == ROLE_CLAIM_TYPE]


class TokenPair(BaseModel):
    """
    Access token plus the refresh token that can be exchanged for a new one.
    """

    jwt_token: str
    refresh_token: str

    model_config = ConfigDict(frozen=True)

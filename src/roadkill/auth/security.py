"""
Access Token Verification & Policy Enforcement

This module is responsible for:

1. Verifying bearer access tokens issued by the Authorization routes.
2. Producing a validated `UserContext` object for downstream routes.
3. Enforcing the Admin / Editor authorization policies.

Anonymous routes simply do not depend on anything in this module.
"""

from __future__ import annotations

import logging
from typing import Annotated, Callable

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..api.dependencies import get_jwt_token_service
from .jwt_utils import JwtTokenService
from .models import UserContext
from .policies import is_authorized

logger = logging.getLogger("roadkill.auth")


# ---------------------------------------------------------------------
# Security Scheme
# ---------------------------------------------------------------------

security = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# ---------------------------------------------------------------------
# Public Authentication Dependency
# ---------------------------------------------------------------------

def verify_access_token(
    creds: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    tokens: Annotated[JwtTokenService, Depends(get_jwt_token_service)],
) -> UserContext:
    """
    Verify the bearer access token and construct a UserContext.

    Raises
    ------
    HTTPException(401) for missing, invalid or expired tokens.
    """
    if creds is None:
        raise _unauthorized("Not authenticated.")

    try:
        payload = tokens.decode_jwt_token(creds.credentials)
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired.")
    except jwt.InvalidAudienceError:
        raise _unauthorized("Invalid token audience.")
    except jwt.InvalidIssuerError:
        raise _unauthorized("Invalid token issuer.")
    except jwt.InvalidTokenError:
        raise _unauthorized("Invalid or malformed token.")

    email = payload.get("sub")
    if not email or not isinstance(email, str):
        raise _unauthorized("Token missing 'sub' claim.")

    return UserContext(
        email=email,
        claims=tokens.claims_from_payload(payload),
    )


# ---------------------------------------------------------------------
# Policy enforcement helper
# ---------------------------------------------------------------------

def require_policy(policy_name: str) -> Callable:
    """
    Create a FastAPI dependency that enforces an authorization policy.

    Example:
        @router.delete("/")
        async def delete(user = Depends(require_policy(PolicyNames.ADMIN))):
            ...

    Returns
    -------
    Callable
        A dependency function that returns UserContext if allowed.
    """

    def check_policy(
        user: Annotated[UserContext, Depends(verify_access_token)],
    ) -> UserContext:

        if not is_authorized(user.claims, policy_name):
            logger.info("Policy %s denied for %s", policy_name, user.email)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"The '{policy_name}' policy is required.",
            )

        return user

    return check_policy

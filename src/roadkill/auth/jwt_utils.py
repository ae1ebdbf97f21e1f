"""
JWT Utility Functions

This module issues and verifies the access tokens handed to API clients
after a successful sign-in, and generates the opaque refresh tokens that
accompany them.

Key characteristics:
- Signed with a symmetric key supplied at construction (no global secret)
- Fixed, configurable lifetime
- Includes explicit issuer/audience claims
- Carries the user's claims so authorization needs no store lookup
"""

from __future__ import annotations

import secrets
import time
import uuid
from datetime import timedelta
from typing import Any, Dict, Iterable, List

import jwt

from ..core.entities import Claim


# Registered claims managed by the token service; user claims never
# overwrite these.
_RESERVED_CLAIMS = frozenset({"iss", "aud", "iat", "nbf", "exp", "jti", "sub", "name", "email"})


# ---------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------

class JWTConfigurationError(RuntimeError):
    """Raised when JWT generation cannot proceed due to configuration issues."""


# ---------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------

def _get_current_timestamp() -> int:
    """Return current UNIX timestamp in UTC as integer seconds."""
    return int(time.time())


def _claims_to_payload(claims: Iterable[Claim]) -> Dict[str, List[str]]:
    """Group claim values by type, preserving order."""
    grouped: Dict[str, List[str]] = {}
    for claim in claims:
        if claim.type in _RESERVED_CLAIMS:
            continue
        values = grouped.setdefault(claim.type, [])
        if claim.value not in values:
            values.append(claim.value)
    return grouped


def _payload_to_claims(payload: Dict[str, Any]) -> List[Claim]:
    claims: List[Claim] = []
    for claim_type, values in payload.items():
        if claim_type in _RESERVED_CLAIMS:
            continue
        if not isinstance(values, list):
            values = [values]
        claims.extend(Claim(type=claim_type, value=str(v)) for v in values)
    return claims


def generate_refresh_token() -> str:
    """Return a new opaque, URL-safe refresh token."""
    return secrets.token_urlsafe(48)


# ---------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------

class JwtTokenService:
    """
    Issues and verifies signed access tokens.

    Parameters
    ----------
    secret : str
        Symmetric signing key.
    algorithm : str
        JWS algorithm, e.g. "HS256".
    issuer, audience : str
        Values written to and required on `iss` / `aud`.
    expiry : timedelta
        Lifetime of issued tokens.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        issuer: str = "roadkill",
        audience: str = "roadkill",
        expiry: timedelta = timedelta(days=7),
    ) -> None:
        if not secret:
            raise JWTConfigurationError("JWT signing secret is not configured.")
        if expiry.total_seconds() <= 0:
            raise JWTConfigurationError(
                f"JWT expiry must be positive; got {expiry}"
            )

        self._secret = secret
        self._algorithm = algorithm
        self._issuer = issuer
        self._audience = audience
        self._expiry = expiry

    def create_jwt_token(self, claims: Iterable[Claim], email: str) -> str:
        """
        Sign an access token for `email` carrying `claims`.

        Returns
        -------
        str
            Encoded JWT suitable for use in Authorization: Bearer <token> header.

        Raises
        ------
        JWTConfigurationError
            If signing fails (e.g. unsupported algorithm).
        """
        now = _get_current_timestamp()

        payload: Dict[str, Any] = _claims_to_payload(claims)
        payload.update({
            "iss": self._issuer,
            "aud": self._audience,
            "iat": now,
            "exp": now + int(self._expiry.total_seconds()),
            "jti": str(uuid.uuid4()),      # Distinct token per issue
            "sub": email,
            "name": email,
            "email": email,
        })

        try:
            return jwt.encode(payload, self._secret, algorithm=self._algorithm)
        except Exception as exc:
            raise JWTConfigurationError(
                f"Failed to generate JWT: {type(exc).__name__}: {str(exc)}"
            ) from exc

    def decode_jwt_token(self, token: str) -> Dict[str, Any]:
        """
        Verify signature, issuer, audience and expiry of `token`.

        Raises
        ------
        jwt.InvalidTokenError
            Or one of its subclasses (ExpiredSignatureError, ...) when the
            token is not acceptable.
        """
        return jwt.decode(
            token,
            self._secret,
            algorithms=[self._algorithm],
            audience=self._audience,
            issuer=self._issuer,
            options={"require": ["iss", "aud", "iat", "exp", "sub"]},
        )

    @staticmethod
    def claims_from_payload(payload: Dict[str, Any]) -> List[Claim]:
        return _payload_to_claims(payload)

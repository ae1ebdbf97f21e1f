"""
Authorization Policies

Pure mapping from an identity's claims to the actions it may perform.
Anonymous endpoints never consult this module.
"""

from __future__ import annotations

from typing import Dict, FrozenSet, Iterable

from ..core.entities import Claim

ROLE_CLAIM_TYPE = "role"


class RoleNames:
    ADMIN = "Admin"
    EDITOR = "Editor"


class PolicyNames:
    ADMIN = "Admin"
    EDITOR = "Editor"


# Policy name -> role claim values that satisfy it. Admins can do
# everything an editor can.
_POLICY_ROLES: Dict[str, FrozenSet[str]] = {
    PolicyNames.ADMIN: frozenset({RoleNames.ADMIN}),
    PolicyNames.EDITOR: frozenset({RoleNames.EDITOR, RoleNames.ADMIN}),
}


def role_claim(role: str) -> Claim:
    return Claim(type=ROLE_CLAIM_TYPE, value=role)


def is_authorized(claims: Iterable[Claim], policy_name: str) -> bool:
    """
    Return True if any role claim satisfies `policy_name`.

    Unknown policies deny.
    """
    allowed = _POLICY_ROLES.get(policy_name)
    if not allowed:
        return False

    return any(
        c.type == ROLE_CLAIM_TYPE and c.value in allowed
        for c in claims
    )

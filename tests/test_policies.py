import pytest

from roadkill.auth.policies import (
    ROLE_CLAIM_TYPE,
    PolicyNames,
    RoleNames,
    is_authorized,
    role_claim,
)
from roadkill.core.entities import Claim


@pytest.mark.parametrize(
    "roles, policy, expected",
    [
        ([RoleNames.ADMIN], PolicyNames.ADMIN, True),
        ([RoleNames.ADMIN], PolicyNames.EDITOR, True),
        ([RoleNames.EDITOR], PolicyNames.EDITOR, True),
        ([RoleNames.EDITOR], PolicyNames.ADMIN, False),
        ([], PolicyNames.EDITOR, False),
    ],
)
def test_role_policies(roles, policy, expected):
    claims = [role_claim(r) for r in roles]
    assert is_authorized(claims, policy) is expected


def test_unknown_policy_denies():
    assert not is_authorized([role_claim(RoleNames.ADMIN)], "Superuser")


def test_role_value_must_match_exactly():
    assert not is_authorized([role_claim("admin")], PolicyNames.ADMIN)


def test_non_role_claims_are_ignored():
    claims = [Claim(type="group", value=RoleNames.ADMIN)]
    assert not is_authorized(claims, PolicyNames.ADMIN)


def test_role_claim_type():
    assert role_claim(RoleNames.EDITOR) == Claim(type=ROLE_CLAIM_TYPE, value="Editor")

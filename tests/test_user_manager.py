import pytest

from roadkill.auth.passwords import verify_password
from roadkill.auth.policies import RoleNames, role_claim
from roadkill.auth.sign_in import SignInManager, SignInResult
from roadkill.auth.user_manager import UserManager
from roadkill.core.clock import NEVER_EXPIRES
from roadkill.core.errors import (
    EmailExistsError,
    NotFoundError,
    UserIsLockedOutError,
    ValidationError,
    EMAIL_EXISTS_MESSAGE,
    USER_IS_LOCKED_OUT_MESSAGE,
)
from roadkill.db import UserRepository


@pytest.fixture
def manager(session):
    return UserManager(UserRepository(session))


@pytest.mark.asyncio
async def test_create_admin(manager):
    user = await manager.create_admin("admin@example.org", "correct horse")

    assert user.email == "admin@example.org"
    assert user.user_name == "admin@example.org"
    assert user.email_confirmed
    assert user.lockout_enabled
    assert not user.is_locked_out()
    assert user.claims == [role_claim(RoleNames.ADMIN)]
    assert user.password_hash != "correct horse"
    assert await verify_password("correct horse", user.password_hash)


@pytest.mark.asyncio
async def test_create_editor(manager):
    user = await manager.create_editor("editor@example.org", "pw")

    assert user.claims == [role_claim(RoleNames.EDITOR)]


@pytest.mark.asyncio
async def test_duplicate_email_rejected_and_existing_user_untouched(manager):
    original = await manager.create_editor("dupe@example.org", "first")

    with pytest.raises(EmailExistsError) as excinfo:
        await manager.create_admin("DUPE@example.org", "second")
    assert str(excinfo.value) == EMAIL_EXISTS_MESSAGE

    assert await manager.get_user("dupe@example.org") == original
    assert len(await manager.find_all()) == 1


@pytest.mark.asyncio
async def test_overlong_password_rejected(manager):
    with pytest.raises(ValidationError):
        await manager.create_admin("long@example.org", "x" * 100)

    assert await manager.get_user("long@example.org") is None


@pytest.mark.asyncio
async def test_get_user_ignores_case(manager):
    user = await manager.create_editor("Mixed@Example.org", "pw")

    assert await manager.get_user("mixed@example.ORG") == user
    assert await manager.get_user("nobody@example.org") is None


@pytest.mark.asyncio
async def test_find_users_with_claim(manager):
    admin = await manager.create_admin("admin@example.org", "pw")
    await manager.create_editor("editor@example.org", "pw")

    found = await manager.find_users_with_claim("role", RoleNames.ADMIN)

    assert found == [admin]
    assert await manager.find_users_with_claim("role", "Nobody") == []


@pytest.mark.asyncio
async def test_delete_user_locks_out_permanently(manager):
    await manager.create_editor("gone@example.org", "pw")

    deleted = await manager.delete_user("gone@example.org")

    assert deleted.lockout_enabled
    assert deleted.lockout_end == NEVER_EXPIRES
    assert deleted.is_locked_out()

    stored = await manager.get_user("gone@example.org")
    assert stored.lockout_end == NEVER_EXPIRES


@pytest.mark.asyncio
async def test_delete_locked_out_user_rejected_without_change(manager):
    await manager.create_editor("twice@example.org", "pw")
    first = await manager.delete_user("twice@example.org")

    with pytest.raises(UserIsLockedOutError) as excinfo:
        await manager.delete_user("twice@example.org")
    assert str(excinfo.value) == USER_IS_LOCKED_OUT_MESSAGE

    assert await manager.get_user("twice@example.org") == first


@pytest.mark.asyncio
async def test_delete_missing_user_raises(manager):
    with pytest.raises(NotFoundError):
        await manager.delete_user("nobody@example.org")


@pytest.mark.asyncio
async def test_delete_user_during_failed_login_lockout(manager, session):
    users = UserRepository(session)
    await manager.create_editor("attacked@example.org", "right")
    user = await manager.get_user("attacked@example.org")

    result = await SignInManager(users, max_failed_attempts=1).password_sign_in(user, "wrong")
    assert result is SignInResult.LOCKED_OUT
    assert (await manager.get_user("attacked@example.org")).is_locked_out()

    deleted = await manager.delete_user("attacked@example.org")

    assert deleted.lockout_end == NEVER_EXPIRES
    assert (await manager.get_user("attacked@example.org")).is_deleted()

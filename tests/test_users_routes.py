import pytest

from conftest import bearer

from roadkill.core.errors import (
    EMAIL_DOES_NOT_EXIST_MESSAGE,
    EMAIL_EXISTS_MESSAGE,
    USER_IS_LOCKED_OUT_MESSAGE,
)


async def _create_admin(client, headers, email="new.admin@example.org", password="pw"):
    return await client.post(
        "/v3/Users/CreateAdmin",
        json={"email": email, "password": password},
        headers=headers,
    )


@pytest.mark.asyncio
async def test_users_require_authentication(client):
    resp = await client.get("/v3/Users/FindAll")

    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_users_require_admin_policy(client, editor_headers):
    resp = await client.get("/v3/Users/FindAll", headers=editor_headers)

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_create_admin(client, admin_headers):
    resp = await _create_admin(client, admin_headers)

    assert resp.status_code == 201
    assert resp.json() == "new.admin@example.org"
    assert resp.headers["location"] == "new.admin@example.org"

    user = (await client.get("/v3/Users/new.admin@example.org", headers=admin_headers)).json()
    assert user["email"] == "new.admin@example.org"
    assert user["emailConfirmed"] is True
    assert user["claims"] == [{"type": "role", "value": "Admin"}]
    assert "passwordHash" not in user


@pytest.mark.asyncio
async def test_create_editor(client, admin_headers):
    resp = await client.post(
        "/v3/Users/CreateEditor",
        json={"email": "writer@example.org", "password": "pw"},
        headers=admin_headers,
    )
    assert resp.status_code == 201

    found = await client.get(
        "/v3/Users/FindUsersWithClaim",
        params={"claimType": "role", "claimValue": "Editor"},
        headers=admin_headers,
    )
    assert [u["email"] for u in found.json()] == ["writer@example.org"]


@pytest.mark.asyncio
async def test_create_duplicate_email_is_400(client, admin_headers):
    await _create_admin(client, admin_headers)

    resp = await _create_admin(client, admin_headers, email="NEW.ADMIN@example.org")

    assert resp.status_code == 400
    assert resp.json()["detail"] == EMAIL_EXISTS_MESSAGE
    assert len((await client.get("/v3/Users/FindAll", headers=admin_headers)).json()) == 1


@pytest.mark.asyncio
async def test_create_with_invalid_email_is_422(client, admin_headers):
    resp = await _create_admin(client, admin_headers, email="not-an-email")

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_get_missing_user_is_404(client, admin_headers):
    resp = await client.get("/v3/Users/ghost@example.org", headers=admin_headers)

    assert resp.status_code == 404
    assert resp.json()["detail"] == EMAIL_DOES_NOT_EXIST_MESSAGE


@pytest.mark.asyncio
async def test_delete_user(client, admin_headers):
    await _create_admin(client, admin_headers)

    resp = await client.request(
        "DELETE", "/v3/Users/Delete", json="new.admin@example.org", headers=admin_headers
    )
    assert resp.status_code == 204

    user = (await client.get("/v3/Users/new.admin@example.org", headers=admin_headers)).json()
    assert user["lockoutEnabled"] is True
    assert user["lockoutEnd"].startswith("9999-12-31")

    again = await client.request(
        "DELETE", "/v3/Users/Delete", json="new.admin@example.org", headers=admin_headers
    )
    assert again.status_code == 400
    assert again.json()["detail"] == USER_IS_LOCKED_OUT_MESSAGE


@pytest.mark.asyncio
async def test_delete_missing_user_is_404(client, admin_headers):
    resp = await client.request(
        "DELETE", "/v3/Users/Delete", json="ghost@example.org", headers=admin_headers
    )

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_deleted_admin_cannot_sign_in(client, admin_headers):
    await _create_admin(client, admin_headers, password="secret")
    await client.request("DELETE", "/v3/Users/Delete", json="new.admin@example.org", headers=admin_headers)

    resp = await client.post(
        "/Authorization/Authenticate",
        json={"email": "new.admin@example.org", "password": "secret"},
    )

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_tampered_token_rejected(client):
    headers = bearer("admin@example.org", "Admin")
    headers["Authorization"] += "tampered"

    resp = await client.get("/v3/Users/FindAll", headers=headers)

    assert resp.status_code == 401

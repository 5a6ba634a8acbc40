"""OAuth login/callback/logout and the auth introspection endpoints."""

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from conftest import session_cookie

ORIGIN = "http://localhost:8080"


@pytest.mark.anyio
async def test_login_redirects_to_unsplash_authorize(client: httpx.AsyncClient) -> None:
    response = await client.get("/api/auth/login")
    assert response.status_code == 302
    location = response.headers["location"]
    assert location.startswith("https://unsplash.com/oauth/authorize?")
    assert "scope=public%20write_likes" in location
    query = parse_qs(urlparse(location).query)
    assert query["client_id"] == ["test-client"]
    assert query["redirect_uri"] == ["http://localhost:3000/api/auth/callback"]
    assert query["response_type"] == ["code"]
    assert query["scope"] == ["public write_likes"]


@pytest.mark.anyio
async def test_login_without_client_id_is_configuration_error(make_client) -> None:
    async with make_client(client_id="") as client:
        response = await client.get("/api/auth/login")
    assert response.status_code == 500
    assert response.json() == {"error": "Server not configured with UNSPLASH_CLIENT_ID"}
    assert response.headers["access-control-allow-origin"] == ORIGIN


@pytest.mark.anyio
async def test_authorize_url_matches_login_redirect(client: httpx.AsyncClient) -> None:
    login = await client.get("/api/auth/login")
    response = await client.get("/api/auth/authorize-url")
    assert response.status_code == 200
    assert response.json() == {"authorizeUrl": login.headers["location"]}


@pytest.mark.anyio
async def test_authorize_url_without_client_id(make_client) -> None:
    async with make_client(client_id="") as client:
        response = await client.get("/api/auth/authorize-url")
    assert response.status_code == 500
    assert "UNSPLASH_CLIENT_ID" in response.json()["error"]


@pytest.mark.anyio
async def test_redirect_uri_and_scopes_introspection(make_client) -> None:
    async with make_client(raw_scopes="'public', write_likes bogus") as client:
        redirect = await client.get("/api/auth/redirect-uri")
        scopes = await client.get("/api/auth/scopes")
    assert redirect.json() == {"redirectUri": "http://localhost:3000/api/auth/callback"}
    assert scopes.json() == {"scopes": "public write_likes", "raw": "'public', write_likes bogus"}


@pytest.mark.anyio
async def test_callback_without_code_redirects_silently(client, upstream, store) -> None:
    response = await client.get("/api/auth/callback")
    assert response.status_code == 302
    assert response.headers["location"] == ORIGIN
    assert session_cookie(response) is None
    assert upstream.requests == []
    assert len(store) == 0


@pytest.mark.anyio
async def test_callback_exchanges_code_and_sets_session_cookie(client, upstream, store) -> None:
    upstream.on("POST", "/oauth/token", json={"access_token": "tok-123", "token_type": "bearer"})

    response = await client.get("/api/auth/callback", params={"code": "abc"})

    assert response.status_code == 302
    assert response.headers["location"] == ORIGIN
    sid = session_cookie(response)
    assert sid
    assert store.get(sid).access_token == "tok-123"

    cookie_header = response.headers["set-cookie"].lower()
    assert "httponly" in cookie_header
    assert "path=/" in cookie_header
    assert "samesite=lax" in cookie_header
    assert "SameSite=Lax" in response.headers["set-cookie"]

    token_request = upstream.last("/oauth/token")
    assert token_request.method == "POST"
    assert token_request.headers["content-type"] == "application/x-www-form-urlencoded"
    form = parse_qs(token_request.content.decode())
    assert form == {
        "grant_type": ["authorization_code"],
        "code": ["abc"],
        "redirect_uri": ["http://localhost:3000/api/auth/callback"],
        "client_id": ["test-client"],
        "client_secret": ["test-secret"],
    }


@pytest.mark.anyio
@pytest.mark.parametrize(
    ("status_code", "body"),
    [
        (400, {"error": "invalid_grant"}),
        (200, {"token_type": "bearer"}),
    ],
)
async def test_callback_token_failure_redirects_with_auth_error(
    client, upstream, store, status_code, body
) -> None:
    upstream.on("POST", "/oauth/token", status_code=status_code, json=body)
    response = await client.get("/api/auth/callback", params={"code": "bad"})
    assert response.status_code == 302
    assert response.headers["location"] == f"{ORIGIN}?auth=error"
    assert session_cookie(response) is None
    assert len(store) == 0


@pytest.mark.anyio
async def test_callback_unparseable_token_response(client, upstream) -> None:
    upstream.on("POST", "/oauth/token", text="<html>oops</html>")
    response = await client.get("/api/auth/callback", params={"code": "abc"})
    assert response.headers["location"] == f"{ORIGIN}?auth=error"


@pytest.mark.anyio
async def test_callback_transport_failure(client, upstream) -> None:
    upstream.fail("POST", "/oauth/token")
    response = await client.get("/api/auth/callback", params={"code": "abc"})
    assert response.status_code == 302
    assert response.headers["location"] == f"{ORIGIN}?auth=error"


@pytest.mark.anyio
async def test_session_lives_until_logout(client, upstream, login) -> None:
    """Cookie from the callback authenticates /api/me until logout clears it."""
    upstream.on("GET", "/me", json={"username": "ada"})
    sid = await login(client, token="tok-me")
    cookies = {"Cookie": f"sid={sid}"}

    me = await client.get("/api/me", headers=cookies)
    assert me.status_code == 200
    assert me.json() == {"username": "ada"}
    assert upstream.last("/me").headers["authorization"] == "Bearer tok-me"

    logout = await client.post("/api/auth/logout", headers=cookies)
    assert logout.status_code == 200
    assert logout.json() == {"ok": True}
    assert "max-age=0" in logout.headers["set-cookie"].lower()

    after = await client.get("/api/me", headers=cookies)
    assert after.status_code == 401


@pytest.mark.anyio
async def test_logout_without_session_still_ok(client) -> None:
    response = await client.post("/api/auth/logout")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
    assert "max-age=0" in response.headers["set-cookie"].lower()
    assert "SameSite=Lax" in response.headers["set-cookie"]


@pytest.mark.anyio
async def test_logout_with_unknown_sid_is_ok(client, store) -> None:
    response = await client.post("/api/auth/logout", headers={"Cookie": "sid=never-issued"})
    assert response.status_code == 200
    assert len(store) == 0

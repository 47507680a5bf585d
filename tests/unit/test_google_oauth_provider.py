"""Unit tests for the Google OAuth identity provider."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from toolbench.providers.identity.google_oauth_provider import GoogleOAuthProvider
from toolbench.utils.errors import AuthenticationError, ConfigurationError

_REDIRECT = "http://localhost:8000/api/v1/auth/callback"


def _provider(handler, client_id: str = "cid", client_secret: str = "csecret") -> GoogleOAuthProvider:
    return GoogleOAuthProvider(
        httpx.AsyncClient(transport=httpx.MockTransport(handler)), client_id, client_secret
    )


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"unexpected request to {request.url}")


class TestAuthorizeUrl:
    def test_includes_state_and_redirect(self) -> None:
        url = _provider(_unreachable).get_authorize_url("123:sig", _REDIRECT)

        parsed = urlparse(url)
        query = parse_qs(parsed.query)
        assert parsed.netloc == "accounts.google.com"
        assert query["client_id"] == ["cid"]
        assert query["redirect_uri"] == [_REDIRECT]
        assert query["state"] == ["123:sig"]
        assert query["response_type"] == ["code"]
        assert "email" in query["scope"][0]

    def test_unconfigured_raises(self) -> None:
        provider = _provider(_unreachable, client_id="", client_secret="")

        assert provider.is_configured() is False
        with pytest.raises(ConfigurationError):
            provider.get_authorize_url("s", _REDIRECT)


class TestExchangeCode:
    @pytest.mark.asyncio
    async def test_returns_verified_email(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "at-1"})
            return httpx.Response(200, json={"email": "ana@subtropicstudios.com", "email_verified": True})

        email = await _provider(handler).exchange_code("code-1", _REDIRECT)

        assert email == "ana@subtropicstudios.com"
        form = parse_qs(seen[0].content.decode())
        assert form["code"] == ["code-1"]
        assert form["grant_type"] == ["authorization_code"]
        assert form["redirect_uri"] == [_REDIRECT]
        assert seen[1].headers["Authorization"] == "Bearer at-1"

    @pytest.mark.asyncio
    async def test_token_failure(self) -> None:
        provider = _provider(lambda request: httpx.Response(400, json={"error": "invalid_grant"}))

        with pytest.raises(AuthenticationError, match="Token exchange failed"):
            await provider.exchange_code("bad", _REDIRECT)

    @pytest.mark.asyncio
    async def test_missing_access_token(self) -> None:
        provider = _provider(lambda request: httpx.Response(200, json={}))

        with pytest.raises(AuthenticationError, match="no access token"):
            await provider.exchange_code("code", _REDIRECT)

    @pytest.mark.asyncio
    async def test_unverified_email_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "at-1"})
            return httpx.Response(200, json={"email": "ana@subtropicstudios.com", "email_verified": False})

        with pytest.raises(AuthenticationError, match="not verified"):
            await _provider(handler).exchange_code("code", _REDIRECT)

    @pytest.mark.asyncio
    async def test_userinfo_failure(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "oauth2.googleapis.com":
                return httpx.Response(200, json={"access_token": "at-1"})
            return httpx.Response(401)

        with pytest.raises(AuthenticationError, match="user profile"):
            await _provider(handler).exchange_code("code", _REDIRECT)

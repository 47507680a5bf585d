"""Google OAuth 2.0 sign-in.

Standard authorization-code flow: the browser is sent to Google's consent
page, Google redirects back with a ``code``, and the server exchanges the
code for an access token and reads the user's email from the userinfo
endpoint.
"""

from __future__ import annotations

from urllib.parse import urlencode

import httpx
import structlog

from toolbench.interfaces.identity_provider import IIdentityProvider
from toolbench.utils.errors import AuthenticationError, ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
_TOKEN_URL = "https://oauth2.googleapis.com/token"
_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"


class GoogleOAuthProvider(IIdentityProvider):
    """Google sign-in via the OAuth authorization-code flow."""

    def __init__(self, http_client: httpx.AsyncClient, client_id: str, client_secret: str) -> None:
        self._http = http_client
        self._client_id = client_id
        self._client_secret = client_secret

    def is_configured(self) -> bool:
        return bool(self._client_id and self._client_secret)

    def get_authorize_url(self, state: str, redirect_uri: str) -> str:
        if not self.is_configured():
            raise ConfigurationError(message="Google OAuth client not configured", provider_name="google")
        query = urlencode(
            {
                "client_id": self._client_id,
                "redirect_uri": redirect_uri,
                "response_type": "code",
                "scope": "openid email profile",
                "state": state,
                "prompt": "select_account",
            }
        )
        return f"{_AUTHORIZE_URL}?{query}"

    async def exchange_code(self, code: str, redirect_uri: str) -> str:
        token_response = await self._http.post(
            _TOKEN_URL,
            data={
                "code": code,
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not token_response.is_success:
            logger.warning("oauth_token_exchange_failed", status=token_response.status_code)
            raise AuthenticationError(message="Token exchange failed", provider_name="google")

        access_token = token_response.json().get("access_token")
        if not access_token:
            raise AuthenticationError(message="Token exchange returned no access token", provider_name="google")

        userinfo = await self._http.get(
            _USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        if not userinfo.is_success:
            raise AuthenticationError(message="Failed to read user profile", provider_name="google")

        profile = userinfo.json()
        email = profile.get("email")
        if not email or profile.get("email_verified") is False:
            raise AuthenticationError(message="Email address not verified", provider_name="google")
        return email

    def get_provider_name(self) -> str:
        return "google"

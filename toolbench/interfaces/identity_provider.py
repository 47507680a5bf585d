"""Abstract base class for sign-in identity providers.

The session gate only needs two things from an identity provider: a URL to
send the browser to, and a way to turn the callback ``code`` into a verified
email address.  Google OAuth is the only implementation today.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IIdentityProvider(ABC):
    """Contract for OAuth-style sign-in providers."""

    @abstractmethod
    def get_authorize_url(self, state: str, redirect_uri: str) -> str:
        """Build the provider URL that starts the sign-in flow."""

    @abstractmethod
    async def exchange_code(self, code: str, redirect_uri: str) -> str:
        """Exchange an authorization *code* for the user's verified email.

        Raises
        ------
        toolbench.utils.errors.AuthenticationError
            If the exchange fails or the email is not verified.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this provider."""

"""Sign-in identity providers."""

from toolbench.providers.identity.google_oauth_provider import GoogleOAuthProvider

__all__ = ["GoogleOAuthProvider"]

"""HMAC-signed session cookie and OAuth state utilities.

# ─── HOW AUTH COOKIES WORK ───────────────────────────────────────────
#
# Sign-in issues an HMAC-SHA256 signed cookie instead of a server-side
# session.  The system stays stateless (no session DB) while the
# signature prevents forging another user's email.
#
# Cookie format:  {unix_timestamp}:{b64url(email)}:{hmac_hex_digest}
#   - timestamp: when the cookie was issued (UTC epoch seconds)
#   - email:     the signed-in user, URL-safe base64 without padding
#   - hmac:      HMAC-SHA256(secret, "{timestamp}:{b64url(email)}")
#
# Validation checks:
#   1. Cookie format matches expected pattern
#   2. HMAC signature is valid (constant-time comparison)
#   3. Timestamp is within the TTL window
#
# The OAuth ``state`` parameter uses the same scheme without an email:
# {timestamp}:{hmac}, valid for ten minutes.
# ─────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import time

OAUTH_STATE_TTL_SECONDS = 600


def _sign(secret: str, payload: str) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


def _encode_email(email: str) -> str:
    return base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii").rstrip("=")


def _decode_email(encoded: str) -> str | None:
    padding = "=" * (-len(encoded) % 4)
    try:
        return base64.urlsafe_b64decode(encoded + padding).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None


def create_session_cookie(secret: str, email: str, now: float | None = None) -> str:
    """Create an HMAC-signed session cookie value for *email*.

    Parameters
    ----------
    secret:
        The ``AUTH_SECRET`` signing key.
    email:
        The signed-in user's email address.
    now:
        Issue time in epoch seconds; defaults to the current time.

    Returns
    -------
    Cookie string in the format ``{timestamp}:{b64url(email)}:{hmac_hex}``.
    """
    timestamp = str(int(time.time() if now is None else now))
    payload = f"{timestamp}:{_encode_email(email)}"
    return f"{payload}:{_sign(secret, payload)}"


def validate_session_cookie(
    cookie: str,
    secret: str,
    ttl_hours: int = 168,
    now: float | None = None,
) -> str | None:
    """Validate an HMAC-signed session cookie.

    Returns
    -------
    The email the cookie was issued for, or ``None`` if the cookie is
    malformed, forged or older than *ttl_hours*.
    """
    if not cookie or not secret:
        return None

    parts = cookie.split(":")
    if len(parts) != 3:
        return None

    timestamp_str, encoded_email, provided_hmac = parts

    try:
        timestamp = int(timestamp_str)
    except ValueError:
        return None

    current = time.time() if now is None else now
    if current - timestamp > ttl_hours * 3600:
        return None

    expected_hmac = _sign(secret, f"{timestamp_str}:{encoded_email}")
    if not hmac.compare_digest(provided_hmac.encode("utf-8"), expected_hmac.encode("utf-8")):
        return None

    return _decode_email(encoded_email)


def create_oauth_state(secret: str, now: float | None = None) -> str:
    timestamp = str(int(time.time() if now is None else now))
    return f"{timestamp}:{_sign(secret, timestamp)}"


def validate_oauth_state(
    state: str,
    secret: str,
    max_age_seconds: int = OAUTH_STATE_TTL_SECONDS,
    now: float | None = None,
) -> bool:
    """Return ``True`` if *state* was signed with *secret* and is still fresh."""
    if not state or ":" not in state:
        return False
    timestamp_str, provided = state.split(":", 1)
    try:
        timestamp = int(timestamp_str)
    except ValueError:
        return False
    current = time.time() if now is None else now
    if current - timestamp > max_age_seconds:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), _sign(secret, timestamp_str).encode("utf-8"))


def email_in_domain(email: str, domain: str) -> bool:
    """Case-insensitive check that *email* belongs to *domain*."""
    local, sep, email_domain = email.rpartition("@")
    return bool(local and sep) and email_domain.lower() == domain.lower()

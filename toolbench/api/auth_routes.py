"""Authentication routes: login page, Google sign-in, logout and status.

# ─── ROUTE ARCHITECTURE ─────────────────────────────────────────────
#
#   GET  /login                  - Serves the login page (inline HTML)
#   GET  /api/v1/auth/google     - Redirects to Google's consent screen
#   GET  /api/v1/auth/callback   - Exchanges the code, sets session cookie
#   POST /api/v1/auth/logout     - Clears session cookie
#   GET  /api/v1/auth/status     - Returns current auth state
#
# Only addresses in ALLOWED_EMAIL_DOMAIN may sign in; anything else is
# sent back to ``/login?error=AccessDenied``.
# ─────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from urllib.parse import urlencode

import structlog
from fastapi import APIRouter, Request
from starlette.responses import HTMLResponse, JSONResponse, RedirectResponse

from toolbench.api.auth_middleware import COOKIE_NAME, ANONYMOUS_USER
from toolbench.api.auth_utils import (
    create_oauth_state,
    create_session_cookie,
    email_in_domain,
    validate_oauth_state,
    validate_session_cookie,
)
from toolbench.utils.errors import AuthenticationError
from toolbench.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

auth_router = APIRouter()


# ─── Login page (inline HTML) ────────────────────────────────────────

_LOGIN_HTML = """\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Toolbench · Sign in</title>
  <style>
    *, *::before, *::after { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      min-height: 100vh; display: flex; align-items: center; justify-content: center;
      background: #f4f4f5; font-family: system-ui, -apple-system, sans-serif; color: #18181b;
    }
    .login-card {
      width: 100%; max-width: 360px; padding: 40px 32px; border-radius: 12px;
      background: #fff; box-shadow: 0 4px 24px rgba(0, 0, 0, 0.08); text-align: center;
    }
    .login-card h1 { font-size: 1.5rem; margin-bottom: 8px; }
    .login-card p { font-size: 0.9rem; color: #71717a; margin-bottom: 28px; }
    .login-btn {
      display: block; padding: 12px 16px; border-radius: 8px; background: #18181b;
      color: #fff; text-decoration: none; font-weight: 500;
    }
    .login-btn:hover { background: #3f3f46; }
    .login-error { margin-top: 16px; min-height: 1.2em; font-size: 0.85rem; color: #dc2626; }
  </style>
</head>
<body>
  <div class="login-card">
    <h1>Toolbench</h1>
    <p>Sign in with your studio Google account</p>
    <a class="login-btn" href="/api/v1/auth/google">Sign in with Google</a>
    <div class="login-error" id="login-error"></div>
  </div>
  <script>
    const messages = {
      AccessDenied: 'This account is not allowed to sign in.',
      InvalidState: 'Sign-in expired. Please try again.',
      OAuthCallback: 'Google sign-in failed. Please try again.',
    };
    const error = new URLSearchParams(window.location.search).get('error');
    if (error) {
      document.getElementById('login-error').textContent = messages[error] || 'Sign-in failed.';
    }
  </script>
</body>
</html>
"""


def _redirect_uri(request: Request) -> str:
    base = request.app.state.settings.public_base_url.rstrip("/")
    return f"{base}/api/v1/auth/callback"


def _login_error(code: str) -> RedirectResponse:
    return RedirectResponse(url=f"/login?{urlencode({'error': code})}", status_code=303)


@auth_router.get("/login", response_class=HTMLResponse, include_in_schema=False)
async def login_page() -> HTMLResponse:
    """Serve the inline HTML login page."""
    return HTMLResponse(content=_LOGIN_HTML)


# ─── Auth API endpoints ──────────────────────────────────────────────


@auth_router.get("/api/v1/auth/google")
async def auth_google(request: Request) -> RedirectResponse:
    """Start the Google OAuth flow with a signed ``state`` parameter."""
    settings = request.app.state.settings
    identity = request.app.state.identity_provider
    state = create_oauth_state(settings.auth_secret)
    return RedirectResponse(url=identity.get_authorize_url(state, _redirect_uri(request)), status_code=302)


@auth_router.get("/api/v1/auth/callback")
async def auth_callback(
    request: Request,
    code: str = "",
    state: str = "",
    error: str = "",
) -> RedirectResponse:
    """Finish sign-in: verify state, exchange the code, check the domain."""
    settings = request.app.state.settings
    identity = request.app.state.identity_provider

    if error or not code:
        _logger.warning("oauth_callback_error", error=error or "missing_code")
        return _login_error("OAuthCallback")

    if not validate_oauth_state(state, settings.auth_secret):
        _logger.warning("oauth_state_rejected")
        return _login_error("InvalidState")

    try:
        email = await identity.exchange_code(code, _redirect_uri(request))
    except AuthenticationError as exc:
        _logger.warning("oauth_exchange_failed", error=exc.message)
        return _login_error("OAuthCallback")

    if not email_in_domain(email, settings.allowed_email_domain):
        _logger.warning("oauth_domain_rejected", email=email)
        return _login_error("AccessDenied")

    _logger.info("user_signed_in", email=email)
    response = RedirectResponse(url="/", status_code=303)
    # Lax so the cookie rides the redirect chain that started at Google.
    response.set_cookie(
        key=COOKIE_NAME,
        value=create_session_cookie(settings.auth_secret, email),
        httponly=True,
        samesite="lax",
        secure=settings.app_env == "production",
        max_age=settings.session_cookie_ttl_hours * 3600,
        path="/",
    )
    return response


@auth_router.post("/api/v1/auth/logout")
async def auth_logout() -> JSONResponse:
    """Clear the session cookie."""
    response = JSONResponse(content={"authenticated": False})
    response.delete_cookie(key=COOKIE_NAME, path="/")
    return response


@auth_router.get("/api/v1/auth/status")
async def auth_status(request: Request) -> JSONResponse:
    """Return current authentication state."""
    settings = request.app.state.settings

    if not settings.auth_enabled:
        return JSONResponse(
            content={"authenticated": True, "auth_enabled": False, "email": ANONYMOUS_USER}
        )

    cookie = request.cookies.get(COOKIE_NAME, "")
    email = validate_session_cookie(cookie, settings.auth_secret, settings.session_cookie_ttl_hours)
    return JSONResponse(
        content={"authenticated": email is not None, "auth_enabled": True, "email": email}
    )

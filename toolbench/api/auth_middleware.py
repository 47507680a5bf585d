"""Session authentication middleware.

# ─── HOW THE AUTH MIDDLEWARE WORKS ───────────────────────────────────
#
# SessionAuthMiddleware intercepts every request and checks for a valid
# ``toolbench_session`` cookie.  If the cookie is missing or invalid,
# browser requests are redirected to the login page and API requests
# receive a 401 JSON response.
#
#   - Dev mode bypass: if AUTH_SECRET is empty, auth is disabled entirely
#     and every request runs as the "anonymous" user.
#   - Exempt paths let the login page, the OAuth handshake, the health
#     check and static images load without a session.
#   - On success the signed-in email is stored on
#     ``request.state.user_email`` for analytics and feedback.
# ─────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, RedirectResponse, Response

from toolbench.api.auth_utils import validate_session_cookie
from toolbench.utils.logging import bind_request_context

COOKIE_NAME = "toolbench_session"
ANONYMOUS_USER = "anonymous"

_STATIC_EXTENSIONS = (".gif", ".png", ".jpg", ".jpeg", ".svg", ".ico", ".webp")

_EXEMPT_PATHS = ("/login", "/api/v1/auth", "/api/v1/health")


class SessionAuthMiddleware(BaseHTTPMiddleware):
    """Enforces signed-cookie session authentication.

    The secret and TTL are passed in from main.py so the middleware
    doesn't read config globals directly.
    """

    def __init__(self, app: object, secret: str, ttl_hours: int = 168) -> None:
        super().__init__(app)
        self._secret = secret
        self._ttl_hours = ttl_hours

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if not self._secret:
            request.state.user_email = ANONYMOUS_USER
            return await call_next(request)

        path = request.url.path
        if self._is_exempt(path):
            return await call_next(request)

        cookie = request.cookies.get(COOKIE_NAME, "")
        email = validate_session_cookie(cookie, self._secret, self._ttl_hours)
        if email:
            request.state.user_email = email
            bind_request_context(user=email)
            return await call_next(request)

        accept = request.headers.get("accept", "")
        if "text/html" in accept:
            return RedirectResponse(url="/login", status_code=303)
        return JSONResponse(
            status_code=401,
            content={"detail": "Authentication required"},
        )

    @staticmethod
    def _is_exempt(path: str) -> bool:
        for exempt in _EXEMPT_PATHS:
            if path == exempt or path.startswith(exempt + "/"):
                return True
        return path.lower().endswith(_STATIC_EXTENSIONS)


def current_user(request: Request, default: str = ANONYMOUS_USER) -> str:
    """Return the signed-in email for *request*, or *default*."""
    return getattr(request.state, "user_email", None) or default

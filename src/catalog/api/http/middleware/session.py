"""Browser session cookie handling."""

from typing import Any

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware

from src.catalog.runtime.context import get_config

EXEMPT_PREFIXES = ("/health", "/docs", "/redoc", "/openapi.json")


def session_cookie_settings() -> dict[str, Any]:
    """Cookie attributes for the browser session id.

    HTTP-only and SameSite=Lax; Secure outside local development so the id is
    never sent over plain HTTP in production.
    """
    config = get_config()
    return {
        "httponly": True,
        "secure": config.app.environment == "production",
        "samesite": "lax",
        "path": "/",
        "max_age": config.app.session_max_age,
    }


class BrowserSessionMiddleware(BaseHTTPMiddleware):
    """Resolve the session cookie to a server-side session on every page request.

    The session id is exposed as ``request.state.session_id``; a new cookie is
    issued whenever the incoming one is missing, unknown or expired.
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path.startswith(EXEMPT_PREFIXES):
            return await call_next(request)

        cookie_name = get_config().app.session_cookie_name
        web_sessions = request.app.state.app_dependencies.web_session_service
        web_session, is_new = await web_sessions.resolve_session(
            request.cookies.get(cookie_name)
        )
        request.state.session_id = web_session.id

        response = await call_next(request)

        if is_new:
            logger.debug("session.created")
            response.set_cookie(
                key=cookie_name, value=web_session.id, **session_cookie_settings()
            )
        return response

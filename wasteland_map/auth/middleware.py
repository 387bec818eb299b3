"""
Authentication Middleware for Wasteland Map.

Admin state is a flag in the signed session cookie (Starlette's
SessionMiddleware, installed by NiceGUI when a storage secret is set).
Provides the FastAPI dependency that protects admin routes.
"""

import logging

from fastapi import Request

from wasteland_map.errors import AuthError

logger = logging.getLogger(__name__)

ADMIN_SESSION_KEY = "is_admin"


def is_admin_session(request: Request) -> bool:
    """Check if the current session has passed admin verification."""
    return bool(request.session.get(ADMIN_SESSION_KEY, False))


def grant_admin_session(request: Request) -> None:
    """Mark the current session as admin after a successful verification."""
    request.session[ADMIN_SESSION_KEY] = True
    logger.info("Admin session established")


def revoke_admin_session(request: Request) -> None:
    request.session.pop(ADMIN_SESSION_KEY, None)


def require_admin(request: Request) -> None:
    """
    Dependency to require an admin session for a route.

    Usage:
        router = APIRouter(dependencies=[Depends(require_admin)])

    Raises:
        AuthError: surfaced as HTTP 401
    """
    if not is_admin_session(request):
        logger.debug(f"Rejected unauthenticated request to {request.url.path}")
        raise AuthError("Admin authentication required")

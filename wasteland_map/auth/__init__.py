"""
Authentication module for Wasteland Map.

Shared admin code verification plus session helpers for protected routes.
"""

from wasteland_map.auth.guard import AccessGuard
from wasteland_map.auth.middleware import (
    grant_admin_session,
    is_admin_session,
    require_admin,
    revoke_admin_session,
)

__all__ = [
    'AccessGuard',
    'grant_admin_session',
    'is_admin_session',
    'require_admin',
    'revoke_admin_session',
]

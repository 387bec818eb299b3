"""
Admin code verification for Wasteland Map.

The admin code lives in the MapState record owned by the storage backend;
this guard only compares and updates it. Session handling is in
wasteland_map.auth.middleware.
"""

import hmac
import logging

from wasteland_map.errors import ValidationError
from wasteland_map.storage.protocol import MapStorage

logger = logging.getLogger(__name__)


class AccessGuard:
    """One-shot admin code checks against the store's MapState."""

    def __init__(self, storage: MapStorage):
        self._storage = storage

    def verify(self, code: str) -> bool:
        """
        Compare a submitted code with the current admin code.

        Returns:
            True on an exact match. Never raises for string input.
        """
        current = self._storage.get_map_state().admin_code
        is_valid = hmac.compare_digest(code.encode("utf-8"), current.encode("utf-8"))
        if not is_valid:
            logger.info("Admin code verification failed")
        return is_valid

    def update_admin_code(self, code: str) -> None:
        """
        Replace the admin code.

        Takes effect for every later verify() call. Sessions already marked
        as admin stay valid.
        """
        if not code or not code.strip():
            raise ValidationError.for_field("adminCode", "Admin code must not be empty")
        self._storage.update_admin_code(code)
        logger.info("Admin code updated")

"""
Wasteland Map error types.

Lets the HTTP layer map failures to status codes without inspecting
messages: validation (400), missing entity (404), auth (401) and
storage failures (500).
"""

from typing import Dict, List, Optional


class MapError(Exception):
    """Base class for all map errors."""
    pass


class ValidationError(MapError):
    """Malformed or out-of-range input. Never retried."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(message)
        self.message = message
        self.errors = errors or []

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, [{"field": field, "message": message}])


class NotFoundError(MapError):
    """Referenced entity id does not exist."""

    def __init__(self, kind: str, entity_id: str):
        super().__init__(f"{kind.capitalize()} not found: {entity_id}")
        self.kind = kind
        self.entity_id = entity_id


class AuthError(MapError):
    """Admin verification failed or no admin session."""
    pass


class PersistenceError(MapError):
    """The backing store failed. The operation was rolled back as a unit."""
    pass


def field_errors_from_pydantic(errors: list) -> List[Dict[str, str]]:
    """
    Convert pydantic/FastAPI error dicts to the [{field, message}] shape.

    Request-body locations are prefixed with 'body'; that prefix is dropped.
    """
    result = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        result.append({
            "field": ".".join(loc) or "body",
            "message": err.get("msg", "Invalid value"),
        })
    return result

"""Application error taxonomy.

Every error carries the HTTP status it maps to; ``main.py`` turns them into
``{"error": ...}`` responses. Route handlers and the review/role services
raise these instead of building ``HTTPException`` by hand.
"""

from typing import Dict, Optional


class PortalError(Exception):
    """Base class for all portal errors."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(PortalError):
    """A field is missing or malformed. ``fields`` maps field name to message."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", fields: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.fields = fields or {}

    def to_dict(self) -> dict:
        body = {"error": self.message}
        if self.fields:
            body["fields"] = self.fields
        return body


class AuthenticationError(PortalError):
    """Bad credentials or missing/invalid token."""

    status_code = 401

    def __init__(self, message: str = "Unauthenticated"):
        super().__init__(message)


class AuthorizationError(PortalError):
    """The caller's role lacks the permission."""

    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(PortalError):
    status_code = 404

    def __init__(self, resource: str, identifier):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} '{identifier}' not found")


class ConflictError(PortalError):
    """The request conflicts with the current state of the record."""

    status_code = 409


class StoreError(PortalError):
    """Persistence failure. The message shown to clients is always opaque."""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)


class StoreUnavailableError(StoreError):
    """The store timed out or refused the connection."""

    status_code = 503

    def __init__(self, message: str = "Service unavailable"):
        super().__init__(message)

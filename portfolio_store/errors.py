"""
Error types raised by the content services.

Each error carries the HTTP status the web layer answers with, so services
stay free of Flask while routes convert failures in one place.
"""


class ContentError(Exception):
    """Base class for failures surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert to the JSON error envelope."""
        body = {"success": False, "message": self.message}
        body.update(self.details)
        return body


class InvalidInput(ContentError):
    """Malformed body, missing required field or rejected value."""
    status_code = 400


class Unauthorized(ContentError):
    """Missing or wrong admin token, or wrong gallery password."""
    status_code = 401


class NotFound(ContentError):
    """Referenced gallery, post, image or path does not exist."""
    status_code = 404


class Conflict(ContentError):
    """Target already exists."""
    status_code = 409


class StorageError(ContentError):
    """Disk write, permission or removal failure."""
    status_code = 500

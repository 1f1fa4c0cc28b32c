"""
Admin Authentication

Static bearer-token check guarding the content-management endpoints.
"""

from .services import AdminTokenService

__all__ = ["AdminTokenService"]

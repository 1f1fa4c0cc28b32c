"""
Admin token service for the content-management endpoints.
"""

import hmac
import logging
import re
from functools import wraps
from typing import Callable, Optional

from flask import request, jsonify

from app.request_utils import load_json_body

logger = logging.getLogger(__name__)

BEARER_PATTERN = re.compile(r"Bearer\s+(.*)$", re.IGNORECASE)


class AdminTokenService:
    """Compares the caller's token with the configured secret.

    There is no fallback token: without a configured secret every admin
    request is rejected.
    """

    def __init__(self, api_token: str):
        self.api_token = (api_token or "").strip()
        if not self.api_token:
            logger.warning("API_TOKEN is not configured; admin endpoints will reject all requests")

    @property
    def is_configured(self) -> bool:
        """Check whether a secret is configured."""
        return bool(self.api_token)

    def extract_token(self) -> Optional[str]:
        """Get the caller's token from the bearer header, form field or JSON body."""
        match = BEARER_PATTERN.match(request.headers.get("Authorization", ""))
        if match and match.group(1).strip():
            return match.group(1).strip()

        token = request.form.get("token")
        if token:
            return token

        body = load_json_body()
        if isinstance(body, dict) and isinstance(body.get("token"), str):
            return body["token"]
        return None

    def is_valid_token(self, token: Optional[str]) -> bool:
        """Constant-time comparison against the configured secret."""
        if not self.is_configured or not token:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self.api_token.encode("utf-8"))

    def is_authorized(self) -> bool:
        """Check the current request."""
        return self.is_valid_token(self.extract_token())

    def require_admin(self, f: Callable) -> Callable:
        """Decorator to require the admin token."""
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not self.is_authorized():
                logger.info(f"Rejected unauthorized request to {request.path}")
                return jsonify({"success": False, "message": "Unauthorized"}), 401
            return f(*args, **kwargs)
        return decorated_function

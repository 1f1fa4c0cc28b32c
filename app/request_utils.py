"""
Request helpers shared by the blueprints.
"""

import json
import os
from typing import Any, Dict, Optional

from flask import request

FORM_MIMETYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def get_client_ip() -> str:
    """Get the client IP address.

    ``ProxyFix`` has already replaced ``remote_addr`` with the address seen by
    the outermost trusted proxy, so client-supplied forwarding headers beyond
    the configured hop count are ignored.
    """
    return request.remote_addr or ""


def load_json_body() -> Optional[Any]:
    """Decode the raw request body as JSON regardless of the content type.

    ``navigator.sendBeacon`` may post JSON as ``text/plain``, so the body is
    parsed directly instead of relying on ``request.get_json``.

    Returns:
        The decoded value, or None for an empty, form-encoded or invalid body
    """
    if request.mimetype in FORM_MIMETYPES:
        return None
    raw = request.get_data(cache=True, as_text=True)
    if not raw or not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def get_request_fields() -> Dict[str, Any]:
    """Get input fields from a JSON object body, falling back to form fields."""
    body = load_json_body()
    if isinstance(body, dict):
        return body
    return request.form.to_dict()


def upload_size(file_storage) -> int:
    """Measure an uploaded file without consuming its stream."""
    stream = file_storage.stream
    position = stream.tell()
    stream.seek(0, os.SEEK_END)
    size = stream.tell()
    stream.seek(position)
    return size

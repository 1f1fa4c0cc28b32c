"""
Event Tracking Routes

Flask routes for handling event ingestion.
"""

import logging

from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from app.request_utils import get_client_ip, load_json_body

from .event_tracker import EventTracker
from .models import EventPayload

logger = logging.getLogger(__name__)


def create_event_tracking_blueprint(event_tracker: EventTracker) -> Blueprint:
    """Create a Flask blueprint for event tracking routes.

    Args:
        event_tracker: Event tracker service

    Returns:
        Flask blueprint with event tracking routes
    """
    bp = Blueprint('event_tracking', __name__)

    @bp.route("/collect", methods=["POST"])
    def collect():
        """Ingest one analytics event from the frontend."""
        payload_data = load_json_body()
        if not isinstance(payload_data, dict):
            return jsonify({"success": False, "message": "Invalid JSON"}), 400

        try:
            payload = EventPayload.model_validate(payload_data)
        except ValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            logger.debug(f"Rejected event payload, invalid fields: {fields}")
            return jsonify({
                "success": False,
                "message": "Invalid event payload",
                "fields": fields
            }), 400

        result = event_tracker.process_event_payload(
            payload,
            client_ip=get_client_ip(),
            user_agent=request.headers.get("User-Agent", "")
        )
        return jsonify(result.to_dict()), result.status_code

    return bp

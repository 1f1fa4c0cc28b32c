"""
Visitor Stats Routes

Flask routes for the visitor stats subsystem.
"""

import logging

from flask import Blueprint, request, jsonify

from .services import VisitorStatsService

logger = logging.getLogger(__name__)


def _parse_days(raw):
    """Parse the ``days`` query parameter; anything non-numeric means the default."""
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None


def create_visitor_stats_blueprint(
    visitor_stats_service: VisitorStatsService,
    auth_service
) -> Blueprint:
    """Create visitor stats blueprint with routes.

    Args:
        visitor_stats_service: The visitor stats service instance
        auth_service: Admin token service guarding the diagnostics route

    Returns:
        Flask blueprint with visitor stats routes
    """
    blueprint = Blueprint('visitor_stats', __name__)

    @blueprint.route('/stats', methods=['GET'])
    def api_stats():
        """API endpoint for visitor statistics."""
        days = _parse_days(request.args.get('days'))
        stats = visitor_stats_service.get_visitor_stats(days)
        return jsonify({"success": True, "data": stats.to_dict()})

    @blueprint.route('/diagnose', methods=['GET'])
    @auth_service.require_admin
    def api_diagnose():
        """API endpoint for analytics storage diagnostics."""
        report = visitor_stats_service.diagnose()
        return jsonify({"success": True, "data": report.to_dict()})

    return blueprint

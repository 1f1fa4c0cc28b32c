"""
Site Settings Routes
"""

from flask import Blueprint, jsonify

from app.request_utils import load_json_body
from portfolio_store.errors import InvalidInput

from .services import SiteSettingsService


def _json_object() -> dict:
    body = load_json_body()
    if not isinstance(body, dict):
        raise InvalidInput("Invalid JSON")
    return body


def create_site_settings_blueprint(settings_service: SiteSettingsService, auth_service) -> Blueprint:
    """Create site settings blueprint with routes.

    Args:
        settings_service: The site settings service instance
        auth_service: Admin token service guarding the write routes

    Returns:
        Flask blueprint with settings routes
    """
    bp = Blueprint('site_settings', __name__, url_prefix='/settings')
    admin_required = auth_service.require_admin

    @bp.route('/categories', methods=['GET'])
    def get_categories():
        return jsonify({"success": True, "data": settings_service.get_categories()})

    @bp.route('/categories', methods=['POST'])
    @admin_required
    def update_categories():
        body = _json_object()
        categories = settings_service.update_categories(
            body.get("categories"),
            last_updated=body.get("lastUpdated"),
            version=body.get("version")
        )
        return jsonify({
            "success": True,
            "message": "Categories updated successfully",
            "categories": categories
        })

    @bp.route('/orb', methods=['GET'])
    def get_orb_settings():
        return jsonify({"success": True, "data": settings_service.get_orb_settings()})

    @bp.route('/orb', methods=['POST'])
    @admin_required
    def update_orb_settings():
        settings = settings_service.update_orb_settings(_json_object().get("settings"))
        return jsonify({"success": True, "data": settings})

    return bp

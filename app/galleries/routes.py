"""
Gallery Routes

Flask routes for listing and managing galleries.
"""

from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from app.request_utils import get_request_fields
from portfolio_store.errors import InvalidInput

from .models import GalleryCreateRequest
from .services import GalleryService


def create_galleries_blueprint(gallery_service: GalleryService, auth_service) -> Blueprint:
    """Create galleries blueprint with routes.

    Args:
        gallery_service: The gallery service instance
        auth_service: Admin token service guarding the write routes

    Returns:
        Flask blueprint with gallery routes
    """
    bp = Blueprint('galleries', __name__, url_prefix='/galleries')
    admin_required = auth_service.require_admin

    @bp.route('', methods=['GET'])
    def list_galleries():
        galleries = gallery_service.list_galleries()
        return jsonify({"success": True, "data": [g.to_dict() for g in galleries]})

    @bp.route('/create', methods=['POST'])
    @admin_required
    def create_gallery():
        try:
            payload = GalleryCreateRequest.model_validate(get_request_fields())
        except ValidationError as exc:
            if any(err["type"] == "missing" for err in exc.errors()):
                raise InvalidInput("Year and gallery name are required") from exc
            raise InvalidInput("Invalid gallery payload") from exc
        gallery = gallery_service.create_gallery(payload)
        return jsonify({
            "success": True,
            "message": "Gallery created successfully",
            "data": gallery.to_dict()
        })

    @bp.route('/update', methods=['POST'])
    @admin_required
    def update_gallery():
        fields = get_request_fields()
        metadata = fields.get("metadata") or {}
        gallery = gallery_service.update_gallery(fields.get("year"), fields.get("gallery"), metadata)
        return jsonify({
            "success": True,
            "message": "Gallery updated successfully",
            "data": gallery.to_dict()
        })

    @bp.route('/delete', methods=['POST'])
    @admin_required
    def delete_gallery():
        fields = get_request_fields()
        gallery_service.delete_gallery(fields.get("year"), fields.get("gallery"))
        return jsonify({"success": True, "message": "Gallery deleted successfully"})

    @bp.route('/upload', methods=['POST'])
    @admin_required
    def upload_image():
        result = gallery_service.upload_image(
            request.form.get("year"),
            request.form.get("gallery"),
            request.files.get("file"),
            kategorie=request.form.get("kategorie")
        )
        return jsonify({"success": True, "message": "File uploaded successfully", **result})

    @bp.route('/delete-image', methods=['POST'])
    @admin_required
    def delete_image():
        fields = get_request_fields()
        message = gallery_service.delete_image(
            fields.get("year"), fields.get("gallery"), fields.get("imageName")
        )
        return jsonify({"success": True, "message": message})

    @bp.route('/verify-password', methods=['POST'])
    def verify_password():
        fields = get_request_fields()
        result = gallery_service.verify_password(
            fields.get("year"), fields.get("gallery"), fields.get("password")
        )
        return jsonify(result)

    return bp

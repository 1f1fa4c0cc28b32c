"""
File Manager Routes

Admin-only browsing and editing of the raw uploads tree.
"""

from flask import Blueprint, request, jsonify

from app.request_utils import get_request_fields

from .services import FileManagerService


def create_file_manager_blueprint(file_manager: FileManagerService, auth_service) -> Blueprint:
    """Create file manager blueprint with routes.

    Args:
        file_manager: The file manager service instance
        auth_service: Admin token service; every route requires it

    Returns:
        Flask blueprint with file manager routes
    """
    bp = Blueprint('file_manager', __name__, url_prefix='/files')

    @bp.before_request
    def check_admin():
        if request.method != "OPTIONS" and not auth_service.is_authorized():
            return jsonify({"success": False, "message": "Unauthorized"}), 401
        return None

    @bp.route('/list', methods=['GET'])
    def list_dir():
        return jsonify({"success": True, "data": file_manager.list_dir(request.args.get("path", ""))})

    @bp.route('/mkdir', methods=['POST'])
    def make_dir():
        fields = get_request_fields()
        data = file_manager.make_dir(fields.get("path", ""), fields.get("name"))
        return jsonify({"success": True, "data": data})

    @bp.route('/rename', methods=['POST'])
    def rename():
        fields = get_request_fields()
        data = file_manager.rename(fields.get("path", ""), fields.get("newName"))
        return jsonify({"success": True, "data": data})

    @bp.route('/delete', methods=['POST'])
    def delete():
        fields = get_request_fields()
        data = file_manager.delete(fields.get("path", ""))
        return jsonify({"success": True, "data": data})

    @bp.route('/upload', methods=['POST'])
    def upload():
        data = file_manager.upload(request.form.get("path", ""), request.files.getlist("files"))
        return jsonify({"success": True, "data": data})

    return bp

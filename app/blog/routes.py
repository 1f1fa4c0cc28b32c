"""
Blog Routes

Flask routes for listing and managing blog posts.
"""

from flask import Blueprint, request, jsonify
from pydantic import ValidationError

from app.request_utils import get_request_fields
from portfolio_store.errors import InvalidInput

from .models import BlogPostCreateRequest, BlogPostUpdateRequest
from .services import BlogService


def create_blog_blueprint(blog_service: BlogService, auth_service) -> Blueprint:
    """Create blog blueprint with routes.

    Args:
        blog_service: The blog service instance
        auth_service: Admin token service guarding the write routes

    Returns:
        Flask blueprint with blog routes
    """
    bp = Blueprint('blog', __name__, url_prefix='/blog')
    admin_required = auth_service.require_admin

    @bp.route('/posts', methods=['GET'])
    def list_posts():
        posts = blog_service.list_posts()
        return jsonify({"success": True, "data": [p.to_dict() for p in posts]})

    @bp.route('/posts', methods=['POST'])
    @admin_required
    def create_post():
        try:
            payload = BlogPostCreateRequest.model_validate(get_request_fields())
        except ValidationError as exc:
            if any(err["loc"] == ("title",) for err in exc.errors()):
                raise InvalidInput("Title is required") from exc
            raise InvalidInput("Invalid blog post payload") from exc
        post = blog_service.create_post(payload)
        return jsonify({"success": True, "data": post.to_dict()})

    @bp.route('/posts/update', methods=['POST', 'PUT'])
    @admin_required
    def update_post():
        try:
            payload = BlogPostUpdateRequest.model_validate(get_request_fields())
        except ValidationError as exc:
            if any(err["loc"] == ("id",) for err in exc.errors()):
                raise InvalidInput("Blog post ID is required") from exc
            raise InvalidInput("Invalid blog post payload") from exc
        post = blog_service.update_post(payload)
        return jsonify({"success": True, "data": post.to_dict()})

    @bp.route('/posts', methods=['DELETE'])
    @admin_required
    def delete_post():
        blog_service.delete_post(request.args.get("id"))
        return jsonify({"success": True, "message": "Blog post deleted successfully"})

    @bp.route('/upload-image', methods=['POST'])
    @admin_required
    def upload_image():
        result = blog_service.upload_image(request.form.get("blogId"), request.files.get("image"))
        return jsonify({"success": True, "data": result})

    return bp

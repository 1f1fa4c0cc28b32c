"""
Application assembly for the portfolio backend.

Builds the Flask app from the configuration, wires every subsystem
module and installs the CORS hooks and JSON error handlers.
"""

import argparse
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, request, jsonify, make_response
from werkzeug.exceptions import HTTPException
from werkzeug.middleware.proxy_fix import ProxyFix

from config_manager import ConfigManager
from portfolio_store.errors import ContentError

from app.auth import AdminTokenService
from app.blog.factory import create_blog_module
from app.event_tracking.factory import create_event_tracking_module
from app.file_manager.factory import create_file_manager_module
from app.galleries.factory import create_galleries_module
from app.site_settings.factory import create_site_settings_module
from app.visitor_stats.factory import create_visitor_stats_module

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type, Authorization, X-Requested-With"
CORS_MAX_AGE = "600"


def pick_cors_origin(request_origin: Optional[str], allowed_origins) -> Optional[str]:
    """Return the value for ``Access-Control-Allow-Origin``, or None to omit it."""
    if "*" in allowed_origins:
        return "*"
    if request_origin and request_origin in allowed_origins:
        return request_origin
    return None


def create_app(config_manager: Optional[ConfigManager] = None, bcrypt_rounds: Optional[int] = None) -> Flask:
    """Create the Flask application.

    Args:
        config_manager: Configuration source, defaults to ``web_app_config.json`` plus environment
        bcrypt_rounds: Optional bcrypt cost for gallery passwords (for testing)

    Returns:
        Configured Flask application
    """
    config_manager = config_manager or ConfigManager()
    app_config = config_manager.get_app_config()
    paths_config = config_manager.get_paths_config()
    analytics_config = config_manager.get_analytics_config()
    upload_config = config_manager.get_upload_config()

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
        app.wsgi_app,
        x_for=app_config.trusted_proxies,
        x_proto=1,     # trust 1 hop for X-Forwarded-Proto
        x_host=1,      # trust 1 hop for X-Forwarded-Host
        x_prefix=1)    # <-- pay attention to X-Forwarded-Prefix
    app.json.ensure_ascii = False

    uploads_dir = Path(paths_config.uploads_dir)
    blog_dir = Path(paths_config.blog_dir)
    analytics_dir = Path(paths_config.analytics_dir)
    settings_dir = Path(paths_config.settings_dir)
    for directory in (uploads_dir, blog_dir, analytics_dir, settings_dir):
        directory.mkdir(parents=True, exist_ok=True)

    auth_service = AdminTokenService(app_config.api_token)

    event_tracking_module = create_event_tracking_module(analytics_dir, analytics_config)
    event_tracker = event_tracking_module["service"]
    visitor_stats_module = create_visitor_stats_module(
        event_tracker.event_log,
        event_tracker.presence,
        analytics_config,
        auth_service
    )
    galleries_module = create_galleries_module(uploads_dir, upload_config, auth_service, bcrypt_rounds)
    blog_module = create_blog_module(blog_dir, Path(paths_config.blog_index_file), upload_config, auth_service)
    site_settings_module = create_site_settings_module(settings_dir, auth_service)
    file_manager_module = create_file_manager_module(
        uploads_dir, paths_config.uploads_base_url, upload_config, auth_service
    )

    modules = {
        "auth": {"service": auth_service},
        "event_tracking": event_tracking_module,
        "visitor_stats": visitor_stats_module,
        "galleries": galleries_module,
        "blog": blog_module,
        "site_settings": site_settings_module,
        "file_manager": file_manager_module,
    }
    for name, module in modules.items():
        if "blueprint" in module:
            app.register_blueprint(module["blueprint"])
    app.extensions["portfolio_services"] = {name: module["service"] for name, module in modules.items()}

    allowed_origins = list(app_config.cors_allow_origins)

    @app.before_request
    def answer_preflight():
        """Short-circuit CORS preflight for known routes."""
        if request.method == "OPTIONS" and request.url_rule is not None:
            return make_response("", 204)
        return None

    @app.after_request
    def add_cors_headers(resp):
        """Attach CORS headers when the request origin is allowed."""
        origin = pick_cors_origin(request.headers.get("Origin"), allowed_origins)
        if origin:
            resp.headers["Access-Control-Allow-Origin"] = origin
            if origin != "*":
                resp.headers["Vary"] = "Origin"
                resp.headers["Access-Control-Allow-Credentials"] = "true"
            resp.headers["Access-Control-Allow-Methods"] = CORS_ALLOW_METHODS
            resp.headers["Access-Control-Allow-Headers"] = CORS_ALLOW_HEADERS
            resp.headers["Access-Control-Max-Age"] = CORS_MAX_AGE
        return resp

    @app.errorhandler(ContentError)
    def handle_content_error(error: ContentError):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error: HTTPException):
        return jsonify({"success": False, "message": error.name}), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.path}: {error}")
        return jsonify({"success": False, "message": "Internal server error"}), 500

    @app.get("/actuator/health")
    def actuator_health():
        """Health check endpoint for monitoring tools."""
        return jsonify({"status": "UP", "service": "portfolio-backend"}), 200

    logger.info(
        f"Application created: uploads={uploads_dir.name}, blog={blog_dir.name}, "
        f"analytics={analytics_dir.name}, geo_enabled={analytics_config.geo_enabled}"
    )
    return app


if __name__ == "__main__":
    from portfolio_store.logging_config import setup_logging

    parser = argparse.ArgumentParser(description="Portfolio backend: analytics collector and content API")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    manager = ConfigManager()
    app_config = manager.get_app_config()
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    setup_logging(debug=app_config.debug, log_file=app_config.log_file or None)
    create_app(manager).run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )

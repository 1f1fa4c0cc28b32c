#!/usr/bin/env python3
"""
Development runner for the portfolio backend.

Production deployments serve ``app.main:create_app()`` through a WSGI
server; this script starts Flask's built-in server with the configured
host, port and logging.
"""

import sys
from pathlib import Path

# Allow running from a checkout without installing the package
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from config_manager import ConfigManager
from portfolio_store.logging_config import setup_logging, get_logger
from app.main import create_app

if __name__ == "__main__":
    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()

    setup_logging(debug=app_config.debug, log_file=app_config.log_file or None)
    logger = get_logger(__name__)
    logger.info(f"Starting portfolio backend on {app_config.host}:{app_config.port}")
    if not app_config.api_token:
        logger.warning("No API_TOKEN set; content management endpoints are locked")

    create_app(config_manager).run(
        host=app_config.host,
        port=app_config.port,
        debug=app_config.debug
    )

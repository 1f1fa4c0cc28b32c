"""
Shared fixtures: an application wired to temporary directories.
"""

import pytest

from config_manager import ConfigManager
from app.main import create_app

ADMIN_TOKEN = "test-admin-token"

CONFIG_ENV_VARS = (
    "APP_HOST", "APP_PORT", "APP_DEBUG", "API_TOKEN", "CORS_ALLOW_ORIGINS",
    "UPLOADS_DIR", "BLOG_UPLOADS_DIR", "ANALYTICS_DIR", "SETTINGS_DIR",
    "UPLOADS_BASE_URL", "GEO_ENABLED", "GEO_LOOKUP_URL", "GEO_TIMEOUT_SEC",
    "MAX_UPLOAD_MB", "LOG_FILE", "TRUSTED_PROXIES",
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration variables inherited from the shell."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config(tmp_path, clean_env):
    """Configuration rooted in a temporary directory, geolocation disabled."""
    manager = ConfigManager(config_file=str(tmp_path / "missing_config.json"), base_dir=tmp_path)
    manager.update_section("app", {"api_token": ADMIN_TOKEN})
    manager.update_section("paths", {"uploads_base_url": "https://cdn.example.com/uploads"})
    manager.update_section("analytics", {"geo_enabled": False})
    return manager


@pytest.fixture
def app(config):
    app = create_app(config, bcrypt_rounds=4)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def services(app):
    return app.extensions["portfolio_services"]


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {ADMIN_TOKEN}"}

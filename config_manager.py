"""
Configuration management for the portfolio backend.
Handles loading, validating, and providing access to application settings.
"""

import os
import json
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass


@dataclass
class AppConfig:
    """Application configuration settings."""
    host: str
    port: int
    debug: bool
    api_token: str
    cors_allow_origins: list[str]
    log_file: str = ""
    trusted_proxies: int = 1


@dataclass
class PathsConfig:
    """Path configuration settings."""
    uploads_dir: str
    blog_dir: str
    analytics_dir: str
    settings_dir: str
    blog_index_file: str
    uploads_base_url: str


@dataclass
class AnalyticsConfig:
    """Analytics collector configuration settings."""
    geo_enabled: bool
    geo_lookup_url: str
    geo_timeout_sec: float
    presence_ttl_sec: int
    default_days: int
    max_days: int
    top_n: int


@dataclass
class UploadConfig:
    """Upload and preview configuration settings."""
    preview_max_edge: int
    max_upload_mb: int
    max_blog_image_mb: int
    max_file_manager_mb: int
    allowed_image_extensions: list[str]
    file_manager_extensions: list[str]


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "web_app_config.json", base_dir: Optional[Path] = None):
        self.config_file = Path(config_file)
        self.base_dir = Path(base_dir) if base_dir else Path(__file__).parent
        self._config: Optional[Dict[str, Any]] = None
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration from file and environment variables."""
        # Start with default config
        self._config = self._get_default_config()

        # Load base config from file
        if self.config_file.exists():
            try:
                with open(self.config_file, 'r', encoding='utf-8') as f:
                    file_config = json.load(f)
                    # Merge file config with defaults
                    self._merge_config(file_config)
            except (json.JSONDecodeError, FileNotFoundError):
                # Keep default config if file is invalid or not found
                pass

        # Override with environment variables
        self._override_with_env()

    def _get_default_config(self) -> Dict[str, Any]:
        """Get default configuration."""
        return {
            "app": {
                "host": "0.0.0.0",
                "port": 8080,
                "debug": False,
                "api_token": "",
                "cors_allow_origins": ["*"],
                "log_file": "",
                "trusted_proxies": 1
            },
            "paths": {
                "uploads_dir": "uploads",
                "blog_dir": "blog-uploads",
                "analytics_dir": "analytics",
                "settings_dir": "settings",
                "blog_index_file": "blog-index.json",
                "uploads_base_url": ""
            },
            "analytics": {
                "geo_enabled": True,
                "geo_lookup_url": "http://ip-api.com/json/{ip}",
                "geo_timeout_sec": 1.0,
                "presence_ttl_sec": 300,
                "default_days": 30,
                "max_days": 365,
                "top_n": 10
            },
            "uploads": {
                "preview_max_edge": 600,
                "max_upload_mb": 25,
                "max_blog_image_mb": 10,
                "max_file_manager_mb": 50,
                "allowed_image_extensions": ["jpg", "jpeg", "png", "gif", "webp"],
                "file_manager_extensions": ["jpg", "jpeg", "png", "webp", "svg", "pdf", "zip"]
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config:
                if isinstance(values, dict):
                    self._config[section].update(values)
                else:
                    self._config[section] = values
            else:
                self._config[section] = values

    def _override_with_env(self) -> None:
        """Override configuration with environment variables."""
        # App settings
        if os.getenv("APP_HOST"):
            self._config["app"]["host"] = os.getenv("APP_HOST")

        if os.getenv("APP_PORT"):
            self._config["app"]["port"] = int(os.getenv("APP_PORT"))

        if os.getenv("APP_DEBUG"):
            self._config["app"]["debug"] = os.getenv("APP_DEBUG").lower() == "true"

        if os.getenv("API_TOKEN"):
            self._config["app"]["api_token"] = os.getenv("API_TOKEN")

        if os.getenv("CORS_ALLOW_ORIGINS"):
            self._config["app"]["cors_allow_origins"] = [
                origin.strip() for origin in os.getenv("CORS_ALLOW_ORIGINS").split(",") if origin.strip()
            ]

        if os.getenv("LOG_FILE"):
            self._config["app"]["log_file"] = os.getenv("LOG_FILE")

        if os.getenv("TRUSTED_PROXIES"):
            self._config["app"]["trusted_proxies"] = int(os.getenv("TRUSTED_PROXIES"))

        # Paths
        if os.getenv("UPLOADS_DIR"):
            self._config["paths"]["uploads_dir"] = os.getenv("UPLOADS_DIR")

        if os.getenv("BLOG_UPLOADS_DIR"):
            self._config["paths"]["blog_dir"] = os.getenv("BLOG_UPLOADS_DIR")

        if os.getenv("ANALYTICS_DIR"):
            self._config["paths"]["analytics_dir"] = os.getenv("ANALYTICS_DIR")

        if os.getenv("SETTINGS_DIR"):
            self._config["paths"]["settings_dir"] = os.getenv("SETTINGS_DIR")

        if os.getenv("UPLOADS_BASE_URL"):
            self._config["paths"]["uploads_base_url"] = os.getenv("UPLOADS_BASE_URL")

        # Analytics settings
        if os.getenv("GEO_ENABLED"):
            self._config["analytics"]["geo_enabled"] = os.getenv("GEO_ENABLED").lower() == "true"

        if os.getenv("GEO_LOOKUP_URL"):
            self._config["analytics"]["geo_lookup_url"] = os.getenv("GEO_LOOKUP_URL")

        if os.getenv("GEO_TIMEOUT_SEC"):
            self._config["analytics"]["geo_timeout_sec"] = float(os.getenv("GEO_TIMEOUT_SEC"))

        # Upload settings
        if os.getenv("MAX_UPLOAD_MB"):
            self._config["uploads"]["max_upload_mb"] = int(os.getenv("MAX_UPLOAD_MB"))

    def _resolve(self, value: str) -> Path:
        """Resolve a configured path relative to the base directory."""
        path = Path(value)
        return path if path.is_absolute() else self.base_dir / path

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"],
            api_token=app_config["api_token"] or "",
            cors_allow_origins=list(app_config["cors_allow_origins"]),
            log_file=str(self._resolve(app_config["log_file"])) if app_config.get("log_file") else "",
            trusted_proxies=int(app_config.get("trusted_proxies", 1))
        )

    def get_paths_config(self) -> PathsConfig:
        """Get paths configuration with directories resolved against the base dir."""
        paths_config = self._config["paths"]
        return PathsConfig(
            uploads_dir=str(self._resolve(paths_config["uploads_dir"])),
            blog_dir=str(self._resolve(paths_config["blog_dir"])),
            analytics_dir=str(self._resolve(paths_config["analytics_dir"])),
            settings_dir=str(self._resolve(paths_config["settings_dir"])),
            blog_index_file=str(self._resolve(paths_config["blog_index_file"])),
            uploads_base_url=paths_config["uploads_base_url"]
        )

    def get_analytics_config(self) -> AnalyticsConfig:
        """Get analytics configuration."""
        analytics_config = self._config["analytics"]
        return AnalyticsConfig(
            geo_enabled=analytics_config["geo_enabled"],
            geo_lookup_url=analytics_config["geo_lookup_url"],
            geo_timeout_sec=analytics_config["geo_timeout_sec"],
            presence_ttl_sec=analytics_config["presence_ttl_sec"],
            default_days=analytics_config["default_days"],
            max_days=analytics_config["max_days"],
            top_n=analytics_config["top_n"]
        )

    def get_upload_config(self) -> UploadConfig:
        """Get upload configuration."""
        upload_config = self._config["uploads"]
        return UploadConfig(
            preview_max_edge=upload_config["preview_max_edge"],
            max_upload_mb=upload_config["max_upload_mb"],
            max_blog_image_mb=upload_config["max_blog_image_mb"],
            max_file_manager_mb=upload_config["max_file_manager_mb"],
            allowed_image_extensions=list(upload_config["allowed_image_extensions"]),
            file_manager_extensions=list(upload_config["file_manager_extensions"])
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def update_section(self, section: str, values: Dict[str, Any]) -> None:
        """Override values of one configuration section in memory."""
        self._config.setdefault(section, {}).update(values)

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()

    def save_config(self) -> None:
        """Save current configuration to file."""
        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(self._config, f, indent=2, ensure_ascii=False)

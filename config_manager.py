"""
Configuration management for the Site Drop deployment service.
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


@dataclass
class DeployConfig:
    """Hosting provider configuration settings."""
    token: str
    api_base: str
    provider_domain: str
    timeout_seconds: int


@dataclass
class QuotaSettings:
    """Per-client quota configuration settings."""
    daily_limit: int
    cooldown_seconds: int
    eviction_hours: int


class ConfigManager:
    """Manages application configuration loading and access."""

    def __init__(self, config_file: str = "site_drop_config.json"):
        self.config_file = Path(config_file)
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
                "port": 3000,
                "debug": False
            },
            "deploy": {
                "token": "",
                "api_base": "https://api.vercel.com",
                "provider_domain": "vercel.app",
                "timeout_seconds": 30
            },
            "quota": {
                "daily_limit": 50,
                "cooldown_seconds": 300,
                "eviction_hours": 24
            }
        }

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """Merge file configuration with current config."""
        for section, values in file_config.items():
            if section in self._config and isinstance(values, dict):
                self._config[section].update(values)
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

        # Provider settings
        if os.getenv("VERCEL_TOKEN"):
            self._config["deploy"]["token"] = os.getenv("VERCEL_TOKEN")

        if os.getenv("VERCEL_API_BASE"):
            self._config["deploy"]["api_base"] = os.getenv("VERCEL_API_BASE")

        if os.getenv("DEPLOY_TIMEOUT_SECONDS"):
            self._config["deploy"]["timeout_seconds"] = int(os.getenv("DEPLOY_TIMEOUT_SECONDS"))

        # Quota settings
        if os.getenv("DAILY_DEPLOY_LIMIT"):
            self._config["quota"]["daily_limit"] = int(os.getenv("DAILY_DEPLOY_LIMIT"))

        if os.getenv("DEPLOY_COOLDOWN_SECONDS"):
            self._config["quota"]["cooldown_seconds"] = int(os.getenv("DEPLOY_COOLDOWN_SECONDS"))

    def get_app_config(self) -> AppConfig:
        """Get application configuration."""
        app_config = self._config["app"]
        return AppConfig(
            host=app_config["host"],
            port=app_config["port"],
            debug=app_config["debug"]
        )

    def get_deploy_config(self) -> DeployConfig:
        """Get hosting provider configuration."""
        deploy_config = self._config["deploy"]
        return DeployConfig(
            token=deploy_config["token"],
            api_base=deploy_config["api_base"],
            provider_domain=deploy_config["provider_domain"],
            timeout_seconds=deploy_config["timeout_seconds"]
        )

    def get_quota_settings(self) -> QuotaSettings:
        """Get quota configuration."""
        quota_config = self._config["quota"]
        return QuotaSettings(
            daily_limit=quota_config["daily_limit"],
            cooldown_seconds=quota_config["cooldown_seconds"],
            eviction_hours=quota_config["eviction_hours"]
        )

    def get_config(self) -> Dict[str, Any]:
        """Get raw configuration dictionary."""
        return self._config.copy()

    def reload(self) -> None:
        """Reload configuration from file."""
        self._load_config()


# Global configuration instance
config_manager = ConfigManager()


def get_app_config() -> AppConfig:
    """Get application configuration."""
    return config_manager.get_app_config()


def get_deploy_config() -> DeployConfig:
    """Get hosting provider configuration."""
    return config_manager.get_deploy_config()


def get_quota_settings() -> QuotaSettings:
    """Get quota configuration."""
    return config_manager.get_quota_settings()


def reload_config() -> None:
    """Reload configuration."""
    config_manager.reload()

"""Configuration management using Pydantic models."""

import json
import logging
import os
import re
import shutil
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .constants import (
    DEFAULT_API_VERSION,
    DEFAULT_AUTH_URL,
    DEFAULT_BASE_URL,
    DEFAULT_OPEN_TIMEOUT_SECONDS,
    DEFAULT_RETRY_LIMIT,
    DEFAULT_TIMEOUT_SECONDS,
    AuthType,
    GrantType,
)

logger = logging.getLogger(__name__)


# Environment variables which override values from config.yaml
ENV_OVERRIDES = {
    "BOOKSHARE_API_KEY": "api_key",
    "BOOKSHARE_BASE_URL": "base_url",
    "BOOKSHARE_AUTH_URL": "auth_url",
    "BOOKSHARE_API_VERSION": "api_version",
    "BOOKSHARE_USERNAME": "username",
    "BOOKSHARE_PASSWORD": "password",
    "BOOKSHARE_TEST_USERS": "test_users",
}

REQUIRED_SETTINGS = ("api_key", "base_url", "auth_url")


def normalize_url(url: Optional[str], version: Optional[str] = None) -> Optional[str]:
    """
    Force an "https://" scheme and, if *version* is given, make sure the URL
    ends with exactly one "/<version>" path segment.
    """
    if not url:
        return None
    url = re.sub(r"^[a-z]+://", "", url.strip()).rstrip("/")
    url = f"https://{url}"
    if version and not url.endswith(f"/{version}"):
        url = f"{url}/{version}"
    return url


class ServiceConfig(BaseModel):
    """Connection settings for one remote API service."""

    base_url: Optional[str] = DEFAULT_BASE_URL
    auth_url: Optional[str] = DEFAULT_AUTH_URL
    api_key: Optional[str] = None
    api_version: str = DEFAULT_API_VERSION
    timeout: float = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    open_timeout: float = Field(default=DEFAULT_OPEN_TIMEOUT_SECONDS, gt=0)
    retry_after_limit: int = Field(default=DEFAULT_RETRY_LIMIT, ge=0)
    caching: bool = False
    callback_url: str = "http://localhost:3000"
    username: Optional[str] = None
    password: Optional[str] = None
    auth_type: AuthType = AuthType.CODE
    grant_type: GrantType = GrantType.AUTHORIZATION_CODE
    test_users: dict[str, str] = Field(default_factory=dict)
    production: bool = False

    @field_validator("api_version", mode="before")
    @classmethod
    def ensure_version_prefix(cls, v):
        """Accept "2" as well as "v2"."""
        v = str(v or DEFAULT_API_VERSION).strip().strip("/")
        return v if v.startswith("v") else f"v{v}"

    @field_validator("test_users", mode="before")
    @classmethod
    def parse_test_users(cls, v):
        """Allow the test user table to be given as a JSON string."""
        if v is None or v == "":
            return {}
        if isinstance(v, str):
            v = json.loads(v)
        return {user: token for user, token in v.items() if user and token}

    @model_validator(mode="after")
    def normalize_urls(self):
        """Anchor the base URL under the API version; force https."""
        self.base_url = normalize_url(self.base_url, self.api_version)
        self.auth_url = normalize_url(self.auth_url)
        return self

    def check(self) -> list[str]:
        """
        Log an error for each required setting which is missing.
        Returns the names of the missing settings.
        """
        missing = [name for name in REQUIRED_SETTINGS if not getattr(self, name)]
        for name in missing:
            logger.error(f"Missing BOOKSHARE_{name.upper()}")
        return missing


class Config(BaseModel):
    """Root configuration model."""
    bookshare: ServiceConfig = Field(default_factory=ServiceConfig)
    log_level: str = "INFO"


class Settings:
    """Application settings loaded from config.yaml and the environment."""

    def __init__(self, config_path: Optional[Path] = None, environ: Optional[dict] = None):
        """Load and validate configuration."""
        self.config_path = config_path or self._get_config_path()
        self.environ = os.environ if environ is None else environ

        if not self.config_path.exists():
            self._create_config_template()

        self._load_config()

    def _get_config_path(self) -> Path:
        """Get config file path based on environment."""
        if os.path.exists("/.dockerenv"):
            return Path("/app/data/config.yaml")
        return Path("data/config.yaml")

    def _create_config_template(self) -> None:
        """Create config template from example."""
        example_path = Path("config.example.yaml")
        if example_path.exists():
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy(example_path, self.config_path)
            logger.info(f"Created config template: {self.config_path}")

    def _load_config(self) -> None:
        """Load configuration from YAML (if present) and apply overrides."""
        raw_config = {}
        if self.config_path.exists():
            with open(self.config_path, "r", encoding="utf-8") as f:
                raw_config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")

        service = dict(raw_config.get("bookshare") or {})
        for var, name in ENV_OVERRIDES.items():
            value = self.environ.get(var)
            if value:
                service[name] = value
        raw_config["bookshare"] = service

        config = Config(**raw_config)
        self.service = config.bookshare
        self.log_level = config.log_level


# Singleton cache for settings
_SETTINGS_SINGLETON = None


def get_settings() -> Settings:
    """Get (cached) application settings singleton."""
    global _SETTINGS_SINGLETON
    if _SETTINGS_SINGLETON is None:
        _SETTINGS_SINGLETON = Settings()
    return _SETTINGS_SINGLETON


def reload_settings() -> Settings:
    """Force reload of application settings singleton."""
    global _SETTINGS_SINGLETON
    _SETTINGS_SINGLETON = Settings()
    return _SETTINGS_SINGLETON

"""Configuration loader for the locale registry."""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from src.locale_registry.core.resolver import DEFAULT_MISSING_TEMPLATE, validate_missing_template

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "LOCALE_REGISTRY_CONFIG"


class I18nConfig(BaseModel):
    """Locale registry configuration."""

    default_locale: str = Field(default="zh", description="Locale active at startup")
    fallback_locale: str | None = Field(
        default="en", description="Locale consulted when a key is missing (None disables)"
    )
    locale_dir: str = Field(default="locale", description="Directory holding locale files")
    missing_template: str = Field(
        default=DEFAULT_MISSING_TEMPLATE, description="Placeholder for missing keys"
    )
    strict_compatibility: bool = Field(
        default=False, description="Fail startup when locales expose different keys"
    )

    @field_validator("default_locale")
    @classmethod
    def validate_default_locale(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("default_locale cannot be empty")
        return v

    @field_validator("fallback_locale")
    @classmethod
    def validate_fallback_locale(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v

    @field_validator("missing_template")
    @classmethod
    def validate_template(cls, v: str) -> str:
        return validate_missing_template(v)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO")
    file: str | None = Field(default=None)


class Settings(BaseModel):
    """Complete application settings."""

    i18n: I18nConfig = Field(default_factory=I18nConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Path | None:
    """Find settings.yaml: LOCALE_REGISTRY_CONFIG env, project root, or cwd."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    current = Path(__file__).resolve()
    for parent in current.parents:
        config_path = parent / "config" / "settings.yaml"
        if config_path.exists():
            return config_path
        if (parent / "pyproject.toml").exists():
            break

    cwd_config = Path("config/settings.yaml")
    if cwd_config.exists():
        return cwd_config

    return None


def load_settings_from_file(path: Path) -> dict[str, Any]:
    """Load settings dict from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data or {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get application settings (cached). Falls back to defaults on a broken file."""
    config_path = find_config_file()

    if config_path:
        try:
            data = load_settings_from_file(config_path)
            return Settings.model_validate(data)
        except Exception as e:
            logger.warning("Failed to load config from %s: %s. Using default settings", config_path, e)

    return Settings()


def reset_settings() -> None:
    """Clear cached settings."""
    get_settings.cache_clear()


def reload_settings() -> Settings:
    """Force reload settings from file."""
    reset_settings()
    return get_settings()

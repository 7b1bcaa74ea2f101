"""Locale registry: load, validate and resolve nested UI translation tables."""

from src.locale_registry.core.errors import (
    I18nError,
    IncompatibleLocales,
    MalformedBundle,
    UnknownLocale,
)
from src.locale_registry.core.resolver import LocaleRegistry
from src.locale_registry.core.resource_table import NOT_FOUND, LocaleBundle
from src.locale_registry.services.bundle_loader import BundleLoader, build_registry
from src.locale_registry.services.registry_logger import (
    setup_logging_from_config,
    setup_unified_logging,
)

__all__ = [
    "NOT_FOUND",
    "BundleLoader",
    "I18nError",
    "IncompatibleLocales",
    "LocaleBundle",
    "LocaleRegistry",
    "MalformedBundle",
    "UnknownLocale",
    "build_registry",
    "setup_logging_from_config",
    "setup_unified_logging",
]

"""
Pytest configuration and shared fixtures.
"""

import json
from pathlib import Path

import pytest

from src.locale_registry.core.resolver import LocaleRegistry

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture
def locale_dir():
    """The project's shipped locale directory."""
    return PROJECT_ROOT / "locale"


@pytest.fixture
def zh_data(locale_dir):
    """Raw zh console bundle."""
    with open(locale_dir / "zh.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def en_data(locale_dir):
    """Raw en console bundle."""
    with open(locale_dir / "en.json", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def registry(zh_data, en_data):
    """Registry with zh active and en as fallback."""
    registry = LocaleRegistry(default_locale="zh", fallback_locale="en")
    registry.load("zh", zh_data)
    registry.load("en", en_data)
    return registry

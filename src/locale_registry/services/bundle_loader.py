"""
Locale bundle files.

Reads locale data from a directory and feeds it to a LocaleRegistry.
Two layouts are supported and may be combined:

    locale/zh.json            # whole bundle (root group)
    locale/en.yaml
    locale/zh/guacamole.json  # one top-level group, named by the file stem

JSON and YAML sources are rejected when they repeat a key within one object,
since the parsed dict would silently keep only the last value.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from src.locale_registry.core.config import Settings, get_settings
from src.locale_registry.core.errors import IncompatibleLocales, MalformedBundle, UnknownLocale
from src.locale_registry.core.resolver import LocaleRegistry
from src.locale_registry.core.resource_table import LocaleBundle

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = (".json", ".yaml", ".yml")


def _unique_object(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in pairs:
        if key in result:
            raise ValueError(f"duplicate key '{key}'")
        result[key] = value
    return result


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that refuses duplicate mapping keys."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict[Any, Any]:
        seen: set[Any] = set()
        for key_node, _value_node in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            if key in seen:
                raise yaml.constructor.ConstructorError(
                    None, None, f"duplicate key '{key}'", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _project_root() -> Path:
    # src/locale_registry/services -> project root
    return Path(__file__).parent.parent.parent.parent


def resolve_locale_dir(locale_dir: str | Path) -> Path:
    """Resolve a configured locale directory (relative paths: project root, then cwd)."""
    path = Path(locale_dir)
    if path.is_absolute():
        return path

    project_path = _project_root() / path
    if project_path.exists():
        return project_path
    return path


class BundleLoader:
    """
    Loader for locale bundle files.

    Examples:
        >>> loader = BundleLoader(Path("locale"))
        >>> loader.available_locales()
        ['en', 'zh']
        >>> loader.load("zh").get("menu.oneterm")
        '堡垒机'
    """

    def __init__(self, locale_dir: Path | None = None):
        """
        Initialize bundle loader.

        Args:
            locale_dir: Directory containing locale files.
                        Defaults to the project's locale/ directory.
        """
        if locale_dir is None:
            locale_dir = _project_root() / "locale"

        self.locale_dir = Path(locale_dir)

    def _check_dir(self) -> None:
        if not self.locale_dir.exists():
            raise FileNotFoundError(f"Locale directory not found: {self.locale_dir}")

    def available_locales(self) -> list[str]:
        """
        List locale tags with at least one file.

        Raises:
            FileNotFoundError: If the locale directory doesn't exist
        """
        self._check_dir()

        tags: set[str] = set()
        for path in self.locale_dir.iterdir():
            if path.name.startswith("."):
                continue
            if path.is_dir():
                tags.add(path.name)
            elif path.is_file() and path.suffix in SUPPORTED_SUFFIXES:
                tags.add(path.stem)
        return sorted(tags)

    def _read_file(self, locale: str, path: Path) -> Any:
        try:
            with open(path, encoding="utf-8") as f:
                if path.suffix == ".json":
                    return json.load(f, object_pairs_hook=_unique_object)
                return yaml.load(f, Loader=_UniqueKeyLoader) or {}
        except (ValueError, yaml.YAMLError) as exc:
            raise MalformedBundle(locale, "", f"cannot parse {path.name}: {exc}") from exc

    def read(self, locale: str) -> dict[str, Any]:
        """
        Read the raw nested data for one locale.

        Raises:
            FileNotFoundError: If the locale directory doesn't exist
            UnknownLocale: If no file belongs to ``locale``
            MalformedBundle: On parse errors, duplicate keys, several root
                files, or a group file clashing with a root key
        """
        self._check_dir()

        root_files = [
            self.locale_dir / f"{locale}{suffix}"
            for suffix in SUPPORTED_SUFFIXES
            if (self.locale_dir / f"{locale}{suffix}").is_file()
        ]
        group_dir = self.locale_dir / locale

        if not root_files and not group_dir.is_dir():
            raise UnknownLocale(locale)
        if len(root_files) > 1:
            names = ", ".join(p.name for p in root_files)
            raise MalformedBundle(locale, "", f"multiple root files: {names}")

        data: dict[str, Any] = {}
        if root_files:
            content = self._read_file(locale, root_files[0])
            if not isinstance(content, dict):
                raise MalformedBundle(
                    locale, "", f"{root_files[0].name} must contain a mapping"
                )
            data = content

        if group_dir.is_dir():
            for path in sorted(group_dir.iterdir()):
                if not path.is_file() or path.suffix not in SUPPORTED_SUFFIXES:
                    continue
                if path.stem in data:
                    raise MalformedBundle(
                        locale, path.stem, f"group file {path.name} clashes with an existing key"
                    )
                data[path.stem] = self._read_file(locale, path)

        return data

    def load(self, locale: str) -> LocaleBundle:
        """Read and validate one locale into a LocaleBundle."""
        bundle = LocaleBundle.load(locale, self.read(locale))
        logger.debug("Loaded locale '%s' from %s", locale, self.locale_dir)
        return bundle

    def load_into(self, registry: LocaleRegistry, locales: list[str] | None = None) -> list[str]:
        """
        Load locales and register them.

        Args:
            registry: Target registry
            locales: Tags to load (defaults to all available)

        Returns:
            Tags that were registered
        """
        if locales is None:
            locales = self.available_locales()

        for locale in locales:
            registry.register(self.load(locale))
        return list(locales)


def build_registry(settings: Settings | None = None) -> LocaleRegistry:
    """
    Create a registry from settings and load every available locale.

    Args:
        settings: Application settings (defaults to get_settings())

    Returns:
        Registry with the configured default locale active

    Raises:
        IncompatibleLocales: If locales diverge and strict_compatibility is set
    """
    if settings is None:
        settings = get_settings()
    config = settings.i18n

    registry = LocaleRegistry(
        default_locale=config.default_locale,
        fallback_locale=config.fallback_locale,
        missing_template=config.missing_template,
    )
    loader = BundleLoader(resolve_locale_dir(config.locale_dir))
    loaded = loader.load_into(registry)
    logger.info("Loaded locales from %s: %s", loader.locale_dir, ", ".join(loaded) or "-")

    if config.default_locale not in registry.locales:
        logger.warning("Default locale '%s' has no bundle", config.default_locale)
        return registry

    if config.fallback_locale and config.fallback_locale not in registry.locales:
        logger.warning("Fallback locale '%s' has no bundle", config.fallback_locale)

    diffs = [d for d in registry.check_compatibility() if not d.is_compatible]
    for diff in diffs:
        logger.warning(
            "Locale '%s' diverges from '%s': %d missing, %d extra",
            diff.candidate,
            diff.reference,
            len(diff.missing),
            len(diff.extra),
        )
    if diffs and config.strict_compatibility:
        raise IncompatibleLocales(diffs)

    return registry

"""
Locale registry and key resolver.

The registry owns every loaded LocaleBundle plus the active locale, and turns
key paths into display strings. Resolution follows a fallback chain:

1. Requested locale (explicit, or the active one)
2. Fallback locale (configured, or given per call)
3. Missing placeholder, e.g. "[MISSING: log.missing]"

Thread safety: all state lives in one immutable snapshot. Writers serialize
on a lock and publish a new snapshot with a single assignment; readers grab
the snapshot once per call and never lock.
"""

import logging
import threading
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, NamedTuple

from src.locale_registry.core.errors import UnknownLocale
from src.locale_registry.core.message_template import MessageRenderer
from src.locale_registry.core.negotiation import negotiate_locale
from src.locale_registry.core.resource_table import (
    NOT_FOUND,
    KeyPath,
    LocaleBundle,
    join_key_path,
)
from src.locale_registry.models.translation import LocaleDiff
from src.locale_registry.services.locale_audit import diff_bundles

logger = logging.getLogger(__name__)

DEFAULT_MISSING_TEMPLATE = "[MISSING: {key}]"

# Marks "use the registry's configured fallback" in resolve()/render()
_CONFIGURED = object()


def validate_missing_template(template: str) -> str:
    """
    Check that a placeholder format renders a non-empty text naming the key.

    Raises:
        ValueError: If the template lacks "{key}" or uses other fields
    """
    marker = "\x00"
    try:
        rendered = template.format(key=marker)
    except (KeyError, IndexError, ValueError) as exc:
        raise ValueError(f"Invalid missing_template {template!r}: {exc}") from exc

    if marker not in rendered:
        raise ValueError("missing_template must contain '{key}'")
    return template


class _Snapshot(NamedTuple):
    bundles: Mapping[str, LocaleBundle]
    active: str

    def find(self, locale: Any) -> LocaleBundle | None:
        # Lookups are total: a non-string tag is simply not registered
        if not isinstance(locale, str):
            return None
        return self.bundles.get(locale)


class LocaleRegistry:
    """
    Registered locale bundles plus the active locale.

    Construct one per application and pass it to whatever renders labels;
    there is no module-level instance.

    Examples:
        >>> registry = LocaleRegistry(default_locale="zh", fallback_locale="en")
        >>> zh = registry.load("zh", {"menu": {"oneterm": "堡垒机"}})
        >>> en = registry.load("en", {"menu": {"oneterm": "Bastion"}, "log": {"time": "Time"}})
        >>> registry.resolve("menu.oneterm")
        '堡垒机'
        >>> registry.resolve("log.time")  # Falls back to en
        'Time'
        >>> registry.resolve("log.missing")
        '[MISSING: log.missing]'
    """

    def __init__(
        self,
        default_locale: str = "zh",
        fallback_locale: str | None = "en",
        missing_template: str = DEFAULT_MISSING_TEMPLATE,
    ):
        """
        Initialize an empty registry.

        Args:
            default_locale: Locale that is active until set_active_locale()
            fallback_locale: Locale consulted when the requested one misses
            missing_template: Placeholder format; must contain "{key}"
        """
        validate_missing_template(missing_template)

        self.default_locale = default_locale
        self.fallback_locale = fallback_locale
        self.missing_template = missing_template
        self._renderer = MessageRenderer()
        self._write_lock = threading.Lock()
        self._snapshot = _Snapshot(bundles=MappingProxyType({}), active=default_locale)

    # ------------------------------------------------------------------
    # Bundle management (writers)
    # ------------------------------------------------------------------

    def register(self, bundle: LocaleBundle) -> None:
        """Install a bundle, replacing any bundle with the same locale."""
        with self._write_lock:
            current = self._snapshot
            bundles = dict(current.bundles)
            replaced = bundle.locale in bundles
            bundles[bundle.locale] = bundle
            self._snapshot = current._replace(bundles=MappingProxyType(bundles))

        logger.info(
            "%s locale bundle '%s'", "Reloaded" if replaced else "Registered", bundle.locale
        )

    def load(self, locale: str, data: Mapping[str, Any]) -> LocaleBundle:
        """
        Build a bundle from nested data and register it.

        Raises:
            MalformedBundle: If data is not a tree of strings. Nothing is
                installed and any previous bundle for ``locale`` stays.
        """
        bundle = LocaleBundle.load(locale, data)
        self.register(bundle)
        return bundle

    def unregister(self, locale: str) -> None:
        """
        Remove a locale.

        Raises:
            UnknownLocale: If the locale is not registered
            ValueError: If the locale is currently active
        """
        with self._write_lock:
            current = self._snapshot
            if locale not in current.bundles:
                raise UnknownLocale(locale)
            if locale == current.active:
                raise ValueError(f"Cannot unregister the active locale '{locale}'")

            bundles = {tag: b for tag, b in current.bundles.items() if tag != locale}
            self._snapshot = current._replace(bundles=MappingProxyType(bundles))

        logger.info("Unregistered locale bundle '%s'", locale)

    def set_active_locale(self, locale: str) -> None:
        """
        Switch the locale used by calls that do not name one.

        Raises:
            UnknownLocale: If no bundle is registered for ``locale``. The
                active locale is left unchanged.
        """
        with self._write_lock:
            current = self._snapshot
            if locale not in current.bundles:
                raise UnknownLocale(locale)
            self._snapshot = current._replace(active=locale)

        if current.active != locale:
            logger.info("Active locale switched: %s -> %s", current.active, locale)

    # ------------------------------------------------------------------
    # Queries (readers)
    # ------------------------------------------------------------------

    @property
    def active_locale(self) -> str:
        return self._snapshot.active

    @property
    def locales(self) -> tuple[str, ...]:
        """Registered locale tags, in registration order."""
        return tuple(self._snapshot.bundles)

    def bundle(self, locale: str | None = None) -> LocaleBundle:
        """
        Get the bundle for a locale (active locale if None).

        Raises:
            UnknownLocale: If the locale is not registered
        """
        snapshot = self._snapshot
        tag = locale or snapshot.active
        try:
            return snapshot.bundles[tag]
        except KeyError:
            raise UnknownLocale(tag) from None

    def has_key(self, key_path: KeyPath, locale: str | None = None) -> bool:
        """Check whether a locale defines a key. No fallback is applied."""
        snapshot = self._snapshot
        bundle = snapshot.find(locale or snapshot.active)
        return bundle is not None and key_path in bundle

    def placeholder(self, key_path: KeyPath) -> str:
        """Diagnostic text shown in place of a missing translation."""
        return self.missing_template.format(key=join_key_path(key_path))

    def _lookup(
        self, snapshot: _Snapshot, key_path: KeyPath, locale: str | None, fallback: Any
    ) -> str | None:
        primary = locale or snapshot.active
        if fallback is _CONFIGURED:
            fallback = self.fallback_locale

        chain = [primary]
        if fallback and fallback != primary:
            chain.append(fallback)

        for tag in chain:
            bundle = snapshot.find(tag)
            if bundle is None:
                logger.debug("Locale %r not registered, skipping", tag)
                continue

            text = bundle.get(key_path)
            if text is not NOT_FOUND:
                if tag != primary:
                    logger.debug(
                        "Key '%s' missing in '%s', using '%s'",
                        join_key_path(key_path),
                        primary,
                        tag,
                    )
                return text

        logger.warning(
            "Missing translation for '%s' (locales tried: %s)",
            join_key_path(key_path),
            ", ".join(str(tag) for tag in chain),
        )
        return None

    def resolve(
        self,
        key_path: KeyPath,
        locale: str | None = None,
        fallback_locale: Any = _CONFIGURED,
    ) -> str:
        """
        Get the display string for a key, with fallback.

        Never raises for a missing key or unknown locale; the result is
        always a non-empty string.

        Args:
            key_path: Dotted string or sequence of segments
            locale: Locale to read from. If None, uses the active locale.
            fallback_locale: Locale tried on a miss. Defaults to the
                registry's fallback_locale; pass None to disable.

        Returns:
            The translation, or a placeholder containing the key path

        Examples:
            >>> registry.resolve("sessionTable.disconnectSuccess")
            '断开成功'
            >>> registry.resolve("menu.oneterm", locale="en")
            'Bastion Host'
        """
        text = self._lookup(self._snapshot, key_path, locale, fallback_locale)
        if text is None:
            return self.placeholder(key_path)
        return text

    def render(
        self,
        key_path: KeyPath,
        locale: str | None = None,
        fallback_locale: Any = _CONFIGURED,
        **data: Any,
    ) -> str:
        """
        Resolve a key and interpolate template data into it.

        Examples:
            >>> registry.render("notice.sessionEnd", sessionId="s-1")
            '会话 s-1 已结束'
        """
        text = self._lookup(self._snapshot, key_path, locale, fallback_locale)
        if text is None:
            return self.placeholder(key_path)
        return self._renderer.render(text, **data)

    def negotiate(self, lang: str | None = None, accept_language: str | None = None) -> str:
        """
        Pick a registered locale for a request.

        Args:
            lang: Explicit language choice from the request
            accept_language: Accept-Language header value

        Returns:
            Best matching registered locale, or the active locale
        """
        snapshot = self._snapshot
        chosen = negotiate_locale(
            snapshot.bundles,
            lang=lang,
            accept_language=accept_language,
            default=snapshot.active,
        )
        return chosen or snapshot.active

    def check_compatibility(self, reference: str | None = None) -> list[LocaleDiff]:
        """
        Compare every registered locale against a reference locale.

        Args:
            reference: Reference locale (defaults to the active locale)

        Returns:
            One LocaleDiff per other registered locale

        Raises:
            UnknownLocale: If the reference locale is not registered
        """
        snapshot = self._snapshot
        tag = reference or snapshot.active
        if tag not in snapshot.bundles:
            raise UnknownLocale(tag)

        ref_bundle = snapshot.bundles[tag]
        return [
            diff_bundles(ref_bundle, bundle)
            for locale, bundle in snapshot.bundles.items()
            if locale != tag
        ]

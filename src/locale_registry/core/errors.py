"""Exceptions raised by the locale registry."""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.locale_registry.models.translation import LocaleDiff


class I18nError(Exception):
    """Base class for all locale registry errors."""


class MalformedBundle(I18nError, ValueError):
    """
    Locale data does not have the tree-of-strings shape.

    Raised while loading a bundle. The bundle is not installed, so whatever
    bundle was previously registered under the same locale stays active.

    Attributes:
        locale: Locale tag being loaded
        key_path: Dotted path of the offending node ("" for the root)
        reason: Human-readable description of the problem
    """

    def __init__(self, locale: str, key_path: str, reason: str):
        self.locale = locale
        self.key_path = key_path
        self.reason = reason
        where = f"at '{key_path}'" if key_path else "at root"
        super().__init__(f"Malformed bundle '{locale}' {where}: {reason}")


class UnknownLocale(I18nError, LookupError):
    """A locale tag has no registered bundle."""

    def __init__(self, locale: str):
        self.locale = locale
        super().__init__(f"Locale not registered: '{locale}'")


class IncompatibleLocales(I18nError):
    """Registered locales expose different key sets (strict mode only)."""

    def __init__(self, diffs: list["LocaleDiff"]):
        self.diffs = diffs
        names = ", ".join(f"{d.reference}->{d.candidate}" for d in diffs)
        super().__init__(f"Locales are not structurally compatible: {names}")

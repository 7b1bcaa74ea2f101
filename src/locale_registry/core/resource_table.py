"""
Resource table: one locale's immutable translation tree.

A LocaleBundle is built once from nested mapping data and then only read.
Lookups walk the tree segment by segment, so groups keep their own
namespaces (``menu.publicKey`` and ``publicKey`` are different entries).
"""

import logging
from collections.abc import Iterator, Mapping, Sequence
from typing import Any, Union

import jsonschema
from pydantic import BaseModel, ConfigDict, Field

from src.locale_registry.core.errors import MalformedBundle
from src.locale_registry.core.schemas import validate_locale_bundle
from src.locale_registry.models.translation import (
    TranslationGroup,
    TranslationLeaf,
    TranslationNode,
)

logger = logging.getLogger(__name__)

KEY_SEPARATOR = "."

# Dotted string ("menu.oneterm") or explicit segments (("menu", "oneterm"))
KeyPath = Union[str, Sequence[str]]


class _NotFound:
    """Sentinel returned by lookups that miss. Falsy, single instance."""

    _instance: "_NotFound | None" = None

    def __new__(cls) -> "_NotFound":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_FOUND"


NOT_FOUND = _NotFound()


def split_key_path(key_path: KeyPath) -> tuple[str, ...]:
    """
    Split a key path into segments.

    Examples:
        >>> split_key_path("assetList.gatewayTip")
        ('assetList', 'gatewayTip')
        >>> split_key_path(["menu", "oneterm"])
        ('menu', 'oneterm')

    Raises:
        TypeError: If the path is neither a string nor a sequence of strings
    """
    if isinstance(key_path, str):
        return tuple(key_path.split(KEY_SEPARATOR))
    if isinstance(key_path, Sequence) and all(isinstance(s, str) for s in key_path):
        return tuple(key_path)
    raise TypeError(f"Invalid key path: {key_path!r}")


def join_key_path(key_path: KeyPath) -> str:
    """Render a key path as its dotted text form."""
    if isinstance(key_path, str):
        return key_path
    if isinstance(key_path, Sequence):
        return KEY_SEPARATOR.join(str(segment) for segment in key_path)
    return str(key_path)


def _normalize(value: Any, path: tuple[str, ...], ancestors: set[int], locale: str) -> Any:
    """Copy nested mappings into plain dicts, rejecting cycles."""
    if not isinstance(value, Mapping):
        return value

    marker = id(value)
    if marker in ancestors:
        raise MalformedBundle(locale, join_key_path(path), "cycle detected")

    ancestors.add(marker)
    try:
        return {
            key: _normalize(child, path + (str(key),), ancestors, locale)
            for key, child in value.items()
        }
    finally:
        ancestors.discard(marker)


def _deepest_error(error: jsonschema.ValidationError) -> jsonschema.ValidationError:
    # oneOf failures nest the real cause in .context; report the deepest node
    while error.context:
        error = max(error.context, key=lambda e: len(e.absolute_path))
    return error


def _build_group(data: dict[str, Any]) -> TranslationGroup:
    """Build the tagged tree from schema-valid data."""
    children: dict[str, TranslationNode] = {}
    for name, value in data.items():
        if isinstance(value, str):
            children[name] = TranslationLeaf(text=value)
        else:
            children[name] = _build_group(value)
    return TranslationGroup(children=children)


def _walk(group: TranslationGroup, prefix: tuple[str, ...]) -> Iterator[str]:
    for name, node in group.children.items():
        path = prefix + (name,)
        if isinstance(node, TranslationLeaf):
            yield KEY_SEPARATOR.join(path)
        else:
            yield from _walk(node, path)


def _to_plain(group: TranslationGroup) -> dict[str, Any]:
    return {
        name: node.text if isinstance(node, TranslationLeaf) else _to_plain(node)
        for name, node in group.children.items()
    }


class LocaleBundle(BaseModel):
    """
    Complete translation tree for one locale.

    Bundles are frozen; a newer version of a locale is installed by
    registering a whole new bundle, never by editing this one.

    Examples:
        >>> bundle = LocaleBundle.load("zh", {"menu": {"oneterm": "堡垒机"}})
        >>> bundle.get("menu.oneterm")
        '堡垒机'
        >>> bundle.get("menu.missing")
        NOT_FOUND
        >>> list(bundle.keys())
        ['menu.oneterm']
    """

    model_config = ConfigDict(frozen=True)

    locale: str = Field(..., description="Locale tag, e.g. 'zh' or 'en'")
    root: TranslationGroup = Field(
        default_factory=TranslationGroup, description="Top-level group"
    )

    @classmethod
    def load(cls, locale: str, data: Mapping[str, Any]) -> "LocaleBundle":
        """
        Validate nested data and build a bundle from it.

        Args:
            locale: Locale tag the data belongs to
            data: Nested mapping whose leaves are strings

        Returns:
            A new immutable LocaleBundle

        Raises:
            MalformedBundle: If the tag is blank, the data contains a cycle,
                a node that is neither a string nor a mapping, a key
                segment that is empty, contains '.', or is not a string,
                or the tree is nested deeper than the interpreter can walk
        """
        if not isinstance(locale, str) or not locale.strip():
            raise MalformedBundle(str(locale), "", "locale tag must be a non-empty string")

        try:
            normalized = _normalize(data, (), set(), locale)
            validate_locale_bundle(normalized)
            root = _build_group(normalized)
        except jsonschema.ValidationError as exc:
            error = _deepest_error(exc)
            path = join_key_path([str(p) for p in error.absolute_path])
            raise MalformedBundle(locale, path, error.message) from exc
        except RecursionError as exc:
            raise MalformedBundle(locale, "", "nesting too deep") from exc

        bundle = cls(locale=locale, root=root)
        logger.debug("Built bundle '%s'", locale)
        return bundle

    def get(self, key_path: KeyPath) -> "str | _NotFound":
        """
        Look up a translation without any fallback.

        Args:
            key_path: Dotted string or sequence of segments

        Returns:
            The stored string, or NOT_FOUND when the path is absent, ends
            on a group, or is not a valid key path at all
        """
        try:
            segments = split_key_path(key_path)
        except TypeError:
            return NOT_FOUND

        node: TranslationNode = self.root
        for segment in segments:
            if not isinstance(node, TranslationGroup):
                return NOT_FOUND
            child = node.child(segment)
            if child is None:
                return NOT_FOUND
            node = child

        if isinstance(node, TranslationLeaf):
            return node.text
        return NOT_FOUND

    def keys(self) -> Iterator[str]:
        """
        Iterate over all leaf paths in declaration order.

        Each call returns a new iterator. The order is a traversal detail
        and callers should not depend on it.
        """
        return _walk(self.root, ())

    def to_dict(self) -> dict[str, Any]:
        """Return the bundle as plain nested dicts and strings."""
        return _to_plain(self.root)

    def __len__(self) -> int:
        """Number of leaf translations."""
        return sum(1 for _ in self.keys())

    def __contains__(self, key_path: object) -> bool:
        return self.get(key_path) is not NOT_FOUND

"""
Locale audit: find key-set divergence between locale bundles.

Every locale shipped with the console should expose the same keys. A key
present in ``zh`` but absent from ``en`` is not an error at runtime (the
resolver falls back), but it is a translation gap worth reporting.
"""

from typing import TYPE_CHECKING

from src.locale_registry.models.translation import LocaleDiff

if TYPE_CHECKING:
    from src.locale_registry.core.resolver import LocaleRegistry
    from src.locale_registry.core.resource_table import LocaleBundle


def diff_bundles(reference: "LocaleBundle", candidate: "LocaleBundle") -> LocaleDiff:
    """
    Compare the leaf paths of two bundles.

    A path that is a leaf in one bundle and a group in the other shows up as
    missing (or extra) leaves, since only leaf paths are compared.

    Args:
        reference: Bundle treated as the source of truth
        candidate: Bundle checked against it

    Returns:
        LocaleDiff with missing/extra keys in reference declaration order
    """
    ref_keys = list(reference.keys())
    cand_keys = list(candidate.keys())
    ref_set = set(ref_keys)
    cand_set = set(cand_keys)

    return LocaleDiff(
        reference=reference.locale,
        candidate=candidate.locale,
        missing=tuple(k for k in ref_keys if k not in cand_set),
        extra=tuple(k for k in cand_keys if k not in ref_set),
    )


def audit_registry(registry: "LocaleRegistry", reference: str | None = None) -> list[LocaleDiff]:
    """Diff every registered locale against ``reference`` (default: active locale)."""
    return registry.check_compatibility(reference)


def format_report(diffs: list[LocaleDiff]) -> str:
    """
    Render diffs as a plain-text report.

    Examples:
        >>> print(format_report([LocaleDiff(reference="zh", candidate="en", missing=("log.time",))]))
        zh -> en: 1 missing, 0 extra
          - log.time
    """
    if not diffs:
        return "No other locales to compare"

    lines: list[str] = []
    for diff in diffs:
        if diff.is_compatible:
            lines.append(f"{diff.reference} -> {diff.candidate}: compatible")
            continue

        lines.append(
            f"{diff.reference} -> {diff.candidate}: "
            f"{len(diff.missing)} missing, {len(diff.extra)} extra"
        )
        lines.extend(f"  - {key}" for key in diff.missing)
        lines.extend(f"  + {key}" for key in diff.extra)

    return "\n".join(lines)

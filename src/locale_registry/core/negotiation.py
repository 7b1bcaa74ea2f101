"""
Locale negotiation.

Picks the locale for a request the way the console backend does: an explicit
``lang`` form value wins, then the ``Accept-Language`` header, then the
application default.
"""

import math
from collections.abc import Iterable


def parse_accept_language(header: str | None) -> list[tuple[str, float]]:
    """
    Parse an Accept-Language header into (tag, quality) pairs.

    Pairs are ordered by quality, highest first; ties keep header order.
    Items with q=0 or a q-value that is unparsable or outside (0, 1] are
    dropped.

    Examples:
        >>> parse_accept_language("en;q=0.8, zh-CN, zh;q=0.9")
        [('zh-CN', 1.0), ('zh', 0.9), ('en', 0.8)]
    """
    if not header:
        return []

    parsed: list[tuple[str, float]] = []
    for item in header.split(","):
        parts = [p.strip() for p in item.split(";")]
        tag = parts[0]
        if not tag:
            continue

        quality = 1.0
        for param in parts[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() != "q":
                continue
            try:
                quality = float(value)
            except ValueError:
                quality = 0.0

        if not (math.isfinite(quality) and 0 < quality <= 1):
            continue
        parsed.append((tag, quality))

    # sorted() is stable, so equal weights keep their header order
    return sorted(parsed, key=lambda pair: pair[1], reverse=True)


def match_locale(tag: str, available: Iterable[str]) -> str | None:
    """
    Match a requested tag against available locales.

    Exact matches win (case-insensitive); otherwise the primary subtag is
    tried, so ``zh-CN`` and ``zh_TW`` both match ``zh``.
    """
    candidates = {locale.lower(): locale for locale in available}
    wanted = tag.strip().lower().replace("_", "-")
    if not wanted:
        return None

    if wanted in candidates:
        return candidates[wanted]

    primary = wanted.split("-", 1)[0]
    return candidates.get(primary)


def negotiate_locale(
    available: Iterable[str],
    lang: str | None = None,
    accept_language: str | None = None,
    default: str | None = None,
) -> str | None:
    """
    Choose the best available locale for a request.

    Args:
        available: Registered locale tags
        lang: Explicit language choice (e.g. a ``lang`` form field)
        accept_language: Raw Accept-Language header
        default: Returned when nothing matches

    Returns:
        The chosen locale tag, or ``default``
    """
    available = list(available)

    if lang:
        matched = match_locale(lang, available)
        if matched:
            return matched

    for tag, _quality in parse_accept_language(accept_language):
        if tag == "*":
            break
        matched = match_locale(tag, available)
        if matched:
            return matched

    return default

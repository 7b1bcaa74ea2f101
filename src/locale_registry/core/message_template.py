"""
Message interpolation for translated strings.

Some messages carry template data, e.g. a session-ended notice that names the
session id. Markers use Jinja2 syntax: ``会话 {{ sessionId }} 已结束``.
"""

import logging
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

logger = logging.getLogger(__name__)


class MessageRenderer:
    """
    Renders translated strings that contain interpolation markers.

    Rendering never raises: a broken template or a missing variable is
    logged and the text is returned unrendered, so a bad translation cannot
    break the page showing it.

    Examples:
        >>> renderer = MessageRenderer()
        >>> renderer.render("会话 {{ sessionId }} 已结束", sessionId="abc")
        '会话 abc 已结束'
    """

    def __init__(self) -> None:
        self.env = Environment(
            autoescape=False,  # Output is plain text, the UI escapes
            undefined=StrictUndefined,  # Missing data is an authoring error
            keep_trailing_newline=True,
        )

    def render(self, text: str, **data: Any) -> str:
        """
        Interpolate ``data`` into ``text``.

        Args:
            text: Translated string, possibly with ``{{ name }}`` markers
            **data: Template variables

        Returns:
            Rendered string, or ``text`` unchanged if rendering fails
        """
        if not data and "{{" not in text and "{%" not in text:
            return text

        try:
            return self.env.from_string(text).render(**data)
        except TemplateError as exc:
            logger.warning("Failed to render message %r: %s", text, exc)
            return text

"""Normalization of raw values into renderable HTML content.

Anything implementing the ``__html__`` protocol is treated as already
rendered. Everything else is converted to text and escaped.
"""

from __future__ import annotations

from typing import Any, Optional

from markupsafe import Markup, escape

EMPTY_HTML = Markup("")


def is_html(value: Any) -> bool:
    """Whether ``value`` is an HTML content object."""
    return hasattr(value, "__html__")


def coerce_html(value: Any) -> Optional[Any]:
    """Coerce a value to HTML content.

    Content objects are returned unchanged rather than serialized, so a
    lazily rendered value is written out once, by whoever finally emits it.
    """
    if value is None:
        return None
    if is_html(value):
        return value
    return escape(str(value))


def to_markup(value: Any) -> Markup:
    """Serialize content (or None) to a concrete Markup string."""
    if value is None:
        return EMPTY_HTML
    if isinstance(value, Markup):
        return value
    if is_html(value):
        return Markup(value.__html__())
    return escape(str(value))

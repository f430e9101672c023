#!/usr/bin/env python3
"""Vitrine MCP Server - renders shapes and manages themes and templates.

Tool handlers close over the ``DisplayHost`` they were created for and call
the display engine in-process.
"""

import logging
from typing import TYPE_CHECKING, Annotated, Any, Optional

from fastmcp import FastMCP
from pydantic import Field

from .core.errors import DisplayError
from .core.shape import Shape, create_shape

if TYPE_CHECKING:
    from .host import DisplayHost

logger = logging.getLogger(__name__)


# --- Helpers ---


def shape_from_dict(data: dict[str, Any]) -> Shape:
    """Build a shape tree from a JSON object.

    ``type`` is required. ``items`` entries that are objects with a ``type``
    become nested shapes; anything else is kept as a plain value.
    """
    if not isinstance(data, dict) or not data.get("type"):
        raise ValueError("a shape needs a 'type'")
    shape = create_shape(str(data["type"]), **dict(data.get("properties") or {}))
    for item in data.get("items") or []:
        shape.add(shape_from_dict(item) if isinstance(item, dict) and "type" in item else item)

    metadata = shape.metadata
    for name in ("prefix", "display_type", "differentiator", "cache_id"):
        if data.get(name) is not None:
            setattr(metadata, name, str(data[name]))
    for alternate in data.get("alternates") or []:
        metadata.add_alternate(str(alternate))
    for wrapper in data.get("wrappers") or []:
        metadata.add_wrapper(str(wrapper))
    return shape


# --- App factory ---


def create_app(host: "DisplayHost") -> FastMCP:
    """Create the Vitrine MCP server.

    Args:
        host: DisplayHost instance (or mock with .display, .theme_manager, etc.).
    """
    app = FastMCP("vitrine")

    async def _render(shape: Shape, prefix: Optional[str]) -> str:
        try:
            html = await host.display.display(shape, prefix=prefix)
        except DisplayError as e:
            return f"Error: {e}"
        return "" if html is None else str(html)

    async def ping() -> str:
        """Health check."""
        return "pong"

    async def render_shape(
        shape_type: Annotated[str, Field(description="Shape type, e.g. 'Content' or 'Content__Blog'")],
        properties: Annotated[
            Optional[dict[str, Any]],
            Field(description="Named properties templates read as Model.<name>"),
        ] = None,
        items: Annotated[
            Optional[list[Any]],
            Field(description="Child values; objects with a 'type' are rendered as nested shapes"),
        ] = None,
        alternates: Annotated[
            Optional[list[str]],
            Field(description="Alternate binding names, most specific last"),
        ] = None,
        wrappers: Annotated[
            Optional[list[str]],
            Field(description="Wrapper binding names applied in order"),
        ] = None,
        display_type: Annotated[Optional[str], Field(description="Display type, e.g. 'Summary'")] = None,
        prefix: Annotated[Optional[str], Field(description="HTML field prefix")] = None,
    ) -> str:
        """Render a shape with the current theme and return its HTML."""
        try:
            shape = shape_from_dict({
                "type": shape_type,
                "properties": properties,
                "items": items,
                "alternates": alternates,
                "wrappers": wrappers,
                "display_type": display_type,
            })
        except ValueError as e:
            return f"Error: {e}"
        return await _render(shape, prefix)

    async def list_themes() -> list[dict]:
        """List installed themes with their base themes, marking the current one."""
        current = host.theme_manager.current
        return [
            {
                "id": theme.id,
                "name": theme.display_name,
                "base_theme": theme.base_theme,
                "current": theme.id == current,
            }
            for theme in host.theme_manager.list_themes()
        ]

    async def set_theme(
        theme_id: Annotated[Optional[str], Field(description="Theme id, or omit to render without a theme")] = None,
    ) -> dict:
        """Switch the theme used for rendering."""
        if not host.theme_manager.set_theme(theme_id):
            return {"error": f"Theme '{theme_id}' not found"}
        host.config.theme.current = theme_id
        if host.cache is not None:
            host.cache.clear()
        return {"status": "ok", "current": theme_id}

    async def list_shape_types() -> list[str]:
        """List binding names available in the current theme."""
        return host.shape_types()

    async def save_template(
        name: Annotated[str, Field(description="Binding name the template renders, e.g. 'Content__Blog'")],
        source: Annotated[str, Field(description="Jinja2 template source")],
    ) -> dict:
        """Store a template that overrides every definition of that binding name.

        Reports "saved" when the template was written to disk and "stored" when
        no template store path is configured and it only lives in memory.
        """
        try:
            host.template_store.set(name, source)
        except OSError as e:
            logger.error("Failed to save template %s: %s", name, e)
            return {"error": f"Failed to save template '{name}': {e}"}
        if host.cache is not None:
            host.cache.clear()
        status = "saved" if host.template_store.persistent else "stored"
        return {"status": status, "name": name}

    async def preview_template(
        name: Annotated[str, Field(description="Binding name the template renders")],
        source: Annotated[str, Field(description="Jinja2 template source to try")],
        shape: Annotated[dict[str, Any], Field(description="Shape to render: {type, properties, items, ...}")],
    ) -> str:
        """Render a shape with an unsaved template in place of the stored one."""
        try:
            preview = shape_from_dict(shape)
        except ValueError as e:
            return f"Error: {e}"
        # Previews must not be served from or stored in the cache
        preview.metadata.cache_id = None
        host.template_store.set_preview(name, source)
        try:
            return await _render(preview, None)
        finally:
            host.template_store.clear_previews()

    for fn in (ping, render_shape, list_themes, set_theme, list_shape_types, save_template, preview_template):
        app.tool()(fn)

    return app

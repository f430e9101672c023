"""Display host - wires configuration, definitions, themes and the display engine."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .config import CONFIG_PATH, VitrineConfig
from .core.cache import MemoryContentCache, ShapeCacheEvents
from .core.display import HtmlDisplay
from .core.events import DisplayTimingEvents, ShapeDisplayEvents
from .core.table_manager import ShapeTableManager
from .core.themes import ThemeManager
from .elements.provider import DefinitionShapeTableProvider, registry_themes
from .elements.registry import ShapeDefinitionRegistry
from .templating.renderer import TemplateRenderer
from .templating.resolver import TemplatesBindingResolver
from .templating.store import TemplateStore

logger = logging.getLogger(__name__)


class DisplayHost:
    """
    Owns one display engine and everything it depends on.

    Usage:
        host = DisplayHost(VitrineConfig.load())
        host.start()
        html = await host.display.display(create_shape("Content", title="Hi"))
        host.stop()
    """

    def __init__(self, config: Optional[VitrineConfig] = None, services: Optional[dict[str, Any]] = None):
        self.config = config or VitrineConfig()
        display_config = self.config.display

        self.registry = ShapeDefinitionRegistry(display_config.definition_paths or None)
        self.registry.load_all()

        self.renderer = TemplateRenderer()
        self.theme_manager = ThemeManager(
            source=lambda: registry_themes(self.registry),
            current=self.config.theme.current,
        )
        self.table_manager = ShapeTableManager(
            [DefinitionShapeTableProvider(self.registry, self.renderer)],
            self.theme_manager,
        )

        store_path = Path(display_config.template_store) if display_config.template_store else None
        self.template_store = TemplateStore(store_path)

        events: list[ShapeDisplayEvents] = [DisplayTimingEvents()]
        self.cache: Optional[MemoryContentCache] = None
        if self.config.cache.enabled:
            self.cache = MemoryContentCache(ttl=self.config.cache.ttl)
            events.append(ShapeCacheEvents(self.cache))

        self.display = HtmlDisplay(
            self.table_manager,
            self.theme_manager,
            events=events,
            resolvers=[TemplatesBindingResolver(self.template_store, self.renderer)],
            services=services,
            fail_fast_hooks=display_config.fail_fast_hooks,
        )

        self.registry.on_change(self._on_definition_change)

    def _on_definition_change(self, kind: str, name: str) -> None:
        logger.info("Definition %s/%s changed, rebuilding shape tables", kind, name)
        self.table_manager.invalidate()
        self.renderer.clear()
        if self.cache is not None:
            self.cache.clear()

    def start(self) -> None:
        """Start watching definitions if configured to."""
        if self.config.display.watch:
            self.registry.start_watching()

    def stop(self) -> None:
        self.registry.stop_watching()

    def shape_types(self) -> list[str]:
        """Names with a binding in the current theme's table."""
        table = self.table_manager.get_shape_table(self.theme_manager.current)
        return sorted(table.bindings)


async def serve(host: DisplayHost, bind: str = "127.0.0.1", port: int = 7780):
    """Serve the MCP app over streamable HTTP until cancelled."""
    import uvicorn

    from .server import create_app

    app = create_app(host)
    config = uvicorn.Config(app.http_app(transport="streamable-http"), host=bind, port=port, log_level="warning")
    await uvicorn.Server(config).serve()


def main():
    """Entry point for the display server."""
    parser = argparse.ArgumentParser(description="Render shapes through themed templates over MCP.")
    parser.add_argument("--config", type=Path, default=CONFIG_PATH, help="Path to the JSON config file")
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind")
    parser.add_argument("--port", type=int, default=7780, help="Port to bind")
    args = parser.parse_args()

    config = VitrineConfig.load(args.config)
    level = getattr(logging, config.logging.level.upper(), logging.INFO)
    logging.basicConfig(level=level, stream=sys.stderr, format="%(name)s %(levelname)s: %(message)s")

    host = DisplayHost(config)
    host.start()
    try:
        asyncio.run(serve(host, args.host, args.port))
    except KeyboardInterrupt:
        pass
    finally:
        host.stop()


if __name__ == "__main__":
    main()

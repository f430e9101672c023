"""Builds and caches one shape table per theme."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Optional, Protocol

from .descriptors import ShapeAlteration, ShapeTable, ShapeTableBuilder
from .themes import ThemeManager

logger = logging.getLogger(__name__)


class ShapeTableProvider(Protocol):
    """Contributes alterations, one builder per feature."""

    def discover(self) -> Iterable[ShapeTableBuilder]:
        ...


class ShapeTableManager:
    """
    Lazily builds the shape table of each theme and keeps it until invalidated.

    Alterations are applied module features first, then the theme chain from
    the most distant base theme to the theme itself, so the nearest
    definition of a binding wins. The table for ``None`` holds module
    alterations only.
    """

    def __init__(self, providers: Iterable[ShapeTableProvider], theme_manager: ThemeManager):
        self.providers = list(providers)
        self.theme_manager = theme_manager
        self._tables: dict[Optional[str], ShapeTable] = {}
        self._lock = threading.RLock()

    def get_shape_table(self, theme_id: Optional[str]) -> ShapeTable:
        table = self._tables.get(theme_id)
        if table is not None:
            return table
        with self._lock:
            table = self._tables.get(theme_id)
            if table is None:
                table = self._tables[theme_id] = self._build(theme_id)
        return table

    def invalidate(self) -> None:
        """Drop every cached table; the next lookup rebuilds."""
        with self._lock:
            self._tables.clear()
        logger.debug("Shape tables invalidated")

    def _build(self, theme_id: Optional[str]) -> ShapeTable:
        alterations: list[ShapeAlteration] = []
        for provider in self.providers:
            for builder in provider.discover():
                alterations.extend(builder.alterations)

        features: list[Optional[str]] = [None]
        if theme_id is not None:
            features.extend(reversed(self.theme_manager.theme_chain(theme_id)))

        ordered: list[ShapeAlteration] = []
        for feature in features:
            ordered.extend(a for a in alterations if a.feature == feature)

        table = ShapeTable.from_alterations(ordered)
        logger.info("Built shape table for theme %s: %r", theme_id or "<base>", table)
        return table

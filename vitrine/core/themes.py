"""Theme registry and the current-theme lookup used by the display engine.

Themes form a chain through ``base_theme``: a theme inherits every template
of its base theme and may override any of them.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ThemeInfo:
    """Identity and inheritance of one theme."""
    id: str
    name: str = ""
    base_theme: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or self.id


class ThemeManager:
    """
    Knows the available themes and which one is current.

    Usage:
        themes = ThemeManager(source=lambda: [ThemeInfo("TheAgency", base_theme="TheTheme")])
        themes.set_theme("TheAgency")
        theme = await themes.get_theme()
        themes.theme_chain("TheAgency")  # ['TheAgency', 'TheTheme']
    """

    def __init__(
        self,
        source: Callable[[], Iterable[ThemeInfo]],
        current: Optional[str] = None,
    ):
        self._source = source
        self._current = current
        self._lock = threading.Lock()

    def _themes(self) -> dict[str, ThemeInfo]:
        return {theme.id: theme for theme in self._source()}

    def list_themes(self) -> list[ThemeInfo]:
        """Get all known themes, sorted by id."""
        return sorted(self._themes().values(), key=lambda theme: theme.id)

    def get(self, theme_id: str) -> Optional[ThemeInfo]:
        return self._themes().get(theme_id)

    @property
    def current(self) -> Optional[str]:
        return self._current

    def set_theme(self, theme_id: Optional[str]) -> bool:
        """
        Make a theme current. None clears the current theme.

        Returns True if the theme was selected, False if it doesn't exist.
        """
        if theme_id is not None and theme_id not in self._themes():
            return False
        with self._lock:
            self._current = theme_id
        return True

    async def get_theme(self) -> Optional[ThemeInfo]:
        """Get the current theme, or None when unset or unknown."""
        with self._lock:
            current = self._current
        if current is None:
            return None
        theme = self.get(current)
        if theme is None:
            logger.warning("Current theme '%s' is not installed", current)
        return theme

    def theme_chain(self, theme_id: str) -> list[str]:
        """Get a theme followed by its base themes, nearest first.

        Unknown base themes end the chain and cycles are cut.
        """
        themes = self._themes()
        chain: list[str] = []
        scan: Optional[str] = theme_id
        while scan is not None and scan in themes and scan not in chain:
            chain.append(scan)
            scan = themes[scan].base_theme
        return chain

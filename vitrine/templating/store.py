"""Templates edited at run time, persisted as JSON.

Stored templates override every file-based definition. A preview layer sits
on top of them so an edited template can be tried before it is saved.
"""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


class TemplateStore:
    """Named template sources with an optional preview layer."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path is not None else None
        self._templates: dict[str, str] = {}
        self._previews: dict[str, str] = {}
        self._lock = threading.RLock()
        if self.path is not None:
            self.load()

    def get(self, name: str) -> Optional[str]:
        with self._lock:
            return self._templates.get(name)

    def get_preview(self, name: str) -> Optional[str]:
        with self._lock:
            return self._previews.get(name)

    def list_names(self) -> list[str]:
        with self._lock:
            return sorted(self._templates)

    @property
    def persistent(self) -> bool:
        return self.path is not None

    def set(self, name: str, source: str) -> None:
        """Store a template and persist the store.

        The template only becomes visible once it has been written, so a
        failed write leaves the store unchanged.
        """
        with self._lock:
            templates = {**self._templates, name: source}
            self._write(templates)
            self._templates = templates

    def remove(self, name: str) -> bool:
        with self._lock:
            if name not in self._templates:
                return False
            templates = {k: v for k, v in self._templates.items() if k != name}
            self._write(templates)
            self._templates = templates
            return True

    def set_preview(self, name: str, source: str) -> None:
        with self._lock:
            self._previews[name] = source

    def clear_previews(self) -> None:
        with self._lock:
            self._previews.clear()

    def load(self) -> None:
        """Load templates from disk. A missing or unreadable file leaves the store empty."""
        if self.path is None or not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text())
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Failed to load template store %s: %s", self.path, e)
            return
        templates = data.get("templates", {}) if isinstance(data, dict) else {}
        with self._lock:
            self._templates = {str(k): str(v) for k, v in templates.items()}

    def save(self) -> None:
        with self._lock:
            self._write(self._templates)

    def _write(self, templates: dict[str, str]) -> None:
        if self.path is None:
            return
        payload = json.dumps({"templates": templates}, indent=2, sort_keys=True)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        temp = self.path.with_suffix(".tmp")
        temp.write_text(payload)
        temp.rename(self.path)

"""
Shape definition registry - discovers, loads, caches, and hot-reloads YAML definitions.
"""

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from watchdog.observers import Observer
from watchdog.events import FileSystemEventHandler

logger = logging.getLogger(__name__)

YAML_SUFFIXES = ('.yaml', '.yml')
RELOAD_EVENTS = {'created', 'modified', 'deleted', 'moved'}


class DefinitionChangeHandler(FileSystemEventHandler):
    """Reloads a definition whenever a YAML file under a watched root changes.

    A move reloads both ends: the old name is dropped, the new one loaded.
    """

    def __init__(self, registry: "ShapeDefinitionRegistry"):
        self.registry = registry

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in RELOAD_EVENTS:
            return
        for path in (event.src_path, getattr(event, 'dest_path', '')):
            path = os.fsdecode(path)
            if path.endswith(YAML_SUFFIXES):
                self.registry.reload(path)


class ShapeDefinitionRegistry:
    """
    Central registry for module and theme shape definitions.

    Discovers and loads YAML files from definition directories. The first
    directory level is the kind (``modules`` or ``themes``), the file stem
    is the feature name:

        definitions/modules/contents.yaml   -> ('modules', 'contents')
        definitions/themes/TheAgency.yaml   -> ('themes', 'TheAgency')

    Supports hot-reloading via file system watching.

    Usage:
        registry = ShapeDefinitionRegistry(['site/definitions'])
        registry.load_all()
        registry.start_watching()

        agency = registry.get('themes', 'TheAgency')
    """

    def __init__(self, paths: Optional[list[str]] = None):
        """
        Initialize registry with definition directory paths.

        Args:
            paths: List of directory paths to search for definitions.
                   Defaults to the bundled ``definitions`` directory.
        """
        if paths is None:
            package_dir = Path(__file__).parent
            paths = [str(package_dir / 'definitions')]

        self.paths = [Path(p) for p in paths]
        self._definitions: dict[str, dict[str, Any]] = {}
        self._lock = threading.RLock()
        self._listeners: list[Callable[[str, str], None]] = []
        self._observers: list[Observer] = []
        self._watching = False

    def load_all(self) -> None:
        """Discover and load all YAML files from definition paths."""
        with self._lock:
            self._definitions.clear()
            for base_path in self.paths:
                if not base_path.exists():
                    continue
                for suffix in YAML_SUFFIXES:
                    for yaml_file in sorted(base_path.rglob(f'*{suffix}')):
                        self._load_file(yaml_file)

    def _load_file(self, file_path: Path) -> Optional[dict]:
        """Load a single YAML file and register its contents."""
        kind, name = self._parse_path(file_path)
        try:
            with open(file_path, 'r') as f:
                data = yaml.safe_load(f)
        except (yaml.YAMLError, IOError) as e:
            # Log but don't crash on bad files
            logger.warning("Failed to load %s: %s", file_path, e)
            return None

        if not isinstance(data, dict):
            if data is not None:
                logger.warning("Ignoring %s: expected a mapping", file_path)
            return None

        self._definitions.setdefault(kind, {})[name] = data
        return data

    def _parse_path(self, file_path: Path) -> tuple[str, str]:
        """
        Parse file path to extract kind and name.

        Args:
            file_path: Path like /path/to/definitions/themes/TheAgency.yaml

        Returns:
            Tuple of (kind, name) e.g., ('themes', 'TheAgency')
        """
        for base_path in self.paths:
            try:
                rel_path = file_path.relative_to(base_path)
            except ValueError:
                continue
            parts = rel_path.parts
            if len(parts) >= 2:
                return parts[0], rel_path.stem
            if len(parts) == 1:
                # Files directly under a definitions root are module definitions
                return 'modules', rel_path.stem

        return file_path.parent.name, file_path.stem

    def get(self, kind: str, name: str) -> Optional[dict]:
        """
        Retrieve a definition by kind and name.

        Args:
            kind: Definition category ('modules' or 'themes')
            name: Feature name (e.g., 'contents', 'TheAgency')

        Returns:
            Definition dict, or None if not found
        """
        with self._lock:
            return self._definitions.get(kind, {}).get(name)

    def get_all(self, kind: str) -> dict[str, Any]:
        """Get all definitions of a given kind, by name."""
        with self._lock:
            return dict(self._definitions.get(kind, {}))

    def list_kinds(self) -> list[str]:
        """List all available definition kinds."""
        with self._lock:
            return list(self._definitions.keys())

    def list_names(self, kind: str) -> list[str]:
        """List all definition names for a given kind."""
        with self._lock:
            return list(self._definitions.get(kind, {}).keys())

    def reload(self, file_path: str) -> None:
        """
        Reload a single definition file and notify listeners.

        A file that no longer exists is removed from the registry.

        Args:
            file_path: Path to the changed YAML file
        """
        path = Path(file_path)
        kind, name = self._parse_path(path)

        with self._lock:
            self._definitions.get(kind, {}).pop(name, None)
            if path.exists():
                self._load_file(path)

        # Notify listeners outside the lock
        self._notify_listeners(kind, name)

    def on_change(self, callback: Callable[[str, str], None]) -> None:
        """
        Register a callback for definition changes.

        Args:
            callback: Function called with (kind, name) when a definition changes
        """
        self._listeners.append(callback)

    def _notify_listeners(self, kind: str, name: str) -> None:
        """Notify all listeners of a definition change."""
        for listener in self._listeners:
            try:
                listener(kind, name)
            except Exception:
                logger.exception("Listener error on %s/%s", kind, name)

    def start_watching(self) -> None:
        """Start watching definition directories for changes."""
        if self._watching:
            return

        for base_path in self.paths:
            if not base_path.exists():
                continue
            observer = Observer()
            handler = DefinitionChangeHandler(self)
            observer.schedule(handler, str(base_path), recursive=True)
            observer.start()
            self._observers.append(observer)

        self._watching = True

    def stop_watching(self) -> None:
        """Stop watching definition directories."""
        for observer in self._observers:
            observer.stop()
            observer.join()
        self._observers.clear()
        self._watching = False

    def __contains__(self, key: tuple[str, str]) -> bool:
        """Check if a definition exists: ('themes', 'TheAgency') in registry"""
        kind, name = key
        return self.get(kind, name) is not None

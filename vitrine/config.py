"""Display host configuration with clean, readable structure."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.cwd() / "vitrine.json"


def _known(cls, d: dict) -> dict:
    """Keep only keys that are fields of ``cls``."""
    known = {f.name for f in cls.__dataclass_fields__.values()}
    return {k: v for k, v in d.items() if k in known}


@dataclass
class ThemeConfig:
    """Which theme renders shapes. None renders with module templates only."""
    current: Optional[str] = None

    def to_dict(self) -> dict:
        return {"current": self.current}

    @classmethod
    def from_dict(cls, d: dict) -> "ThemeConfig":
        if isinstance(d, str):
            # Shorthand: "theme": "TheAgency"
            return cls(current=d)
        if not isinstance(d, dict):
            return cls()
        return cls(current=d.get("current"))


@dataclass
class DisplayConfig:
    """Where definitions live and how the display engine behaves."""
    definition_paths: list[str] = field(default_factory=list)
    watch: bool = False

    # Re-raise hook failures after logging them
    fail_fast_hooks: bool = True

    # JSON file for templates edited at run time
    template_store: Optional[str] = None


@dataclass
class CacheConfig:
    """Rendered content cache for shapes with a cache id."""
    enabled: bool = True
    ttl: float = 300.0  # seconds


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class VitrineConfig:
    """Main configuration combining all sections."""
    theme: ThemeConfig = field(default_factory=ThemeConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> dict:
        return {
            "theme": self.theme.to_dict(),
            "display": asdict(self.display),
            "cache": asdict(self.cache),
            "logging": asdict(self.logging),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "VitrineConfig":
        theme = ThemeConfig.from_dict(d.get("theme", {}))

        display_dict = d.get("display", {})
        display = DisplayConfig(**_known(DisplayConfig, display_dict if isinstance(display_dict, dict) else {}))

        cache_dict = d.get("cache", {})
        cache = CacheConfig(**_known(CacheConfig, cache_dict if isinstance(cache_dict, dict) else {}))

        logging_dict = d.get("logging", {})
        log_config = LoggingConfig(**_known(LoggingConfig, logging_dict if isinstance(logging_dict, dict) else {}))

        return cls(theme=theme, display=display, cache=cache, logging=log_config)

    def save(self, path: Optional[Path] = None):
        path = Path(path) if path is not None else CONFIG_PATH
        path.parent.mkdir(parents=True, exist_ok=True)
        temp = path.with_suffix(".tmp")
        temp.write_text(json.dumps(self.to_dict(), indent=2))
        temp.rename(path)

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "VitrineConfig":
        path = Path(path) if path is not None else CONFIG_PATH
        try:
            if path.exists():
                raw_data = json.loads(path.read_text())
                if isinstance(raw_data, dict):
                    return cls.from_dict(raw_data)
                logger.warning("Ignoring config %s: expected a JSON object", path)
        except (json.JSONDecodeError, IOError, TypeError) as e:
            logger.warning("Failed to load config %s: %s", path, e)
        return cls()


# Global instance
_config: Optional[VitrineConfig] = None


def get_config() -> VitrineConfig:
    """Get current config."""
    global _config
    if _config is None:
        _config = VitrineConfig.load()
    return _config


def set_config(config: VitrineConfig, save: bool = True, path: Optional[Path] = None):
    """Set and save config."""
    global _config
    _config = config
    if save:
        config.save(path)

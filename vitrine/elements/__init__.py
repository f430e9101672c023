"""YAML shape definitions - module and theme templates loaded from disk."""

from .provider import DefinitionShapeTableProvider, Placement, registry_themes
from .registry import ShapeDefinitionRegistry

__all__ = [
    "DefinitionShapeTableProvider",
    "Placement",
    "ShapeDefinitionRegistry",
    "registry_themes",
]

"""
Shape table provider backed by YAML definitions.

Module definitions contribute to every theme's table; a theme definition only
to the tables of that theme and the themes built on it. A definition looks
like:

    name: The Agency
    base_theme: TheTheme
    templates:
      Content__Blog: "<article>{{ Model.title }}</article>"
    shapes:
      Content:
        wrappers: [Content_Wrapper]
        alternates: ["Content__{display_type}"]
"""

import logging
import string
from typing import Any, Iterable, Optional

from ..core.context import ShapeDisplayContext
from ..core.descriptors import ShapeTableBuilder
from ..core.themes import ThemeInfo
from ..templating.renderer import TemplateRenderer
from .registry import ShapeDefinitionRegistry

logger = logging.getLogger(__name__)

MODULES = 'modules'
THEMES = 'themes'

# Metadata fields a placement pattern may reference
PLACEMENT_FIELDS = ('type', 'display_type', 'differentiator', 'prefix')

_formatter = string.Formatter()


def _pattern_fields(pattern: str) -> list[str]:
    return [field for _, field, _, _ in _formatter.parse(pattern) if field]


class Placement:
    """Adds declared alternates and wrappers to shapes of one type while displaying."""

    def __init__(self, alternates: Iterable[str] = (), wrappers: Iterable[str] = ()):
        self.alternates = list(alternates)
        self.wrappers = list(wrappers)

    @classmethod
    def from_dict(cls, shape_type: str, data: Any) -> Optional["Placement"]:
        if not isinstance(data, dict):
            logger.warning("Ignoring placement for %s: expected a mapping", shape_type)
            return None
        patterns = list(data.get('alternates', [])) + list(data.get('wrappers', []))
        for pattern in patterns:
            unknown = [f for f in _pattern_fields(str(pattern)) if f not in PLACEMENT_FIELDS]
            if unknown:
                logger.warning("Ignoring placement for %s: unknown field(s) %s in %r",
                               shape_type, ', '.join(unknown), pattern)
                return None
        return cls(
            alternates=[str(p) for p in data.get('alternates', [])],
            wrappers=[str(p) for p in data.get('wrappers', [])],
        )

    def __call__(self, context: ShapeDisplayContext) -> None:
        metadata = context.shape_metadata
        for pattern in self.alternates:
            name = self._format(pattern, metadata)
            if name is not None:
                metadata.add_alternate(name)
        for pattern in self.wrappers:
            name = self._format(pattern, metadata)
            if name is not None:
                metadata.add_wrapper(name)

    @staticmethod
    def _format(pattern: str, metadata: Any) -> Optional[str]:
        values = {field: getattr(metadata, field) for field in PLACEMENT_FIELDS}
        if any(values[field] is None for field in _pattern_fields(pattern)):
            return None
        return pattern.format(**values)


class DefinitionShapeTableProvider:
    """
    Turns registry definitions into shape table builders, one per feature.

    Usage:
        provider = DefinitionShapeTableProvider(registry, TemplateRenderer())
        manager = ShapeTableManager([provider], theme_manager)
    """

    def __init__(self, registry: ShapeDefinitionRegistry, renderer: TemplateRenderer):
        self.registry = registry
        self.renderer = renderer

    def discover(self) -> list[ShapeTableBuilder]:
        builders = []
        for kind in (MODULES, THEMES):
            for name, definition in sorted(self.registry.get_all(kind).items()):
                feature = name if kind == THEMES else None
                builders.append(self._builder(kind, name, feature, definition))
        return builders

    def _builder(self, kind: str, name: str, feature: Optional[str], definition: dict) -> ShapeTableBuilder:
        builder = ShapeTableBuilder(feature=feature)

        templates = definition.get('templates') or {}
        if not isinstance(templates, dict):
            logger.warning("Ignoring templates of %s/%s: expected a mapping", kind, name)
            templates = {}
        for binding_name, source in templates.items():
            binding_name = str(binding_name)
            builder.describe(binding_name).bound_as(
                f"{kind}/{name}:{binding_name}",
                self.renderer.binding(binding_name, str(source)),
            )

        shapes = definition.get('shapes') or {}
        if not isinstance(shapes, dict):
            logger.warning("Ignoring shapes of %s/%s: expected a mapping", kind, name)
            shapes = {}
        for shape_type, data in shapes.items():
            placement = Placement.from_dict(str(shape_type), data)
            if placement is not None:
                builder.describe(str(shape_type)).on_displaying(placement)

        return builder


def registry_themes(registry: ShapeDefinitionRegistry) -> list[ThemeInfo]:
    """Theme infos for every theme definition in the registry."""
    themes = []
    for theme_id, definition in registry.get_all(THEMES).items():
        base_theme = definition.get('base_theme')
        themes.append(ThemeInfo(
            id=theme_id,
            name=str(definition.get('name') or ''),
            base_theme=str(base_theme) if base_theme else None,
        ))
    return themes

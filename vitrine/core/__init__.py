"""Core display pipeline - shapes, shape tables, hooks and the display engine."""

# isort: skip_file
# Import order follows dependencies: display pulls in every other module.

from .content import EMPTY_HTML, coerce_html, is_html, to_markup
from .naming import base_shape_type, parent_shape_type, shape_type_chain
from .shape import Shape, ShapeMetadata, create_shape
from .errors import DisplayError, ShapeBindingNotFoundError, TemplateRenderError
from .context import DisplayContext, ShapeDisplayContext
from .descriptors import (
    ShapeAlteration,
    ShapeAlterationBuilder,
    ShapeBinding,
    ShapeDescriptor,
    ShapeTable,
    ShapeTableBuilder,
)
from .events import DisplayTimingEvents, ShapeDisplayEvents, invoke_async
from .cache import MemoryContentCache, ShapeCacheEvents
from .resolvers import ShapeBindingResolver
from .themes import ThemeInfo, ThemeManager
from .table_manager import ShapeTableManager, ShapeTableProvider
from .display import HtmlDisplay

__all__ = [
    # Content
    "EMPTY_HTML",
    "coerce_html",
    "is_html",
    "to_markup",
    # Naming
    "base_shape_type",
    "parent_shape_type",
    "shape_type_chain",
    # Shapes
    "Shape",
    "ShapeMetadata",
    "create_shape",
    # Errors
    "DisplayError",
    "ShapeBindingNotFoundError",
    "TemplateRenderError",
    # Contexts
    "DisplayContext",
    "ShapeDisplayContext",
    # Tables
    "ShapeAlteration",
    "ShapeAlterationBuilder",
    "ShapeBinding",
    "ShapeDescriptor",
    "ShapeTable",
    "ShapeTableBuilder",
    "ShapeTableManager",
    "ShapeTableProvider",
    # Hooks
    "ShapeDisplayEvents",
    "DisplayTimingEvents",
    "MemoryContentCache",
    "ShapeCacheEvents",
    "invoke_async",
    # Resolution and themes
    "ShapeBindingResolver",
    "ThemeInfo",
    "ThemeManager",
    # Engine
    "HtmlDisplay",
]

"""Per-invocation display state.

A ``DisplayContext`` is created for every nested render. Renders that change
a field (the HTML field prefix, the value) fork the context instead of
writing to the parent's.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional

if TYPE_CHECKING:
    from .display import HtmlDisplay
    from .shape import Shape, ShapeMetadata

_NO_SERVICES: Mapping[str, Any] = MappingProxyType({})
_UNSET: Any = object()


@dataclass
class DisplayContext:
    """What is being displayed, and with which collaborators."""
    value: Any = None
    html_field_prefix: str = ""
    display: Optional["HtmlDisplay"] = None
    services: Mapping[str, Any] = field(default_factory=lambda: _NO_SERVICES)
    parent_prefix: Optional[str] = None
    on_model_error: Optional[Callable[[str, str], None]] = None
    model_errors: dict[str, list[str]] = field(default_factory=dict)

    def fork(self, value: Any = _UNSET, prefix: Optional[str] = None) -> "DisplayContext":
        """Copy this context for a nested render.

        ``model_errors`` stays shared so errors reported deep in the tree
        reach the caller.
        """
        return replace(
            self,
            value=self.value if value is _UNSET else value,
            html_field_prefix=self.html_field_prefix if prefix is None else prefix,
            parent_prefix=self.html_field_prefix,
            model_errors=self.model_errors,
        )

    def get_service(self, name: str) -> Any:
        try:
            return self.services[name]
        except KeyError:
            raise LookupError(f"No display service registered as '{name}'") from None

    def add_model_error(self, key: str, message: str) -> None:
        self.model_errors.setdefault(key, []).append(message)
        if self.on_model_error is not None:
            self.on_model_error(key, message)


@dataclass
class ShapeDisplayContext:
    """State shared by the hooks of one shape's render.

    ``child_content`` is the slot hooks assign to supply or replace the
    rendered content.
    ``content_wrapped`` marks supplied content that already went through
    the wrapper pass, such as a cache hit; its wrappers are drained unapplied.
    """
    shape: "Shape"
    shape_metadata: "ShapeMetadata"
    display_context: DisplayContext
    services: Mapping[str, Any] = field(default_factory=lambda: _NO_SERVICES)
    child_content: Any = None
    content_wrapped: bool = False

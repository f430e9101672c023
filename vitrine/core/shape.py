"""Shapes - named, data-carrying view models resolved to templates at render time."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional


@dataclass
class ShapeMetadata:
    """Rendering metadata owned by exactly one shape.

    ``alternates`` is ordered by priority, most specific last.
    ``wrappers`` is drained by the display engine once it has been applied.
    """
    type: str
    prefix: Optional[str] = None
    display_type: Optional[str] = None
    differentiator: Optional[str] = None
    cache_id: Optional[str] = None
    alternates: list[str] = field(default_factory=list)
    wrappers: list[str] = field(default_factory=list)
    displaying: list[Callable] = field(default_factory=list)
    processing: list[Callable] = field(default_factory=list)
    displayed: list[Callable] = field(default_factory=list)
    child_content: Any = None
    binding_sources: list[str] = field(default_factory=list)

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "type" and "type" in self.__dict__:
            raise AttributeError("a shape type cannot change once created")
        super().__setattr__(name, value)

    def add_alternate(self, name: str) -> "ShapeMetadata":
        """Add an alternate as the most specific one.

        Re-adding an existing alternate moves it to the end.
        """
        if name in self.alternates:
            self.alternates.remove(name)
        self.alternates.append(name)
        return self

    def add_wrapper(self, name: str) -> "ShapeMetadata":
        if name not in self.wrappers:
            self.wrappers.append(name)
        return self

    def on_displaying(self, hook: Callable) -> "ShapeMetadata":
        self.displaying.append(hook)
        return self

    def on_processing(self, hook: Callable) -> "ShapeMetadata":
        self.processing.append(hook)
        return self

    def on_displayed(self, hook: Callable) -> "ShapeMetadata":
        self.displayed.append(hook)
        return self


class Shape:
    """
    A renderable unit of a page.

    Named properties are kept in insertion order and are reachable as
    ``shape["title"]``, ``shape.get("title")`` or ``shape.title``.
    Positional children live in ``items``.

    Usage:
        shape = create_shape("Content", title="Hello")
        shape.metadata.add_alternate("Content__Blog")
        shape.metadata.add_wrapper("Content_Wrapper")
    """

    __slots__ = ("_metadata", "properties", "items")

    def __init__(self, metadata: ShapeMetadata):
        self._metadata = metadata
        self.properties: dict[str, Any] = {}
        self.items: list[Any] = []

    @property
    def type(self) -> str:
        return self._metadata.type

    @property
    def metadata(self) -> ShapeMetadata:
        return self._metadata

    def add(self, item: Any) -> "Shape":
        """Append a positional child."""
        self.items.append(item)
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.properties[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self.properties[name] = value

    def __contains__(self, name: str) -> bool:
        return name in self.properties

    def __getattr__(self, name: str) -> Any:
        # Only reached when normal lookup fails
        if name.startswith("_") or name in Shape.__slots__:
            raise AttributeError(name)
        try:
            return self.properties[name]
        except KeyError:
            raise AttributeError(name) from None

    def __iter__(self) -> Iterator[Any]:
        return iter(self.items)

    def __repr__(self) -> str:
        return f"Shape({self.type!r})"


def create_shape(shape_type: str, *items: Any, **properties: Any) -> Shape:
    """Create a shape of ``shape_type`` with optional children and properties."""
    shape = Shape(ShapeMetadata(type=shape_type))
    for item in items:
        shape.add(item)
    shape.properties.update(properties)
    return shape

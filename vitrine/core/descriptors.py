"""Shape descriptors, bindings and the per-theme shape table.

Tables are assembled from alterations recorded by ``ShapeTableBuilder``.
An alteration targets a binding name such as ``Content__Blog``; its hooks go
to the descriptor of the base type (``Content``) and its binding is stored
under the full name.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from .naming import base_shape_type


@dataclass(frozen=True)
class ShapeBinding:
    """A renderer bound to one qualified shape name.

    ``binding_async`` receives the display context and returns content or an
    awaitable of content. None means the shape's current child content is
    passed through as is.
    """
    binding_name: str
    binding_source: Optional[str] = None
    binding_async: Optional[Callable[[Any], Any]] = None


@dataclass
class ShapeDescriptor:
    """Per base shape type metadata: lifecycle hooks and binding sources."""
    shape_type: str
    displaying: list[Callable] = field(default_factory=list)
    processing: list[Callable] = field(default_factory=list)
    displayed: list[Callable] = field(default_factory=list)
    bindings: dict[str, ShapeBinding] = field(default_factory=dict)
    binding_sources: list[str] = field(default_factory=list)
    # Primary source: the most recently contributed one
    binding_source: Optional[str] = None


class ShapeTable:
    """Read-only index of descriptors by shape type and bindings by name."""

    __slots__ = ("descriptors", "bindings")

    def __init__(
        self,
        descriptors: Mapping[str, ShapeDescriptor],
        bindings: Mapping[str, ShapeBinding],
    ):
        self.descriptors: Mapping[str, ShapeDescriptor] = MappingProxyType(dict(descriptors))
        self.bindings: Mapping[str, ShapeBinding] = MappingProxyType(dict(bindings))

    @classmethod
    def empty(cls) -> "ShapeTable":
        return cls({}, {})

    @classmethod
    def from_alterations(cls, alterations: Iterable["ShapeAlteration"]) -> "ShapeTable":
        """Build a table applying alterations in order.

        A later binding for a name replaces an earlier one, which is how a
        theme overrides a module template.
        """
        descriptors: dict[str, ShapeDescriptor] = {}
        for alteration in alterations:
            descriptor = descriptors.get(alteration.shape_type)
            if descriptor is None:
                descriptor = descriptors[alteration.shape_type] = ShapeDescriptor(alteration.shape_type)
            alteration.apply(descriptor)

        bindings: dict[str, ShapeBinding] = {}
        for descriptor in descriptors.values():
            bindings.update(descriptor.bindings)
        return cls(descriptors, bindings)

    def __repr__(self) -> str:
        return f"ShapeTable({len(self.descriptors)} descriptors, {len(self.bindings)} bindings)"


@dataclass
class ShapeAlteration:
    """One contribution to a descriptor, recorded for a feature."""
    binding_name: str
    feature: Optional[str] = None
    displaying: list[Callable] = field(default_factory=list)
    processing: list[Callable] = field(default_factory=list)
    displayed: list[Callable] = field(default_factory=list)
    binding: Optional[ShapeBinding] = None

    @property
    def shape_type(self) -> str:
        return base_shape_type(self.binding_name)

    def apply(self, descriptor: ShapeDescriptor) -> None:
        descriptor.displaying.extend(self.displaying)
        descriptor.processing.extend(self.processing)
        descriptor.displayed.extend(self.displayed)
        if self.binding is not None:
            descriptor.bindings[self.binding_name] = self.binding
            source = self.binding.binding_source
            if source is not None:
                if source in descriptor.binding_sources:
                    descriptor.binding_sources.remove(source)
                descriptor.binding_sources.append(source)
                descriptor.binding_source = source


class ShapeAlterationBuilder:
    """Fluent helper returned by ``ShapeTableBuilder.describe``."""

    def __init__(self, alteration: ShapeAlteration):
        self._alteration = alteration

    def on_displaying(self, hook: Callable) -> "ShapeAlterationBuilder":
        self._alteration.displaying.append(hook)
        return self

    def on_processing(self, hook: Callable) -> "ShapeAlterationBuilder":
        self._alteration.processing.append(hook)
        return self

    def on_displayed(self, hook: Callable) -> "ShapeAlterationBuilder":
        self._alteration.displayed.append(hook)
        return self

    def bound_as(self, source: Optional[str], render: Optional[Callable[[Any], Any]]) -> "ShapeAlterationBuilder":
        """Bind the described name to a render callable coming from ``source``."""
        self._alteration.binding = ShapeBinding(
            binding_name=self._alteration.binding_name,
            binding_source=source,
            binding_async=render,
        )
        return self


class ShapeTableBuilder:
    """
    Records alterations contributed by one feature.

    Usage:
        builder = ShapeTableBuilder(feature="TheAgency")
        builder.describe("Content__Blog").bound_as("TheAgency", render_blog)
        builder.describe("Content").on_displaying(add_blog_alternate)
    """

    def __init__(self, feature: Optional[str] = None):
        self.feature = feature
        self.alterations: list[ShapeAlteration] = []

    def describe(self, binding_name: str) -> ShapeAlterationBuilder:
        alteration = ShapeAlteration(binding_name=binding_name, feature=self.feature)
        self.alterations.append(alteration)
        return ShapeAlterationBuilder(alteration)

"""Binding resolvers - sources of bindings outside the static shape table."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from .descriptors import ShapeBinding


@runtime_checkable
class ShapeBindingResolver(Protocol):
    """Looks up a binding by qualified shape name. None means no match."""

    async def get_shape_binding(self, binding_name: str) -> Optional[ShapeBinding]:
        ...

"""Resolves bindings from the run-time template store."""

from __future__ import annotations

from typing import Optional

from ..core.descriptors import ShapeBinding
from .renderer import TemplateRenderer
from .store import TemplateStore


class TemplatesBindingResolver:
    """Serves stored templates ahead of the shape table, previews first."""

    def __init__(self, store: TemplateStore, renderer: TemplateRenderer):
        self.store = store
        self.renderer = renderer

    async def get_shape_binding(self, binding_name: str) -> Optional[ShapeBinding]:
        source = self.store.get_preview(binding_name)
        origin = "preview"
        if source is None:
            source = self.store.get(binding_name)
            origin = "templates"
        if source is None:
            return None
        return ShapeBinding(
            binding_name=binding_name,
            binding_source=f"{origin}:{binding_name}",
            binding_async=self.renderer.binding(binding_name, source),
        )

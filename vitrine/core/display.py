"""The display engine - turns a shape into HTML for the current theme.

For one shape, ``HtmlDisplay.execute`` runs these phases in order:

1. global ``displaying`` events
2. descriptor ``displaying`` hooks, then the shape's own
3. descriptor ``processing`` hooks, binding resolution, the shape's own
   ``processing`` hooks and binding execution (skipped when a hook already
   supplied child content)
4. wrappers, each one wrapping the result of the previous
5. global, descriptor and shape ``displayed`` hooks
6. global ``displaying_finalized`` events, always, even after a failure

Binding resolution checks alternates most specific first, then the shape
type and its double-underscore fallbacks. At every name the registered
resolvers are asked before the shape table.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from .content import EMPTY_HTML, coerce_html
from .context import DisplayContext, ShapeDisplayContext
from .descriptors import ShapeBinding, ShapeDescriptor, ShapeTable
from .errors import ShapeBindingNotFoundError
from .events import ShapeDisplayEvents, invoke_async
from .naming import shape_type_chain
from .resolvers import ShapeBindingResolver
from .shape import Shape
from .table_manager import ShapeTableManager
from .themes import ThemeManager

logger = logging.getLogger(__name__)


class HtmlDisplay:
    """Renders shapes through theme-specific bindings and lifecycle hooks.

    Usage:
        display = HtmlDisplay(table_manager, theme_manager, events=[...], resolvers=[...])
        html = await display.display(create_shape("Content", title="Hello"))
    """

    def __init__(
        self,
        shape_table_manager: ShapeTableManager,
        theme_manager: ThemeManager,
        events: Iterable[ShapeDisplayEvents] = (),
        resolvers: Iterable[ShapeBindingResolver] = (),
        services: Optional[Mapping[str, Any]] = None,
        fail_fast_hooks: bool = True,
    ):
        self.shape_table_manager = shape_table_manager
        self.theme_manager = theme_manager
        self.events = list(events)
        self.resolvers = list(resolvers)
        self.services = dict(services or {})
        self.fail_fast_hooks = fail_fast_hooks

    async def display(
        self,
        value: Any,
        prefix: Optional[str] = None,
        services: Optional[Mapping[str, Any]] = None,
        on_model_error: Optional[Callable[[str, str], None]] = None,
    ) -> Any:
        """Render any value from a fresh root context."""
        context = DisplayContext(
            value=value,
            html_field_prefix=prefix or "",
            display=self,
            services={**self.services, **(services or {})},
            on_model_error=on_model_error,
        )
        return await self.execute(context)

    async def execute(self, context: DisplayContext) -> Any:
        shape = context.value if isinstance(context.value, Shape) else None

        # Non-shape values are returned as content
        if shape is None:
            return coerce_html(context.value)

        metadata = shape.metadata
        if metadata is None or not metadata.type:
            return coerce_html(context.value)

        local_context = context.fork(prefix=metadata.prefix or "")
        if local_context.display is None:
            local_context.display = self

        display_context = ShapeDisplayContext(
            shape=shape,
            shape_metadata=metadata,
            display_context=local_context,
            services=local_context.services,
        )
        # Content left by an earlier render of this instance is already wrapped
        display_context.content_wrapped = metadata.child_content is not None

        try:
            theme = await self.theme_manager.get_theme()
            shape_table = self.shape_table_manager.get_shape_table(theme.id if theme else None)

            await self._invoke(self.events, lambda sde: sde.displaying(display_context))

            # Only the base type selects the descriptor, alternates don't
            descriptor = self.get_shape_descriptor(metadata.type, shape_table)
            if descriptor is not None:
                # Binding sources scope localization for every template of the shape
                metadata.binding_sources = [s for s in descriptor.binding_sources if s is not None]
                if not metadata.binding_sources and descriptor.binding_source is not None:
                    metadata.binding_sources.append(descriptor.binding_source)
                await self._invoke(descriptor.displaying, lambda hook: hook(display_context))

            await self._invoke(metadata.displaying, lambda hook: hook(display_context))

            # Pre-rendered content, e.g. from a cache
            if display_context.child_content is not None:
                metadata.child_content = display_context.child_content

            if metadata.child_content is None:
                if descriptor is not None:
                    await self._invoke(descriptor.processing, lambda hook: hook(display_context))

                binding = await self.get_shape_binding(metadata.type, metadata.alternates, shape_table)
                if binding is None:
                    raise ShapeBindingNotFoundError(metadata.type)

                await self._invoke(metadata.processing, lambda hook: hook(shape))
                metadata.child_content = await self._process(binding, shape, local_context)

            if metadata.wrappers and not display_context.content_wrapped:
                for wrapper_type in list(metadata.wrappers):
                    wrapper_binding = await self.get_shape_binding(wrapper_type, (), shape_table)
                    if wrapper_binding is None:
                        logger.warning("Wrapper '%s' of shape '%s' has no binding", wrapper_type, metadata.type)
                        continue
                    metadata.child_content = await self._process(wrapper_binding, shape, local_context)

            # Re-rendering this shape must not wrap it again
            metadata.wrappers.clear()

            await self._invoke(self.events, self._synced(display_context, lambda sde: sde.displayed(display_context)))
            if descriptor is not None:
                await self._invoke(descriptor.displayed, self._synced(display_context, lambda hook: hook(display_context)))
            await self._invoke(metadata.displayed, self._synced(display_context, lambda hook: hook(display_context)))
        finally:
            await self._invoke(self.events, lambda sde: sde.displaying_finalized(display_context))

        return metadata.child_content

    def get_shape_descriptor(self, shape_type: str, shape_table: ShapeTable) -> Optional[ShapeDescriptor]:
        for name in shape_type_chain(shape_type):
            descriptor = shape_table.descriptors.get(name)
            if descriptor is not None:
                return descriptor
        return None

    async def get_shape_binding(
        self,
        shape_type: str,
        alternates: Sequence[str],
        shape_table: ShapeTable,
    ) -> Optional[ShapeBinding]:
        """Find the most specific binding for a shape.

        Alternates are fully qualified names; the last added has the highest
        priority. When none matches, the shape type falls back at each
        double-underscore until a binding is found.
        """
        for alternate in reversed(list(alternates)):
            binding = await self._lookup_binding(alternate, shape_table)
            if binding is not None:
                return binding

        for name in shape_type_chain(shape_type):
            binding = await self._lookup_binding(name, shape_table)
            if binding is not None:
                return binding

        return None

    async def _lookup_binding(self, name: str, shape_table: ShapeTable) -> Optional[ShapeBinding]:
        for resolver in self.resolvers:
            binding = await resolver.get_shape_binding(name)
            if binding is not None:
                logger.debug("Binding '%s' supplied by %s", name, type(resolver).__name__)
                return binding

        binding = shape_table.bindings.get(name)
        if binding is not None:
            logger.debug("Binding '%s' found in shape table (%s)", name, binding.binding_source)
        return binding

    async def _process(self, binding: ShapeBinding, shape: Shape, context: DisplayContext) -> Any:
        if binding.binding_async is None:
            if shape.metadata.child_content is not None:
                return shape.metadata.child_content
            return EMPTY_HTML

        result = binding.binding_async(context)

        # Synchronous bindings return content directly
        if inspect.isawaitable(result):
            result = await result
        return coerce_html(result)

    async def _invoke(self, items: Iterable[Any], call: Callable[[Any], Any]) -> None:
        await invoke_async(items, call, logger, fail_fast=self.fail_fast_hooks)

    @staticmethod
    def _synced(display_context: ShapeDisplayContext, call: Callable[[Any], Any]) -> Callable[[Any], Any]:
        """Wrap a displayed hook so a reassigned ``child_content`` reaches the shape."""
        metadata = display_context.shape_metadata

        async def invoke(item: Any) -> None:
            prior = display_context.child_content = metadata.child_content
            result = call(item)
            if inspect.isawaitable(result):
                await result
            if display_context.child_content is not prior:
                metadata.child_content = display_context.child_content

        return invoke

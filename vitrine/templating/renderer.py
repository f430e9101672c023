"""Jinja2 template bindings.

Templates see the shape being displayed as ``Model``, the current field
prefix as ``Prefix``, the shape's rendered content as ``ChildContent`` (what
a wrapper template wraps), and an async ``display(value)`` helper that
renders nested shapes through the display engine:

    <article id="{{ Prefix }}">
      <h1>{{ Model.title }}</h1>
      {% for child in Model %}{{ display(child) }}{% endfor %}
    </article>
"""

from __future__ import annotations

import threading
from typing import Any, Awaitable, Callable

from jinja2 import BaseLoader, Environment, Template, TemplateError
from markupsafe import Markup

from ..core.content import to_markup
from ..core.context import DisplayContext
from ..core.errors import TemplateRenderError
from ..core.shape import Shape


class TemplateRenderer:
    """Compiles template sources once and renders them asynchronously."""

    def __init__(self, autoescape: bool = True):
        self.env = Environment(
            loader=BaseLoader(),
            autoescape=autoescape,
            enable_async=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["shape_type"] = lambda value: value.type if isinstance(value, Shape) else ""
        self._compiled: dict[str, Template] = {}
        self._lock = threading.Lock()

    def compile(self, binding_name: str, source: str) -> Template:
        with self._lock:
            template = self._compiled.get(source)
        if template is not None:
            return template
        try:
            template = self.env.from_string(source)
        except TemplateError as e:
            raise TemplateRenderError(binding_name, str(e)) from e
        with self._lock:
            self._compiled[source] = template
        return template

    def binding(self, binding_name: str, source: str) -> Callable[[DisplayContext], Awaitable[Markup]]:
        """Create a binding callable for a template source.

        Compilation happens on first render, so a broken template only fails
        the shapes that use it.
        """

        async def render(context: DisplayContext) -> Markup:
            return await self.render(binding_name, source, context)

        render.__qualname__ = f"template:{binding_name}"
        return render

    async def render(self, binding_name: str, source: str, context: DisplayContext) -> Markup:
        template = self.compile(binding_name, source)
        model = context.value
        child_content = model.metadata.child_content if isinstance(model, Shape) else None

        async def display(value: Any) -> Markup:
            if context.display is None:
                return to_markup(value)
            return to_markup(await context.display.execute(context.fork(value=value)))

        try:
            text = await template.render_async(
                Model=model,
                Prefix=context.html_field_prefix,
                ChildContent=to_markup(child_content),
                display=display,
            )
        except TemplateError as e:
            raise TemplateRenderError(binding_name, str(e)) from e
        return Markup(text)

    def clear(self) -> None:
        """Forget compiled templates."""
        with self._lock:
            self._compiled.clear()

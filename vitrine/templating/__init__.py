"""Jinja2 template bindings and the run-time template store."""

from .renderer import TemplateRenderer
from .resolver import TemplatesBindingResolver
from .store import TemplateStore

__all__ = ["TemplateRenderer", "TemplateStore", "TemplatesBindingResolver"]

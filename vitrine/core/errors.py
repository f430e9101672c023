"""Exceptions raised by the display pipeline."""


class DisplayError(Exception):
    """Base class for display pipeline errors."""


class ShapeBindingNotFoundError(DisplayError):
    """No binding exists for a shape, its alternates or any of its fallbacks."""

    def __init__(self, shape_type: str):
        self.shape_type = shape_type
        super().__init__(f"Shape type '{shape_type}' not found")


class TemplateRenderError(DisplayError):
    """A template binding failed to compile or render."""

    def __init__(self, binding_name: str, message: str):
        self.binding_name = binding_name
        super().__init__(f"Template error in '{binding_name}': {message}")

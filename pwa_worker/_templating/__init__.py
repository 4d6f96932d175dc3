"""Internal templating helpers used to build service worker script text."""

from .errors import TemplateApplicationError
from .renderer import TemplateRenderer, render_script

__all__ = [
    "TemplateApplicationError",
    "TemplateRenderer",
    "render_script",
]

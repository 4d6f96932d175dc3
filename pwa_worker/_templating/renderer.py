"""Rendering logic for ``{{ ctx.* }}`` placeholders in script templates."""

from __future__ import annotations

import ast
import re
from typing import Any, Callable, Dict, Mapping

from .errors import TemplateApplicationError
from .formatters import (
    comment_text,
    json_literal,
    quoted_literal,
    raw_literal,
    stringify,
)

__all__ = ["TemplateRenderer", "render_script"]


class TemplateRenderer:
    """Render ``{{ ctx.* }}`` expressions against a context mapping.

    Expressions may be followed by ``|``-separated modifiers, for example
    ``{{ ctx.route | quote }}`` or ``{{ ctx.options | json }}``. Modifiers
    can be written as bare names or as calls with literal arguments.
    """

    _placeholder = re.compile(r"{{\s*(.*?)\s*}}")

    def __init__(self, context: Mapping[str, Any]):
        if not isinstance(context, Mapping):
            raise TemplateApplicationError("Template context must be a mapping")
        self._root = context
        self._modifier_handlers: Dict[str, Callable[[Any], str]] = {
            "json": json_literal,
            "quote": quoted_literal,
            "comment": comment_text,
            "raw": raw_literal,
        }

    def render(self, template: str) -> str:
        def replace(match: re.Match[str]) -> str:
            expression = match.group(1)
            value = self._evaluate_expression(expression)
            return value if isinstance(value, str) else stringify(value)

        return self._placeholder.sub(replace, template)

    def _evaluate_expression(self, expression: str) -> Any:
        base, *modifier_segments = [segment.strip() for segment in expression.split("|")]
        if not base:
            raise TemplateApplicationError("Empty template expression")

        value = self._resolve_path(base)
        for modifier in (segment for segment in modifier_segments if segment):
            value = self._apply_modifier(value, modifier)
        return value

    def _resolve_path(self, path_expression: str) -> Any:
        try:
            node = ast.parse(path_expression, mode="eval").body
        except SyntaxError as exc:
            raise TemplateApplicationError(
                f"Invalid path expression '{path_expression}'"
            ) from exc
        return self._eval_ast(node)

    def _eval_ast(self, node: ast.AST) -> Any:
        if isinstance(node, ast.Name):
            if node.id != "ctx":
                raise TemplateApplicationError(
                    "Only the 'ctx' root is accessible in templates"
                )
            return self._root
        if isinstance(node, ast.Attribute):
            value = self._eval_ast(node.value)
            return self._resolve_key(value, node.attr)
        if isinstance(node, ast.Subscript):
            value = self._eval_ast(node.value)
            key = self._eval_ast(node.slice)
            return self._resolve_key(value, key)
        if isinstance(node, ast.Constant):
            return node.value
        raise TemplateApplicationError("Unsupported expression in template")

    def _resolve_key(self, value: Any, key: Any) -> Any:
        if not isinstance(value, Mapping):
            raise TemplateApplicationError("Lookups are only supported for mappings")
        if key not in value:
            raise TemplateApplicationError(
                f"Key '{key}' does not exist for the current mapping"
            )
        return value[key]

    def _apply_modifier(self, value: Any, modifier: str) -> Any:
        try:
            call = ast.parse(modifier, mode="eval").body
        except SyntaxError as exc:
            raise TemplateApplicationError(f"Invalid modifier '{modifier}'") from exc

        if isinstance(call, ast.Name):
            func_name, args = call.id, []
        elif isinstance(call, ast.Call) and isinstance(call.func, ast.Name):
            func_name = call.func.id
            args = [self._literal_eval(arg) for arg in call.args]
        else:
            raise TemplateApplicationError("Modifiers must be names or function calls")

        if func_name == "coalesce":
            default = args[0] if args else None
            return value if value is not None else default

        handler = self._modifier_handlers.get(func_name)
        if handler is None:
            raise TemplateApplicationError(f"Unknown modifier '{func_name}'")
        if args:
            raise TemplateApplicationError(f"Modifier '{func_name}' takes no arguments")
        return handler(value)

    def _literal_eval(self, node: ast.AST) -> Any:
        try:
            return ast.literal_eval(node)
        except ValueError as exc:
            raise TemplateApplicationError("Modifiers accept literal arguments") from exc


def render_script(template: str, **context: Any) -> str:
    """Render ``template`` with keyword arguments exposed under ``ctx``."""

    return TemplateRenderer(context).render(template)

"""Compile caching rules into runtime library registration statements."""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict

from .._templating import render_script
from ..constants import Strategy

__all__ = [
    "CachingRouteOptions",
    "CachingRules",
    "DEFAULT_STRATEGY",
    "compile_rule",
    "strategy_name",
]

DEFAULT_STRATEGY = "staleWhileRevalidate"

# Strategies without an entry here fall back to DEFAULT_STRATEGY.
_STRATEGY_NAMES: Mapping[int, str] = {
    Strategy.STALE_WHILE_REVALIDATE: DEFAULT_STRATEGY,
}
_NUMERIC_OPTIONS = ("max_age", "max_entries")


class CachingRouteOptions(BaseModel):
    """Optional arguments for a caching rule.

    Values are only checked for presence; numeric options are emitted as-is.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    cache_name: Any = None
    max_age: Any = None
    max_entries: Any = None


def strategy_name(strategy: Any) -> str:
    try:
        return _STRATEGY_NAMES.get(strategy, DEFAULT_STRATEGY)
    except TypeError:
        return DEFAULT_STRATEGY


def compile_rule(
    route: str,
    strategy: Any,
    options: CachingRouteOptions | Mapping[str, Any] | None = None,
) -> str:
    """Return one ``wp.serviceWorker.addCachingStrategy(...)`` statement."""

    resolved = _coerce_options(options)
    context: dict[str, Any] = {"route": route, "strategy": strategy_name(strategy)}
    arguments = ["{{ ctx.route | quote }}", "{{ ctx.strategy | quote }}"]
    if resolved.cache_name is not None:
        context["cache_name"] = resolved.cache_name
        arguments.append("{{ ctx.cache_name | quote }}")
    for name in _NUMERIC_OPTIONS:
        value = getattr(resolved, name)
        if value is not None:
            context[name] = value
            arguments.append(f"{{{{ ctx.{name} | raw }}}}")

    template = f"wp.serviceWorker.addCachingStrategy( {', '.join(arguments)} );"
    return render_script(template, **context)


class CachingRules:
    """Accumulates compiled caching rules in registration order."""

    def __init__(self) -> None:
        self._statements: list[str] = []

    def __len__(self) -> int:
        return len(self._statements)

    def add(
        self,
        route: str,
        strategy: Any,
        options: CachingRouteOptions | Mapping[str, Any] | None = None,
    ) -> str:
        statement = compile_rule(route, strategy, options)
        self._statements.append(statement)
        return statement

    @property
    def script(self) -> str:
        return "".join(f"{statement}\n" for statement in self._statements)


def _coerce_options(
    options: CachingRouteOptions | Mapping[str, Any] | None,
) -> CachingRouteOptions:
    if isinstance(options, CachingRouteOptions):
        return options
    if options is None:
        return CachingRouteOptions()
    return CachingRouteOptions.model_validate(dict(options))

"""Tagged script sources accepted by the registry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

__all__ = [
    "CallableSource",
    "FileSource",
    "InvalidSource",
    "ScriptSource",
    "as_script_source",
]


@dataclass(frozen=True)
class CallableSource:
    """Script text produced by calling ``render`` with no arguments."""

    render: Callable[[], Any]

    kind = "callable"


@dataclass(frozen=True)
class FileSource:
    """Script text read from a file published under the content directory."""

    url: str

    kind = "file"


@dataclass(frozen=True)
class InvalidSource:
    """A registered value that cannot produce script text."""

    value: Any

    kind = "invalid"


ScriptSource = CallableSource | FileSource | InvalidSource


def as_script_source(source: Any) -> ScriptSource:
    match source:
        case CallableSource() | FileSource() | InvalidSource():
            return source
        case str():
            return FileSource(source)
        case _ if callable(source):
            return CallableSource(source)
        case _:
            return InvalidSource(source)

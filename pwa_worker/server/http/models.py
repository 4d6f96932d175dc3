"""Pydantic response models for the service worker HTTP API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ..dependencies import RegisteredItem


class RegisteredHandle(BaseModel):
    """One fragment included in a scope's service worker."""

    handle: str
    scope: int = Field(..., description="Scope bitmask: 1 front, 2 admin, 3 both.")
    dependencies: tuple[str, ...]
    source_kind: str = Field(..., description="One of 'callable', 'file', or 'invalid'.")
    source_url: str | None = None

    @classmethod
    def from_item(cls, item: RegisteredItem) -> "RegisteredHandle":
        return cls(
            handle=item.handle,
            scope=int(item.extra.get("scope", 0)),
            dependencies=item.dependencies,
            source_kind=item.source.kind,
            source_url=getattr(item.source, "url", None),
        )


class ScopeManifestResponse(BaseModel):
    """Serializable view of what a scope's service worker is built from."""

    scope: int
    etag: str
    handles: list[RegisteredHandle]
    caching_rule_count: int


__all__ = ["RegisteredHandle", "ScopeManifestResponse"]

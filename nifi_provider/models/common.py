"""Value objects shared by every NiFi entity."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class Revision:
    """Optimistic-concurrency token; must accompany every update and delete."""

    version: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"version": self.version}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Revision:
        return cls(version=int((data or {}).get("version", 0)))


@dataclass
class Position:
    """Canvas coordinates of a component."""

    x: float = 0.0
    y: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Position:
        data = data or {}
        return cls(x=float(data.get("x", 0.0)), y=float(data.get("y", 0.0)))


def cleanup_nil_properties(properties: dict[str, Any] | None) -> dict[str, Any]:
    """Drop properties the server reports with an explicit null value.

    NiFi lists every property a component type declares, including the ones
    left unset, which would otherwise show up as spurious differences against
    the declared configuration.
    """
    return {k: v for k, v in (properties or {}).items() if v is not None}


def identity_fields(entity_id: str, parent_group_id: str = "") -> dict[str, str]:
    """Component keys that must be omitted until they are known."""
    fields = {}
    if entity_id:
        fields["id"] = entity_id
    if parent_group_id:
        fields["parentGroupId"] = parent_group_id
    return fields


def state_update(revision: Revision, entity_id: str, state: str) -> dict[str, Any]:
    """Body of a run-state change: only the revision, the id and the new state."""
    return {"revision": revision.to_dict(), "component": {"id": entity_id, "state": state}}

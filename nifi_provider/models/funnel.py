"""Funnel entity. Funnels merge connections and have no run state."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nifi_provider.models.common import Position, Revision, identity_fields


@dataclass
class Funnel:
    id: str = ""
    parent_group_id: str = ""
    position: Position = field(default_factory=Position)
    revision: Revision = field(default_factory=Revision)

    def to_dict(self) -> dict[str, Any]:
        return {
            "revision": self.revision.to_dict(),
            "component": {
                **identity_fields(self.id, self.parent_group_id),
                "position": self.position.to_dict(),
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Funnel:
        comp = data.get("component", {})
        return cls(
            id=comp.get("id", data.get("id", "")),
            parent_group_id=comp.get("parentGroupId", ""),
            position=Position.from_dict(comp.get("position")),
            revision=Revision.from_dict(data.get("revision")),
        )

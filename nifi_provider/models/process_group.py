"""Process group entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nifi_provider.models.common import Position, Revision, identity_fields


@dataclass
class ProcessGroupComponent:
    id: str = ""
    parent_group_id: str = ""
    name: str = ""
    position: Position = field(default_factory=Position)
    comments: str = ""


@dataclass
class ProcessGroup:
    """A container of processors, ports, connections and nested groups."""

    revision: Revision = field(default_factory=Revision)
    component: ProcessGroupComponent = field(default_factory=ProcessGroupComponent)

    @property
    def id(self) -> str:
        return self.component.id

    def to_dict(self) -> dict[str, Any]:
        c = self.component
        return {
            "revision": self.revision.to_dict(),
            "component": {
                **identity_fields(c.id, c.parent_group_id),
                "name": c.name,
                "position": c.position.to_dict(),
                "comments": c.comments,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ProcessGroup:
        comp = data.get("component", {})
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=ProcessGroupComponent(
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                name=comp.get("name", ""),
                position=Position.from_dict(comp.get("position")),
                comments=comp.get("comments") or "",
            ),
        )

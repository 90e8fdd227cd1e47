"""Remote process group entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from nifi_provider.models.common import Position, Revision, identity_fields


@dataclass
class RemoteProcessGroupComponent:
    id: str = ""
    parent_group_id: str = ""
    name: str = ""
    position: Position = field(default_factory=Position)
    target_uris: str = ""
    transport_protocol: str = "RAW"


@dataclass
class RemoteProcessGroup:
    """Site-to-site reference to process groups on another NiFi instance."""

    revision: Revision = field(default_factory=Revision)
    component: RemoteProcessGroupComponent = field(default_factory=RemoteProcessGroupComponent)

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
                "targetUris": c.target_uris,
                "transportProtocol": c.transport_protocol,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RemoteProcessGroup:
        comp = data.get("component", {})
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=RemoteProcessGroupComponent(
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                name=comp.get("name", ""),
                position=Position.from_dict(comp.get("position")),
                target_uris=comp.get("targetUris", ""),
                transport_protocol=comp.get("transportProtocol", "RAW"),
            ),
        )

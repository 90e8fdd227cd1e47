"""Input and output port entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from nifi_provider.errors import ConfigurationError
from nifi_provider.models.common import Position, Revision, identity_fields


class PortType(StrEnum):
    INPUT_PORT = "INPUT_PORT"
    OUTPUT_PORT = "OUTPUT_PORT"

    @property
    def collection(self) -> str:
        """URL segment holding ports of this type (``input-ports`` / ``output-ports``)."""
        return "input-ports" if self is PortType.INPUT_PORT else "output-ports"


class PortState(StrEnum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    DISABLED = "DISABLED"


def port_type(value: str) -> PortType:
    try:
        return PortType(value)
    except ValueError:
        raise ConfigurationError(f"Unknown port type: {value!r}") from None


@dataclass
class PortComponent:
    port_type: PortType
    id: str = ""
    parent_group_id: str = ""
    name: str = ""
    comments: str = ""
    position: Position = field(default_factory=Position)
    state: str = ""

    def __post_init__(self) -> None:
        self.port_type = port_type(self.port_type)


@dataclass
class Port:
    component: PortComponent
    revision: Revision = field(default_factory=Revision)

    @property
    def id(self) -> str:
        return self.component.id

    @property
    def collection(self) -> str:
        return self.component.port_type.collection

    def to_dict(self) -> dict[str, Any]:
        c = self.component
        body: dict[str, Any] = {
            **identity_fields(c.id, c.parent_group_id),
            "name": c.name,
            "type": str(c.port_type),
            "comments": c.comments,
            "position": c.position.to_dict(),
        }
        if c.state:
            body["state"] = c.state
        return {"revision": self.revision.to_dict(), "component": body}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Port:
        comp = data.get("component", {})
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=PortComponent(
                port_type=comp.get("type", ""),
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                name=comp.get("name", ""),
                comments=comp.get("comments") or "",
                position=Position.from_dict(comp.get("position")),
                state=comp.get("state", ""),
            ),
        )

"""Connection entity and the drop-request used to purge its queue."""

from __future__ import annotations

from dataclasses import InitVar, dataclass, field
from enum import StrEnum
from typing import Any

from nifi_provider.errors import ConfigurationError
from nifi_provider.models.common import Position, Revision, identity_fields

DEFAULT_DATA_SIZE_THRESHOLD = "1 GB"
DEFAULT_OBJECT_THRESHOLD = 10000


class EndpointKind(StrEnum):
    """Kinds of component that can sit at either end of a connection."""

    PROCESSOR = "PROCESSOR"
    INPUT_PORT = "INPUT_PORT"
    OUTPUT_PORT = "OUTPUT_PORT"
    FUNNEL = "FUNNEL"


@dataclass
class ConnectionHand:
    """Source or destination reference of a connection.

    A declared hand must carry a known type tag; an unrecognized tag is a
    configuration error, not something to dispatch on later. Hands read back
    from NiFi pass ``strict=False`` and keep tags this provider does not
    manage (remote process group ports) as plain strings.
    """

    type: EndpointKind | str
    id: str
    group_id: str
    strict: InitVar[bool] = True

    def __post_init__(self, strict: bool) -> None:
        try:
            self.type = EndpointKind(self.type)
        except ValueError:
            if strict:
                raise ConfigurationError(
                    f"Unknown connection endpoint type: {self.type!r}"
                ) from None

    def to_dict(self) -> dict[str, str]:
        return {"type": str(self.type), "id": self.id, "groupId": self.group_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ConnectionHand:
        return cls(
            type=data.get("type", ""),
            id=data.get("id", ""),
            group_id=data.get("groupId", ""),
            strict=False,
        )


@dataclass
class ConnectionComponent:
    source: ConnectionHand
    destination: ConnectionHand
    id: str = ""
    parent_group_id: str = ""
    selected_relationships: list[str] = field(default_factory=list)
    bends: list[Position] = field(default_factory=list)
    back_pressure_data_size_threshold: str = DEFAULT_DATA_SIZE_THRESHOLD
    back_pressure_object_threshold: int = DEFAULT_OBJECT_THRESHOLD


@dataclass
class Connection:
    component: ConnectionComponent
    revision: Revision = field(default_factory=Revision)

    @property
    def id(self) -> str:
        return self.component.id

    def to_dict(self) -> dict[str, Any]:
        c = self.component
        return {
            "revision": self.revision.to_dict(),
            "component": {
                **identity_fields(c.id, c.parent_group_id),
                "source": c.source.to_dict(),
                "destination": c.destination.to_dict(),
                "selectedRelationships": list(c.selected_relationships),
                "bends": [b.to_dict() for b in c.bends],
                "backPressureDataSizeThreshold": c.back_pressure_data_size_threshold,
                "backPressureObjectThreshold": c.back_pressure_object_threshold,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Connection:
        comp = data.get("component", {})
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=ConnectionComponent(
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                source=ConnectionHand.from_dict(comp.get("source") or {}),
                destination=ConnectionHand.from_dict(comp.get("destination") or {}),
                selected_relationships=list(comp.get("selectedRelationships") or []),
                bends=[Position.from_dict(b) for b in comp.get("bends") or []],
                back_pressure_data_size_threshold=comp.get(
                    "backPressureDataSizeThreshold", DEFAULT_DATA_SIZE_THRESHOLD
                ),
                back_pressure_object_threshold=int(
                    comp.get("backPressureObjectThreshold", DEFAULT_OBJECT_THRESHOLD)
                ),
            ),
        )


@dataclass
class DropRequest:
    """Server-side job purging the queued flowfiles of one connection."""

    id: str
    finished: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DropRequest:
        req = data.get("dropRequest", {})
        return cls(id=req.get("id", ""), finished=bool(req.get("finished", False)))

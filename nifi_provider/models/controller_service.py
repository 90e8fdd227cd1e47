"""Controller service entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from nifi_provider.models.common import Revision, cleanup_nil_properties, identity_fields


class ControllerServiceState(StrEnum):
    ENABLED = "ENABLED"
    DISABLED = "DISABLED"


@dataclass
class ControllerServiceComponent:
    id: str = ""
    parent_group_id: str = ""
    name: str = ""
    type: str = ""
    state: str = ""
    properties: dict[str, Any] = field(default_factory=dict)


@dataclass
class ControllerService:
    """Shared service (connection pool, record reader, ...) used by processors.

    Its configuration can only change while it is DISABLED.
    """

    revision: Revision = field(default_factory=Revision)
    component: ControllerServiceComponent = field(default_factory=ControllerServiceComponent)

    @property
    def id(self) -> str:
        return self.component.id

    @property
    def is_enabled(self) -> bool:
        return self.component.state == ControllerServiceState.ENABLED

    def to_dict(self) -> dict[str, Any]:
        c = self.component
        body: dict[str, Any] = {
            **identity_fields(c.id, c.parent_group_id),
            "name": c.name,
            "type": c.type,
            "properties": dict(c.properties),
        }
        return {"revision": self.revision.to_dict(), "component": body}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ControllerService:
        comp = data.get("component", {})
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=ControllerServiceComponent(
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                name=comp.get("name", ""),
                type=comp.get("type", ""),
                state=comp.get("state", ""),
                properties=cleanup_nil_properties(comp.get("properties")),
            ),
        )

"""Controller-level reporting task entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from nifi_provider.models.common import Revision, cleanup_nil_properties, identity_fields


class ReportingTaskState(StrEnum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    DISABLED = "DISABLED"


@dataclass
class ReportingTaskComponent:
    id: str = ""
    parent_group_id: str = ""
    name: str = ""
    type: str = ""
    comments: str = ""
    scheduling_strategy: str = "TIMER_DRIVEN"
    scheduling_period: str = "0 sec"
    properties: dict[str, Any] = field(default_factory=dict)
    state: str = ""


@dataclass
class ReportingTask:
    revision: Revision = field(default_factory=Revision)
    component: ReportingTaskComponent = field(default_factory=ReportingTaskComponent)

    @property
    def id(self) -> str:
        return self.component.id

    @property
    def is_running(self) -> bool:
        return self.component.state == ReportingTaskState.RUNNING

    def to_dict(self) -> dict[str, Any]:
        c = self.component
        return {
            "revision": self.revision.to_dict(),
            "component": {
                **identity_fields(c.id, c.parent_group_id),
                "name": c.name,
                "type": c.type,
                "comments": c.comments,
                "schedulingStrategy": c.scheduling_strategy,
                "schedulingPeriod": c.scheduling_period,
                "properties": dict(c.properties),
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ReportingTask:
        comp = data.get("component", {})
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=ReportingTaskComponent(
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                name=comp.get("name", ""),
                type=comp.get("type", ""),
                comments=comp.get("comments") or "",
                scheduling_strategy=comp.get("schedulingStrategy", "TIMER_DRIVEN"),
                scheduling_period=comp.get("schedulingPeriod", "0 sec"),
                properties=cleanup_nil_properties(comp.get("properties")),
                state=comp.get("state", ""),
            ),
        )

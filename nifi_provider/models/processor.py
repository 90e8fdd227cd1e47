"""Processor entity."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from nifi_provider.models.common import (
    Position,
    Revision,
    cleanup_nil_properties,
    identity_fields,
)


class ProcessorState(StrEnum):
    RUNNING = "RUNNING"
    STOPPED = "STOPPED"
    DISABLED = "DISABLED"


@dataclass
class ProcessorRelationship:
    name: str
    auto_terminate: bool = False


@dataclass
class ProcessorConfig:
    """Scheduling and property configuration of a processor.

    ``auto_terminated_relationships`` is authoritative on write; on read it
    is derived from the relationships flagged ``autoTerminate``.
    """

    scheduling_strategy: str = "TIMER_DRIVEN"
    scheduling_period: str = "0 sec"
    concurrently_schedulable_task_count: int = 1
    properties: dict[str, Any] = field(default_factory=dict)
    auto_terminated_relationships: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "schedulingStrategy": self.scheduling_strategy,
            "schedulingPeriod": self.scheduling_period,
            "concurrentlySchedulableTaskCount": self.concurrently_schedulable_task_count,
            "properties": dict(self.properties),
            "autoTerminatedRelationships": list(self.auto_terminated_relationships),
        }


@dataclass
class ProcessorComponent:
    id: str = ""
    parent_group_id: str = ""
    name: str = ""
    type: str = ""
    position: Position = field(default_factory=Position)
    state: str = ""
    config: ProcessorConfig = field(default_factory=ProcessorConfig)
    relationships: list[ProcessorRelationship] = field(default_factory=list)


@dataclass
class Processor:
    revision: Revision = field(default_factory=Revision)
    component: ProcessorComponent = field(default_factory=ProcessorComponent)

    @property
    def id(self) -> str:
        return self.component.id

    @property
    def is_running(self) -> bool:
        return self.component.state == ProcessorState.RUNNING

    def to_dict(self) -> dict[str, Any]:
        c = self.component
        body: dict[str, Any] = {
            **identity_fields(c.id, c.parent_group_id),
            "name": c.name,
            "type": c.type,
            "position": c.position.to_dict(),
            "config": c.config.to_dict(),
        }
        if c.state:
            body["state"] = c.state
        return {"revision": self.revision.to_dict(), "component": body}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Processor:
        comp = data.get("component", {})
        raw_config = comp.get("config") or {}
        relationships = [
            ProcessorRelationship(name=r["name"], auto_terminate=bool(r.get("autoTerminate")))
            for r in comp.get("relationships") or []
        ]
        config = ProcessorConfig(
            scheduling_strategy=raw_config.get("schedulingStrategy", "TIMER_DRIVEN"),
            scheduling_period=raw_config.get("schedulingPeriod", "0 sec"),
            concurrently_schedulable_task_count=int(
                raw_config.get("concurrentlySchedulableTaskCount", 1)
            ),
            properties=cleanup_nil_properties(raw_config.get("properties")),
            auto_terminated_relationships=[r.name for r in relationships if r.auto_terminate],
        )
        return cls(
            revision=Revision.from_dict(data.get("revision")),
            component=ProcessorComponent(
                id=comp.get("id", data.get("id", "")),
                parent_group_id=comp.get("parentGroupId", ""),
                name=comp.get("name", ""),
                type=comp.get("type", ""),
                position=Position.from_dict(comp.get("position")),
                state=comp.get("state", ""),
                config=config,
                relationships=relationships,
            ),
        )

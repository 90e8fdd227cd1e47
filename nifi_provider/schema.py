"""Translation between declarative resource state and entity dataclasses.

A resource is described by a plain mapping::

    {
        "type": "nifi_processor",
        "id": "",
        "parent_group_id": "root",
        "revision": [{"version": 3}],
        "component": [{"name": "generate", "type": "...", "position": [{"x": 0, "y": 0}]}],
    }

Nested blocks may be given either as a mapping or as a one-element list;
observed state is always written back as one-element lists. A nested block
present with any other cardinality raises ``SchemaParseError`` before
anything is sent to NiFi.
"""

from __future__ import annotations

from typing import Any

from nifi_provider.errors import SchemaParseError
from nifi_provider.models import (
    Connection,
    ConnectionComponent,
    ConnectionHand,
    ControllerService,
    ControllerServiceComponent,
    Funnel,
    Group,
    Port,
    PortComponent,
    Position,
    ProcessGroup,
    ProcessGroupComponent,
    Processor,
    ProcessorComponent,
    ProcessorConfig,
    RemoteProcessGroup,
    RemoteProcessGroupComponent,
    ReportingTask,
    ReportingTaskComponent,
    Revision,
    User,
)
from nifi_provider.models.connection import (
    DEFAULT_DATA_SIZE_THRESHOLD,
    DEFAULT_OBJECT_THRESHOLD,
)


class ResourceData:
    """Desired and observed state of one declared resource.

    Attributes:
        type: Resource type name, e.g. ``nifi_connection``.
        id: Tracked remote id; empty until created or after the entity vanished.
    """

    def __init__(self, type: str, values: dict[str, Any] | None = None, id: str = "") -> None:
        self.type = type
        self.id = id
        self._values: dict[str, Any] = dict(values or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "id": self.id, **self._values}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceData:
        values = {k: v for k, v in data.items() if k not in ("type", "id")}
        return cls(data.get("type", ""), values, data.get("id") or "")

    def __repr__(self) -> str:
        return f"ResourceData({self.type!r}, id={self.id!r})"


# ── Block helpers ─────────────────────────────────────────────────────────


def block(values: dict[str, Any], key: str, *, required: bool = True) -> dict[str, Any]:
    """Return the single nested block stored under ``key``.

    Raises:
        SchemaParseError: When the block is absent and required, or when it
            holds anything other than exactly one mapping.
    """
    raw = values.get(key)
    if raw is None or raw == []:
        if required:
            raise SchemaParseError(f"Exactly one {key} is required")
        return {}
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, list) and len(raw) == 1 and isinstance(raw[0], dict):
        return raw[0]
    raise SchemaParseError(f"Exactly one {key} is required")


def component_block(d: ResourceData) -> dict[str, Any]:
    return block({"component": d.get("component")}, "component")


def position_from(values: dict[str, Any]) -> Position:
    raw = block(values, "position", required=False)
    return Position(x=float(raw.get("x", 0.0)), y=float(raw.get("y", 0.0)))


def position_to(position: Position) -> list[dict[str, float]]:
    return [position.to_dict()]


def revision_from(d: ResourceData) -> Revision:
    raw = block({"revision": d.get("revision")}, "revision", required=False)
    return Revision(version=int(raw.get("version", 0)))


def set_common(
    d: ResourceData, parent_group_id: str, revision: Revision, component: dict[str, Any]
) -> None:
    d.set("parent_group_id", parent_group_id)
    d.set("revision", [revision.to_dict()])
    d.set("component", [component])


def parent_group_of(d: ResourceData, component: dict[str, Any]) -> str:
    return component.get("parent_group_id") or d.get("parent_group_id") or ""


# ── Process groups ────────────────────────────────────────────────────────


def process_group_from_schema(d: ResourceData) -> ProcessGroup:
    c = component_block(d)
    return ProcessGroup(
        revision=revision_from(d),
        component=ProcessGroupComponent(
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            name=c.get("name", ""),
            position=position_from(c),
            comments=c.get("comments", ""),
        ),
    )


def process_group_to_schema(d: ResourceData, group: ProcessGroup) -> None:
    c = group.component
    set_common(
        d,
        c.parent_group_id,
        group.revision,
        {
            "parent_group_id": c.parent_group_id,
            "name": c.name,
            "position": position_to(c.position),
            "comments": c.comments,
        },
    )


# ── Processors ────────────────────────────────────────────────────────────


def processor_from_schema(d: ResourceData) -> Processor:
    c = component_block(d)
    config = block(c, "config", required=False)
    return Processor(
        revision=revision_from(d),
        component=ProcessorComponent(
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            name=c.get("name", ""),
            type=c.get("type", ""),
            position=position_from(c),
            config=ProcessorConfig(
                scheduling_strategy=config.get("scheduling_strategy", "TIMER_DRIVEN"),
                scheduling_period=config.get("scheduling_period", "0 sec"),
                concurrently_schedulable_task_count=int(
                    config.get("concurrently_schedulable_task_count", 1)
                ),
                properties=dict(config.get("properties") or {}),
                auto_terminated_relationships=list(
                    config.get("auto_terminated_relationships") or []
                ),
            ),
        ),
    )


def processor_to_schema(d: ResourceData, processor: Processor) -> None:
    c = processor.component
    set_common(
        d,
        c.parent_group_id,
        processor.revision,
        {
            "parent_group_id": c.parent_group_id,
            "name": c.name,
            "type": c.type,
            "position": position_to(c.position),
            "config": [
                {
                    "scheduling_strategy": c.config.scheduling_strategy,
                    "scheduling_period": c.config.scheduling_period,
                    "concurrently_schedulable_task_count": (
                        c.config.concurrently_schedulable_task_count
                    ),
                    "properties": dict(c.config.properties),
                    "auto_terminated_relationships": list(c.config.auto_terminated_relationships),
                }
            ],
        },
    )


# ── Connections ───────────────────────────────────────────────────────────


def _hand_from(values: dict[str, Any], key: str) -> ConnectionHand:
    raw = block(values, key)
    return ConnectionHand(
        type=raw.get("type", ""), id=raw.get("id", ""), group_id=raw.get("group_id", "")
    )


def _hand_to(hand: ConnectionHand) -> list[dict[str, str]]:
    return [{"type": str(hand.type), "id": hand.id, "group_id": hand.group_id}]


def connection_from_schema(d: ResourceData) -> Connection:
    c = component_block(d)
    bends = c.get("bends") or []
    if not isinstance(bends, list) or not all(isinstance(b, dict) for b in bends):
        raise SchemaParseError("bends must be a list of positions")
    return Connection(
        revision=revision_from(d),
        component=ConnectionComponent(
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            source=_hand_from(c, "source"),
            destination=_hand_from(c, "destination"),
            selected_relationships=list(c.get("selected_relationships") or []),
            bends=[Position(x=float(b.get("x", 0.0)), y=float(b.get("y", 0.0))) for b in bends],
            back_pressure_data_size_threshold=c.get(
                "back_pressure_data_size_threshold", DEFAULT_DATA_SIZE_THRESHOLD
            ),
            back_pressure_object_threshold=int(
                c.get("back_pressure_object_threshold", DEFAULT_OBJECT_THRESHOLD)
            ),
        ),
    )


def connection_to_schema(d: ResourceData, connection: Connection) -> None:
    c = connection.component
    set_common(
        d,
        c.parent_group_id,
        connection.revision,
        {
            "parent_group_id": c.parent_group_id,
            "source": _hand_to(c.source),
            "destination": _hand_to(c.destination),
            "selected_relationships": list(c.selected_relationships),
            "bends": [b.to_dict() for b in c.bends],
            "back_pressure_data_size_threshold": c.back_pressure_data_size_threshold,
            "back_pressure_object_threshold": c.back_pressure_object_threshold,
        },
    )


# ── Controller services ───────────────────────────────────────────────────


def controller_service_from_schema(d: ResourceData) -> ControllerService:
    c = component_block(d)
    return ControllerService(
        revision=revision_from(d),
        component=ControllerServiceComponent(
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            name=c.get("name", ""),
            type=c.get("type", ""),
            properties=dict(c.get("properties") or {}),
        ),
    )


def controller_service_to_schema(d: ResourceData, service: ControllerService) -> None:
    c = service.component
    set_common(
        d,
        c.parent_group_id,
        service.revision,
        {
            "parent_group_id": c.parent_group_id,
            "name": c.name,
            "type": c.type,
            "state": c.state,
            "properties": dict(c.properties),
        },
    )


# ── Ports ─────────────────────────────────────────────────────────────────


def port_from_schema(d: ResourceData) -> Port:
    c = component_block(d)
    return Port(
        revision=revision_from(d),
        component=PortComponent(
            port_type=c.get("type", ""),
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            name=c.get("name", ""),
            comments=c.get("comments", ""),
            position=position_from(c),
        ),
    )


def port_to_schema(d: ResourceData, port: Port) -> None:
    c = port.component
    set_common(
        d,
        c.parent_group_id,
        port.revision,
        {
            "parent_group_id": c.parent_group_id,
            "name": c.name,
            "type": str(c.port_type),
            "comments": c.comments,
            "position": position_to(c.position),
        },
    )


# ── Tenants ───────────────────────────────────────────────────────────────


def user_from_schema(d: ResourceData) -> User:
    c = component_block(d)
    return User(
        identity=c.get("identity", ""),
        id=d.id,
        parent_group_id=parent_group_of(d, c),
        revision=revision_from(d),
    )


def user_to_schema(d: ResourceData, user: User) -> None:
    set_common(
        d,
        user.parent_group_id,
        user.revision,
        {"parent_group_id": user.parent_group_id, "identity": user.identity},
    )


def group_from_schema(d: ResourceData) -> Group:
    c = component_block(d)
    return Group(
        identity=c.get("identity", ""),
        id=d.id,
        parent_group_id=parent_group_of(d, c),
        users=list(c.get("users") or []),
        revision=revision_from(d),
    )


def group_to_schema(d: ResourceData, group: Group) -> None:
    set_common(
        d,
        group.parent_group_id,
        group.revision,
        {
            "parent_group_id": group.parent_group_id,
            "identity": group.identity,
            "users": list(group.users),
        },
    )


# ── Remote process groups ─────────────────────────────────────────────────


def remote_process_group_from_schema(d: ResourceData) -> RemoteProcessGroup:
    c = component_block(d)
    return RemoteProcessGroup(
        revision=revision_from(d),
        component=RemoteProcessGroupComponent(
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            name=c.get("name", ""),
            position=position_from(c),
            target_uris=c.get("target_uris", ""),
            transport_protocol=c.get("transport_protocol", "RAW"),
        ),
    )


def remote_process_group_to_schema(d: ResourceData, group: RemoteProcessGroup) -> None:
    c = group.component
    set_common(
        d,
        c.parent_group_id,
        group.revision,
        {
            "parent_group_id": c.parent_group_id,
            "name": c.name,
            "position": position_to(c.position),
            "target_uris": c.target_uris,
            "transport_protocol": c.transport_protocol,
        },
    )


# ── Reporting tasks ───────────────────────────────────────────────────────


def reporting_task_from_schema(d: ResourceData) -> ReportingTask:
    c = component_block(d)
    return ReportingTask(
        revision=revision_from(d),
        component=ReportingTaskComponent(
            id=d.id,
            parent_group_id=parent_group_of(d, c),
            name=c.get("name", ""),
            type=c.get("type", ""),
            comments=c.get("comments", ""),
            scheduling_strategy=c.get("scheduling_strategy", "TIMER_DRIVEN"),
            scheduling_period=c.get("scheduling_period", "0 sec"),
            properties=dict(c.get("properties") or {}),
        ),
    )


def reporting_task_to_schema(d: ResourceData, task: ReportingTask) -> None:
    c = task.component
    set_common(
        d,
        c.parent_group_id,
        task.revision,
        {
            "parent_group_id": c.parent_group_id,
            "name": c.name,
            "type": c.type,
            "comments": c.comments,
            "scheduling_strategy": c.scheduling_strategy,
            "scheduling_period": c.scheduling_period,
            "properties": dict(c.properties),
            "state": c.state,
        },
    )


# ── Funnels ───────────────────────────────────────────────────────────────


def funnel_from_schema(d: ResourceData) -> Funnel:
    c = component_block(d)
    return Funnel(
        id=d.id,
        parent_group_id=parent_group_of(d, c),
        position=position_from(c),
        revision=revision_from(d),
    )


def funnel_to_schema(d: ResourceData, funnel: Funnel) -> None:
    set_common(
        d,
        funnel.parent_group_id,
        funnel.revision,
        {"parent_group_id": funnel.parent_group_id, "position": position_to(funnel.position)},
    )

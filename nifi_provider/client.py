"""Entity repository for the NiFi REST API.

One create/get/update/delete set per entity kind, each a thin mapping of an
entity onto its URL and JSON body. HTTP failures are translated into the
entity-level errors of :mod:`nifi_provider.errors`, carrying the entity kind
and id.

Example:
    client = NiFiClient(Transport(ProviderConfig.from_env()))
    root = client.root_process_group()
    group = client.create_process_group(
        ProcessGroup(component=ProcessGroupComponent(parent_group_id=root.id, name="ingest"))
    )
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote

from nifi_provider.errors import (
    ConflictError,
    CreateFailed,
    DeleteFailed,
    EntityError,
    NotFoundError,
    ReadFailed,
    TransportError,
    UpdateFailed,
)
from nifi_provider.models import (
    Connection,
    ControllerService,
    DropRequest,
    Funnel,
    Group,
    Port,
    PortType,
    ProcessGroup,
    Processor,
    RemoteProcessGroup,
    ReportingTask,
    Revision,
    TenantKind,
    User,
    state_update,
)
from nifi_provider.transport import Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NiFiClient:
    """Typed CRUD operations on top of a :class:`Transport`.

    Attributes:
        transport: The HTTP transport every call goes through.
        lock: Process-wide mutex serializing reconciliation sequences that
            touch more than one entity. The repository itself never takes it.
    """

    def __init__(self, transport: Transport) -> None:
        self.transport = transport
        self.lock = threading.Lock()

    # ── Call helpers ──────────────────────────────────────────────────

    def _call(
        self,
        method: str,
        path: str,
        failure: type[EntityError],
        kind: str,
        entity_id: str = "",
        body: Any = None,
    ) -> Any:
        try:
            _, payload = self.transport.call(method, path, body)
        except TransportError as exc:
            if exc.status_code == 404 and failure is not CreateFailed:
                raise NotFoundError(kind, entity_id, 404) from exc
            if exc.status_code == 409 and failure is UpdateFailed:
                raise ConflictError(kind, entity_id, 409) from exc
            raise failure(kind, entity_id, exc.status_code) from exc
        return payload if payload is not None else {}

    def _create(self, kind: str, path: str, body: dict[str, Any], parse: Callable[[dict], T]) -> T:
        created = parse(self._call("POST", path, CreateFailed, kind, body=body))
        logger.debug("Created %s %s", kind, getattr(created, "id", ""))
        return created

    def _get(self, kind: str, path: str, entity_id: str, parse: Callable[[dict], T]) -> T:
        return parse(self._call("GET", path, ReadFailed, kind, entity_id))

    def _update(
        self, kind: str, path: str, entity_id: str, body: dict[str, Any], parse: Callable[[dict], T]
    ) -> T:
        return parse(self._call("PUT", path, UpdateFailed, kind, entity_id, body=body))

    def _delete(self, kind: str, path: str, entity_id: str, revision: Revision) -> None:
        self._call("DELETE", f"{path}?version={revision.version}", DeleteFailed, kind, entity_id)
        logger.debug("Deleted %s %s", kind, entity_id)

    # ── Process groups ────────────────────────────────────────────────

    def root_process_group(self) -> ProcessGroup:
        return self.get_process_group("root")

    def create_process_group(self, group: ProcessGroup) -> ProcessGroup:
        path = f"/process-groups/{group.component.parent_group_id}/process-groups"
        return self._create("process group", path, group.to_dict(), ProcessGroup.from_dict)

    def get_process_group(self, group_id: str) -> ProcessGroup:
        return self._get(
            "process group", f"/process-groups/{group_id}", group_id, ProcessGroup.from_dict
        )

    def update_process_group(self, group: ProcessGroup) -> ProcessGroup:
        return self._update(
            "process group",
            f"/process-groups/{group.id}",
            group.id,
            group.to_dict(),
            ProcessGroup.from_dict,
        )

    def delete_process_group(self, group: ProcessGroup) -> None:
        self._delete("process group", f"/process-groups/{group.id}", group.id, group.revision)

    def get_process_group_connections(self, group_id: str) -> list[Connection]:
        payload = self._call(
            "GET", f"/process-groups/{group_id}/connections", ReadFailed, "process group", group_id
        )
        return [Connection.from_dict(c) for c in payload.get("connections", [])]

    # ── Processors ────────────────────────────────────────────────────

    def create_processor(self, processor: Processor) -> Processor:
        path = f"/process-groups/{processor.component.parent_group_id}/processors"
        return self._create("processor", path, processor.to_dict(), Processor.from_dict)

    def get_processor(self, processor_id: str) -> Processor:
        return self._get(
            "processor", f"/processors/{processor_id}", processor_id, Processor.from_dict
        )

    def update_processor(self, processor: Processor) -> Processor:
        return self._update(
            "processor",
            f"/processors/{processor.id}",
            processor.id,
            processor.to_dict(),
            Processor.from_dict,
        )

    def set_processor_state(self, processor: Processor, state: str) -> Processor:
        return self._update(
            "processor",
            f"/processors/{processor.id}",
            processor.id,
            state_update(processor.revision, processor.id, state),
            Processor.from_dict,
        )

    def delete_processor(self, processor: Processor) -> None:
        self._delete("processor", f"/processors/{processor.id}", processor.id, processor.revision)

    # ── Connections and drop requests ─────────────────────────────────

    def create_connection(self, connection: Connection) -> Connection:
        path = f"/process-groups/{connection.component.parent_group_id}/connections"
        return self._create("connection", path, connection.to_dict(), Connection.from_dict)

    def get_connection(self, connection_id: str) -> Connection:
        return self._get(
            "connection", f"/connections/{connection_id}", connection_id, Connection.from_dict
        )

    def update_connection(self, connection: Connection) -> Connection:
        return self._update(
            "connection",
            f"/connections/{connection.id}",
            connection.id,
            connection.to_dict(),
            Connection.from_dict,
        )

    def delete_connection(self, connection: Connection) -> None:
        self._delete(
            "connection", f"/connections/{connection.id}", connection.id, connection.revision
        )

    def create_drop_request(self, connection_id: str) -> DropRequest:
        payload = self._call(
            "POST",
            f"/flowfile-queues/{connection_id}/drop-requests",
            CreateFailed,
            "drop request",
            connection_id,
        )
        return DropRequest.from_dict(payload)

    def get_drop_request(self, connection_id: str, drop_id: str) -> DropRequest:
        payload = self._call(
            "GET",
            f"/flowfile-queues/{connection_id}/drop-requests/{drop_id}",
            ReadFailed,
            "drop request",
            drop_id,
        )
        return DropRequest.from_dict(payload)

    def delete_drop_request(self, connection_id: str, drop_id: str) -> None:
        self._call(
            "DELETE",
            f"/flowfile-queues/{connection_id}/drop-requests/{drop_id}",
            DeleteFailed,
            "drop request",
            drop_id,
        )

    # ── Controller services ───────────────────────────────────────────

    def create_controller_service(self, service: ControllerService) -> ControllerService:
        path = f"/process-groups/{service.component.parent_group_id}/controller-services"
        return self._create(
            "controller service", path, service.to_dict(), ControllerService.from_dict
        )

    def get_controller_service(self, service_id: str) -> ControllerService:
        return self._get(
            "controller service",
            f"/controller-services/{service_id}",
            service_id,
            ControllerService.from_dict,
        )

    def update_controller_service(self, service: ControllerService) -> ControllerService:
        return self._update(
            "controller service",
            f"/controller-services/{service.id}",
            service.id,
            service.to_dict(),
            ControllerService.from_dict,
        )

    def set_controller_service_state(
        self, service: ControllerService, state: str
    ) -> ControllerService:
        return self._update(
            "controller service",
            f"/controller-services/{service.id}",
            service.id,
            state_update(service.revision, service.id, state),
            ControllerService.from_dict,
        )

    def delete_controller_service(self, service: ControllerService) -> None:
        self._delete(
            "controller service",
            f"/controller-services/{service.id}",
            service.id,
            service.revision,
        )

    # ── Ports ─────────────────────────────────────────────────────────

    def create_port(self, port: Port) -> Port:
        path = f"/process-groups/{port.component.parent_group_id}/{port.collection}"
        return self._create("port", path, port.to_dict(), Port.from_dict)

    def get_port(self, port_type: PortType, port_id: str) -> Port:
        return self._get("port", f"/{port_type.collection}/{port_id}", port_id, Port.from_dict)

    def update_port(self, port: Port) -> Port:
        return self._update(
            "port", f"/{port.collection}/{port.id}", port.id, port.to_dict(), Port.from_dict
        )

    def set_port_state(self, port: Port, state: str) -> Port:
        return self._update(
            "port",
            f"/{port.collection}/{port.id}",
            port.id,
            state_update(port.revision, port.id, state),
            Port.from_dict,
        )

    def delete_port(self, port: Port) -> None:
        self._delete("port", f"/{port.collection}/{port.id}", port.id, port.revision)

    # ── Tenants ───────────────────────────────────────────────────────

    def create_user(self, user: User) -> User:
        return self._create("user", "/tenants/users", user.to_dict(), User.from_dict)

    def get_user(self, user_id: str) -> User:
        return self._get("user", f"/tenants/users/{user_id}", user_id, User.from_dict)

    def update_user(self, user: User) -> User:
        return self._update(
            "user", f"/tenants/users/{user.id}", user.id, user.to_dict(), User.from_dict
        )

    def delete_user(self, user: User) -> None:
        self._delete("user", f"/tenants/users/{user.id}", user.id, user.revision)

    def create_group(self, group: Group) -> Group:
        return self._create("group", "/tenants/user-groups", group.to_dict(), Group.from_dict)

    def get_group(self, group_id: str) -> Group:
        return self._get("group", f"/tenants/user-groups/{group_id}", group_id, Group.from_dict)

    def update_group(self, group: Group) -> Group:
        return self._update(
            "group", f"/tenants/user-groups/{group.id}", group.id, group.to_dict(), Group.from_dict
        )

    def delete_group(self, group: Group) -> None:
        self._delete("group", f"/tenants/user-groups/{group.id}", group.id, group.revision)

    def search_tenants(self, kind: TenantKind, identity: str) -> list[str]:
        """Return the ids of tenants of ``kind`` whose identity equals ``identity``.

        NiFi's search matches substrings, so results that report a different
        identity are filtered out here.
        """
        payload = self._call(
            "GET",
            f"/tenants/search-results?q={quote(identity, safe='')}",
            ReadFailed,
            kind.label,
            identity,
        )
        ids = []
        for tenant in payload.get(kind.search_key) or []:
            found = (tenant.get("component") or {}).get("identity", identity)
            if found == identity and tenant.get("id"):
                ids.append(tenant["id"])
        return ids

    # ── Remote process groups ─────────────────────────────────────────

    def create_remote_process_group(self, group: RemoteProcessGroup) -> RemoteProcessGroup:
        path = f"/process-groups/{group.component.parent_group_id}/remote-process-groups"
        return self._create(
            "remote process group", path, group.to_dict(), RemoteProcessGroup.from_dict
        )

    def get_remote_process_group(self, group_id: str) -> RemoteProcessGroup:
        return self._get(
            "remote process group",
            f"/remote-process-groups/{group_id}",
            group_id,
            RemoteProcessGroup.from_dict,
        )

    def update_remote_process_group(self, group: RemoteProcessGroup) -> RemoteProcessGroup:
        return self._update(
            "remote process group",
            f"/remote-process-groups/{group.id}",
            group.id,
            group.to_dict(),
            RemoteProcessGroup.from_dict,
        )

    def delete_remote_process_group(self, group: RemoteProcessGroup) -> None:
        self._delete(
            "remote process group", f"/remote-process-groups/{group.id}", group.id, group.revision
        )

    # ── Reporting tasks ───────────────────────────────────────────────

    def create_reporting_task(self, task: ReportingTask) -> ReportingTask:
        return self._create(
            "reporting task", "/controller/reporting-tasks", task.to_dict(), ReportingTask.from_dict
        )

    def get_reporting_task(self, task_id: str) -> ReportingTask:
        return self._get(
            "reporting task", f"/reporting-tasks/{task_id}", task_id, ReportingTask.from_dict
        )

    def update_reporting_task(self, task: ReportingTask) -> ReportingTask:
        return self._update(
            "reporting task",
            f"/reporting-tasks/{task.id}",
            task.id,
            task.to_dict(),
            ReportingTask.from_dict,
        )

    def set_reporting_task_state(self, task: ReportingTask, state: str) -> ReportingTask:
        return self._update(
            "reporting task",
            f"/reporting-tasks/{task.id}",
            task.id,
            state_update(task.revision, task.id, state),
            ReportingTask.from_dict,
        )

    def delete_reporting_task(self, task: ReportingTask) -> None:
        self._delete("reporting task", f"/reporting-tasks/{task.id}", task.id, task.revision)

    # ── Funnels ───────────────────────────────────────────────────────

    def create_funnel(self, funnel: Funnel) -> Funnel:
        path = f"/process-groups/{funnel.parent_group_id}/funnels"
        return self._create("funnel", path, funnel.to_dict(), Funnel.from_dict)

    def get_funnel(self, funnel_id: str) -> Funnel:
        return self._get("funnel", f"/funnels/{funnel_id}", funnel_id, Funnel.from_dict)

    def update_funnel(self, funnel: Funnel) -> Funnel:
        return self._update(
            "funnel", f"/funnels/{funnel.id}", funnel.id, funnel.to_dict(), Funnel.from_dict
        )

    def delete_funnel(self, funnel: Funnel) -> None:
        self._delete("funnel", f"/funnels/{funnel.id}", funnel.id, funnel.revision)

"""Entity dataclasses mirroring the NiFi REST API payloads."""

from nifi_provider.models.common import (
    Position,
    Revision,
    cleanup_nil_properties,
    identity_fields,
    state_update,
)
from nifi_provider.models.connection import (
    Connection,
    ConnectionComponent,
    ConnectionHand,
    DropRequest,
    EndpointKind,
)
from nifi_provider.models.controller_service import (
    ControllerService,
    ControllerServiceComponent,
    ControllerServiceState,
)
from nifi_provider.models.funnel import Funnel
from nifi_provider.models.port import Port, PortComponent, PortState, PortType
from nifi_provider.models.process_group import ProcessGroup, ProcessGroupComponent
from nifi_provider.models.processor import (
    Processor,
    ProcessorComponent,
    ProcessorConfig,
    ProcessorRelationship,
    ProcessorState,
)
from nifi_provider.models.remote_process_group import (
    RemoteProcessGroup,
    RemoteProcessGroupComponent,
)
from nifi_provider.models.reporting_task import (
    ReportingTask,
    ReportingTaskComponent,
    ReportingTaskState,
)
from nifi_provider.models.tenant import Group, TenantKind, User

__all__ = [
    "Connection",
    "ConnectionComponent",
    "ConnectionHand",
    "ControllerService",
    "ControllerServiceComponent",
    "ControllerServiceState",
    "DropRequest",
    "EndpointKind",
    "Funnel",
    "Group",
    "Port",
    "PortComponent",
    "PortState",
    "PortType",
    "Position",
    "ProcessGroup",
    "ProcessGroupComponent",
    "Processor",
    "ProcessorComponent",
    "ProcessorConfig",
    "ProcessorRelationship",
    "ProcessorState",
    "RemoteProcessGroup",
    "RemoteProcessGroupComponent",
    "ReportingTask",
    "ReportingTaskComponent",
    "ReportingTaskState",
    "Revision",
    "TenantKind",
    "User",
    "cleanup_nil_properties",
    "identity_fields",
    "state_update",
]

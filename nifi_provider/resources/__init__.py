"""Reconcilers, one per declarative resource type."""

from nifi_provider.resources.base import FailurePolicy, Resource, Step
from nifi_provider.resources.connection import ConnectionResource
from nifi_provider.resources.controller_service import ControllerServiceResource
from nifi_provider.resources.funnel import FunnelResource
from nifi_provider.resources.port import PortResource
from nifi_provider.resources.process_group import ProcessGroupResource
from nifi_provider.resources.processor import ProcessorResource
from nifi_provider.resources.remote_process_group import RemoteProcessGroupResource
from nifi_provider.resources.reporting_task import ReportingTaskResource
from nifi_provider.resources.tenant import GroupResource, UserResource

RESOURCE_TYPES: tuple[type[Resource], ...] = (
    ProcessGroupResource,
    ProcessorResource,
    ConnectionResource,
    ControllerServiceResource,
    PortResource,
    RemoteProcessGroupResource,
    ReportingTaskResource,
    UserResource,
    GroupResource,
    FunnelResource,
)

__all__ = [
    "RESOURCE_TYPES",
    "ConnectionResource",
    "ControllerServiceResource",
    "FailurePolicy",
    "FunnelResource",
    "GroupResource",
    "PortResource",
    "ProcessGroupResource",
    "ProcessorResource",
    "RemoteProcessGroupResource",
    "ReportingTaskResource",
    "Resource",
    "Step",
    "UserResource",
]

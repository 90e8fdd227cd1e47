"""Input/output port reconciler.

An input port cannot run until a connection feeds it, so only output ports
are started on creation. Port state changes are polled for convergence by
the lifecycle controller.
"""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.models import Port, PortType
from nifi_provider.resources.base import FailurePolicy, Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class PortResource(Resource):
    kind = "port"
    type_name = "nifi_port"

    def _port_type(self, d: ResourceData) -> PortType:
        return schema.port_from_schema(d).component.port_type

    def fetch(self, d: ResourceData) -> Port:
        return self.client.get_port(self._port_type(d), d.id)

    def to_schema(self, d: ResourceData, entity: Port) -> None:
        schema.port_to_schema(d, entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.port_from_schema(d)
        port_type = desired.component.port_type
        logger.info("Creating %s %r", port_type.lower(), desired.component.name)

        def create(ctx):
            d.id = self.client.create_port(desired).id

        def start(ctx):
            if port_type is PortType.OUTPUT_PORT:
                self.lifecycle.start_port(port_type, d.id)

        self.run_steps(
            d,
            [Step("create port", create), Step("start port", start, FailurePolicy.LOG)],
        )
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.port_from_schema(d)
        port_type = desired.component.port_type
        logger.info("Updating port %s", d.id)

        def stop(ctx):
            ctx.was_running = self.lifecycle.stop_port(port_type, d.id)

        def apply(ctx):
            current = self.fetch(d)
            c = current.component
            c.name = desired.component.name
            c.comments = desired.component.comments
            c.position = desired.component.position
            c.state = ""
            self.client.update_port(current)

        def restore(ctx):
            if ctx.was_running:
                self.lifecycle.start_port(port_type, d.id)

        with self.client.lock:
            self.run_steps(
                d,
                [
                    Step("stop port", stop),
                    Step("update port", apply),
                    Step("restart port", restore, FailurePolicy.LOG),
                ],
            )
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        port_type = self._port_type(d)
        with self.client.lock:
            if self.fetch_existing(d) is None:
                return
            logger.info("Deleting port %s", d.id)
            self.run_steps(
                d,
                [
                    Step("stop port", lambda ctx: self.lifecycle.stop_port(port_type, d.id)),
                    Step("delete port", lambda ctx: self.client.delete_port(self.fetch(d))),
                ],
            )
        d.id = ""

"""Connection reconciler.

NiFi only accepts topology changes to a connection whose endpoints are not
running, and only deletes a connection whose queue is empty. Update and
delete therefore stop both endpoints, mutate, and restart the endpoints
that were running beforehand, all under the global lock.
"""

from __future__ import annotations

import logging
from types import SimpleNamespace

from nifi_provider import schema
from nifi_provider.models import Connection
from nifi_provider.resources.base import FailurePolicy, Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class ConnectionResource(Resource):
    kind = "connection"
    type_name = "nifi_connection"

    def fetch(self, d: ResourceData) -> Connection:
        return self.client.get_connection(d.id)

    def to_schema(self, d: ResourceData, entity: Connection) -> None:
        schema.connection_to_schema(d, entity)

    def _stop_endpoints(self) -> list[Step]:
        def stop_source(ctx):
            ctx.source_was_running = self.lifecycle.stop_endpoint(ctx.current.component.source)

        def stop_destination(ctx):
            ctx.destination_was_running = self.lifecycle.stop_endpoint(
                ctx.current.component.destination
            )

        return [Step("stop source", stop_source), Step("stop destination", stop_destination)]

    def _restore_endpoints(self) -> list[Step]:
        def start_source(ctx):
            if ctx.source_was_running:
                self.lifecycle.start_endpoint(ctx.current.component.source)

        def start_destination(ctx):
            if ctx.destination_was_running:
                self.lifecycle.start_endpoint(ctx.current.component.destination)

        return [
            Step("restart source", start_source, FailurePolicy.LOG),
            Step("restart destination", start_destination, FailurePolicy.LOG),
        ]

    def create(self, d: ResourceData) -> None:
        desired = schema.connection_from_schema(d)
        source, destination = desired.component.source, desired.component.destination
        logger.info(
            "Creating connection %s %s -> %s %s",
            source.type,
            source.id,
            destination.type,
            destination.id,
        )

        def create(ctx):
            d.id = self.client.create_connection(desired).id

        self.run_steps(
            d,
            [
                Step("create connection", create),
                Step(
                    "start source",
                    lambda ctx: self.lifecycle.start_endpoint(source),
                    FailurePolicy.LOG,
                ),
                Step(
                    "start destination",
                    lambda ctx: self.lifecycle.start_endpoint(destination),
                    FailurePolicy.LOG,
                ),
            ],
        )
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.connection_from_schema(d)
        logger.info("Updating connection %s", d.id)

        def fetch(ctx):
            ctx.current = self.fetch(d)

        def apply(ctx):
            latest = self.fetch(d)
            c = latest.component
            c.source = desired.component.source
            c.destination = desired.component.destination
            c.selected_relationships = desired.component.selected_relationships
            c.bends = desired.component.bends
            c.back_pressure_data_size_threshold = (
                desired.component.back_pressure_data_size_threshold
            )
            c.back_pressure_object_threshold = desired.component.back_pressure_object_threshold
            self.client.update_connection(latest)

        with self.client.lock:
            self.run_steps(
                d,
                [
                    Step("fetch connection", fetch),
                    *self._stop_endpoints(),
                    Step("update connection", apply),
                    *self._restore_endpoints(),
                ],
            )
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        with self.client.lock:
            current = self.fetch_existing(d)
            if current is None:
                return
            logger.info("Deleting connection %s", d.id)

            def drop(ctx):
                if not self.lifecycle.drop_data(ctx.current):
                    logger.warning("Queue of connection %s may not be empty", d.id)

            self.run_steps(
                d,
                [
                    *self._stop_endpoints(),
                    Step("drop queued data", drop, FailurePolicy.LOG),
                    Step(
                        "delete connection",
                        lambda ctx: self.client.delete_connection(self.fetch(d)),
                    ),
                    *self._restore_endpoints(),
                ],
                ctx=SimpleNamespace(current=current),
            )
        d.id = ""

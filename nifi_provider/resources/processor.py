"""Processor reconciler.

Updates and deletes run under the global lock: before a processor update is
submitted, connections leaving the processor that select a relationship the
update auto-terminates are trimmed or removed, which stops and restarts
their destination endpoints.
"""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.errors import NiFiError
from nifi_provider.models import Processor
from nifi_provider.resources.base import FailurePolicy, Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class ProcessorResource(Resource):
    kind = "processor"
    type_name = "nifi_processor"

    def fetch(self, d: ResourceData) -> Processor:
        return self.client.get_processor(d.id)

    def to_schema(self, d: ResourceData, entity: Processor) -> None:
        schema.processor_to_schema(d, entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.processor_from_schema(d)
        logger.info("Creating processor %r (%s)", desired.component.name, desired.component.type)

        def create(ctx):
            d.id = self.client.create_processor(desired).id

        self.run_steps(d, [Step("create processor", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.processor_from_schema(d)
        logger.info("Updating processor %s", d.id)

        def stop(ctx):
            ctx.was_running = self.lifecycle.stop_processor(d.id)

        def cleanup(ctx):
            current = self.fetch(d)
            self.remove_overlapping_connections(
                d.id,
                current.component.parent_group_id,
                desired.component.config.auto_terminated_relationships,
            )

        def apply(ctx):
            current = self.fetch(d)
            c = current.component
            c.name = desired.component.name
            c.position = desired.component.position
            c.config = desired.component.config
            c.state = ""
            self.client.update_processor(current)

        def restore(ctx):
            if ctx.was_running:
                self.lifecycle.start_processor(d.id)

        with self.client.lock:
            self.run_steps(
                d,
                [
                    Step("stop processor", stop),
                    Step("remove overlapping connections", cleanup),
                    Step("update processor", apply),
                    Step("restart processor", restore, FailurePolicy.LOG),
                ],
            )
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        with self.client.lock:
            if self.fetch_existing(d) is None:
                return
            logger.info("Deleting processor %s", d.id)
            self.run_steps(
                d,
                [
                    Step("stop processor", lambda ctx: self.lifecycle.stop_processor(d.id)),
                    Step(
                        "delete processor",
                        lambda ctx: self.client.delete_processor(self.fetch(d)),
                    ),
                ],
            )
        d.id = ""

    def remove_overlapping_connections(
        self, processor_id: str, group_id: str, auto_terminated: list[str]
    ) -> None:
        """Resolve relationships that are about to become auto-terminated.

        NiFi rejects a relationship that is both auto-terminated and selected
        by a connection. Each connection leaving ``processor_id`` loses the
        overlapping relationships; one left with none is drained and deleted.
        The destination endpoint is stopped around the change and restarted
        if it was running.
        """
        terminated = set(auto_terminated)
        if not terminated:
            return

        for connection in self.client.get_process_group_connections(group_id):
            c = connection.component
            if c.source.id != processor_id or not terminated & set(c.selected_relationships):
                continue

            was_running = self.lifecycle.stop_endpoint(c.destination)
            current = self.client.get_connection(connection.id)
            remaining = [
                r for r in current.component.selected_relationships if r not in terminated
            ]
            if remaining:
                current.component.selected_relationships = remaining
                self.client.update_connection(current)
                logger.info(
                    "Connection %s now selects %s", connection.id, ", ".join(remaining)
                )
            else:
                self.lifecycle.drop_data(current)
                self.client.delete_connection(self.client.get_connection(connection.id))
                logger.info(
                    "Connection %s removed: all relationships auto-terminated", connection.id
                )

            if was_running:
                try:
                    self.lifecycle.start_endpoint(c.destination)
                except NiFiError as exc:
                    logger.warning(
                        "Failed to restart %s %s: %s", c.destination.type, c.destination.id, exc
                    )

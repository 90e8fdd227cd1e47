"""Reporting task reconciler. A running task is stopped around updates and deletes."""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.models import ReportingTask
from nifi_provider.resources.base import FailurePolicy, Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class ReportingTaskResource(Resource):
    kind = "reporting task"
    type_name = "nifi_reporting_task"

    def fetch(self, d: ResourceData) -> ReportingTask:
        return self.client.get_reporting_task(d.id)

    def to_schema(self, d: ResourceData, entity: ReportingTask) -> None:
        schema.reporting_task_to_schema(d, entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.reporting_task_from_schema(d)
        logger.info(
            "Creating reporting task %r (%s)", desired.component.name, desired.component.type
        )

        def create(ctx):
            d.id = self.client.create_reporting_task(desired).id

        self.run_steps(d, [Step("create reporting task", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.reporting_task_from_schema(d)
        logger.info("Updating reporting task %s", d.id)

        def stop(ctx):
            ctx.was_running = self.lifecycle.stop_reporting_task(d.id)

        def apply(ctx):
            current = self.fetch(d)
            c = current.component
            c.name = desired.component.name
            c.comments = desired.component.comments
            c.scheduling_strategy = desired.component.scheduling_strategy
            c.scheduling_period = desired.component.scheduling_period
            c.properties = desired.component.properties
            self.client.update_reporting_task(current)

        def restore(ctx):
            if ctx.was_running:
                self.lifecycle.start_reporting_task(d.id)

        self.run_steps(
            d,
            [
                Step("stop reporting task", stop),
                Step("update reporting task", apply),
                Step("restart reporting task", restore, FailurePolicy.LOG),
            ],
        )
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        if self.fetch_existing(d) is None:
            return
        logger.info("Deleting reporting task %s", d.id)
        self.run_steps(
            d,
            [
                Step("stop reporting task", lambda ctx: self.lifecycle.stop_reporting_task(d.id)),
                Step(
                    "delete reporting task",
                    lambda ctx: self.client.delete_reporting_task(self.fetch(d)),
                ),
            ],
        )
        d.id = ""

"""Process group reconciler. Single-entity; runs without the global lock."""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.models import ProcessGroup
from nifi_provider.resources.base import Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class ProcessGroupResource(Resource):
    kind = "process group"
    type_name = "nifi_process_group"

    def fetch(self, d: ResourceData) -> ProcessGroup:
        return self.client.get_process_group(d.id)

    def to_schema(self, d: ResourceData, entity: ProcessGroup) -> None:
        schema.process_group_to_schema(d, entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.process_group_from_schema(d)
        logger.info("Creating process group %r", desired.component.name)

        def create(ctx):
            d.id = self.client.create_process_group(desired).id

        self.run_steps(d, [Step("create process group", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.process_group_from_schema(d)
        logger.info("Updating process group %s", d.id)

        def apply(ctx):
            current = self.fetch(d)
            desired.revision = current.revision
            desired.component.parent_group_id = current.component.parent_group_id
            self.client.update_process_group(desired)

        self.run_steps(d, [Step("update process group", apply)])
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        current = self.fetch_existing(d)
        if current is None:
            return
        logger.info("Deleting process group %s", d.id)
        self.run_steps(
            d, [Step("delete process group", lambda ctx: self.client.delete_process_group(current))]
        )
        d.id = ""

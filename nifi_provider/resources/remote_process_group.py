"""Remote process group reconciler."""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.models import RemoteProcessGroup
from nifi_provider.resources.base import Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class RemoteProcessGroupResource(Resource):
    kind = "remote process group"
    type_name = "nifi_remote_process_group"

    def fetch(self, d: ResourceData) -> RemoteProcessGroup:
        return self.client.get_remote_process_group(d.id)

    def to_schema(self, d: ResourceData, entity: RemoteProcessGroup) -> None:
        schema.remote_process_group_to_schema(d, entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.remote_process_group_from_schema(d)
        logger.info(
            "Creating remote process group %r -> %s",
            desired.component.name,
            desired.component.target_uris,
        )

        def create(ctx):
            d.id = self.client.create_remote_process_group(desired).id

        self.run_steps(d, [Step("create remote process group", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.remote_process_group_from_schema(d)
        logger.info("Updating remote process group %s", d.id)

        def apply(ctx):
            current = self.fetch(d)
            desired.revision = current.revision
            self.client.update_remote_process_group(desired)

        self.run_steps(d, [Step("update remote process group", apply)])
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        current = self.fetch_existing(d)
        if current is None:
            return
        logger.info("Deleting remote process group %s", d.id)
        self.run_steps(
            d,
            [
                Step(
                    "delete remote process group",
                    lambda ctx: self.client.delete_remote_process_group(current),
                )
            ],
        )
        d.id = ""

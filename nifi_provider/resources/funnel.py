"""Funnel reconciler."""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.models import Funnel
from nifi_provider.resources.base import Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class FunnelResource(Resource):
    kind = "funnel"
    type_name = "nifi_funnel"

    def fetch(self, d: ResourceData) -> Funnel:
        return self.client.get_funnel(d.id)

    def to_schema(self, d: ResourceData, entity: Funnel) -> None:
        schema.funnel_to_schema(d, entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.funnel_from_schema(d)
        logger.info("Creating funnel in process group %s", desired.parent_group_id)

        def create(ctx):
            d.id = self.client.create_funnel(desired).id

        self.run_steps(d, [Step("create funnel", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.funnel_from_schema(d)

        def apply(ctx):
            current = self.fetch(d)
            current.position = desired.position
            self.client.update_funnel(current)

        with self.client.lock:
            self.run_steps(d, [Step("update funnel", apply)])
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        with self.client.lock:
            current = self.fetch_existing(d)
            if current is None:
                return
            logger.info("Deleting funnel %s", d.id)
            self.run_steps(
                d, [Step("delete funnel", lambda ctx: self.client.delete_funnel(current))]
            )
        d.id = ""

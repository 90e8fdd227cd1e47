"""Controller service reconciler.

A controller service only accepts configuration changes while DISABLED, so
updates disable it first and enable it again afterwards. Enabling is
best-effort: a service that fails validation stays disabled and the failure
is only logged.
"""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.models import ControllerService
from nifi_provider.resources.base import FailurePolicy, Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class ControllerServiceResource(Resource):
    kind = "controller service"
    type_name = "nifi_controller_service"

    def fetch(self, d: ResourceData) -> ControllerService:
        return self.client.get_controller_service(d.id)

    def to_schema(self, d: ResourceData, entity: ControllerService) -> None:
        schema.controller_service_to_schema(d, entity)

    def _enable(self, d: ResourceData) -> Step:
        return Step(
            "enable controller service",
            lambda ctx: self.lifecycle.enable_controller_service(d.id),
            FailurePolicy.LOG,
        )

    def create(self, d: ResourceData) -> None:
        desired = schema.controller_service_from_schema(d)
        logger.info(
            "Creating controller service %r (%s)", desired.component.name, desired.component.type
        )

        def create(ctx):
            d.id = self.client.create_controller_service(desired).id

        self.run_steps(d, [Step("create controller service", create), self._enable(d)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.controller_service_from_schema(d)
        logger.info("Updating controller service %s", d.id)

        def apply(ctx):
            current = self.fetch(d)
            c = current.component
            c.name = desired.component.name
            c.properties = desired.component.properties
            self.client.update_controller_service(current)

        self.run_steps(
            d,
            [
                Step(
                    "disable controller service",
                    lambda ctx: self.lifecycle.disable_controller_service(d.id),
                    FailurePolicy.LOG,
                ),
                Step("update controller service", apply),
                self._enable(d),
            ],
        )
        self.read(d)

    def delete(self, d: ResourceData) -> None:
        if self.fetch_existing(d) is None:
            return
        logger.info("Deleting controller service %s", d.id)
        self.run_steps(
            d,
            [
                Step(
                    "disable controller service",
                    lambda ctx: self.lifecycle.disable_controller_service(d.id),
                ),
                Step(
                    "delete controller service",
                    lambda ctx: self.client.delete_controller_service(self.fetch(d)),
                ),
            ],
        )
        d.id = ""

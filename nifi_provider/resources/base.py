"""Step runner and shared behaviour of every reconciler.

A reconciliation sequence is an ordered list of :class:`Step` objects. Each
step carries its own failure policy: ``ABORT`` steps stop the sequence and
raise :class:`ReconcileError`, ``LOG`` steps log a warning and let the
sequence carry on. Steps share a namespace (``ctx``) for values such as the
freshly fetched entity or whether an endpoint was running before it was
stopped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from types import SimpleNamespace
from typing import Any

from nifi_provider.client import NiFiClient
from nifi_provider.errors import NiFiError, NotFoundError, ReconcileError, SchemaParseError
from nifi_provider.lifecycle import LifecycleController
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class FailurePolicy(StrEnum):
    ABORT = "abort"
    LOG = "log"


@dataclass
class Step:
    description: str
    action: Callable[[SimpleNamespace], Any]
    policy: FailurePolicy = FailurePolicy.ABORT


class Resource:
    """Base reconciler for one declarative resource type.

    Subclasses set ``kind`` and ``type_name`` and implement ``fetch`` and
    ``to_schema``; ``read`` and ``exists`` are shared.
    """

    kind = ""
    type_name = ""

    def __init__(self, client: NiFiClient, lifecycle: LifecycleController) -> None:
        self.client = client
        self.lifecycle = lifecycle

    def fetch(self, d: ResourceData) -> Any:
        raise NotImplementedError

    def to_schema(self, d: ResourceData, entity: Any) -> None:
        raise NotImplementedError

    def create(self, d: ResourceData) -> None:
        raise NotImplementedError

    def update(self, d: ResourceData) -> None:
        raise NotImplementedError

    def delete(self, d: ResourceData) -> None:
        raise NotImplementedError

    def run_steps(
        self, d: ResourceData, steps: list[Step], ctx: SimpleNamespace | None = None
    ) -> SimpleNamespace:
        """Run ``steps`` in order, applying each step's failure policy.

        ``SchemaParseError`` and ``ConfigurationError`` always propagate
        unchanged.

        Raises:
            ReconcileError: When an ``ABORT`` step fails; the step's error is
                chained as the cause.
        """
        ctx = ctx if ctx is not None else SimpleNamespace()
        for step in steps:
            logger.debug("%s %s: %s", self.kind, d.id or "<new>", step.description)
            try:
                step.action(ctx)
            except SchemaParseError:
                raise
            except NiFiError as exc:
                if step.policy is FailurePolicy.LOG:
                    logger.warning(
                        "%s %s: %s failed, continuing: %s",
                        self.kind,
                        d.id or "<new>",
                        step.description,
                        exc,
                    )
                    continue
                raise ReconcileError(self.kind, d.id, step.description, str(exc)) from exc
        return ctx

    def read(self, d: ResourceData) -> None:
        """Refresh the observed state of ``d`` from NiFi."""
        try:
            entity = self.fetch(d)
        except NiFiError as exc:
            raise ReconcileError(self.kind, d.id, "read", str(exc)) from exc
        self.to_schema(d, entity)

    def exists(self, d: ResourceData) -> bool:
        """Check the tracked entity still exists, forgetting it if it does not."""
        if not d.id:
            return False
        try:
            self.fetch(d)
        except NotFoundError:
            self.forget(d)
            return False
        except NiFiError as exc:
            raise ReconcileError(self.kind, d.id, "check existence", str(exc)) from exc
        return True

    def fetch_existing(self, d: ResourceData) -> Any:
        """Fetch the tracked entity for deletion; ``None`` when it is already gone."""
        try:
            return self.fetch(d)
        except NotFoundError:
            self.forget(d)
            return None
        except NiFiError as exc:
            raise ReconcileError(self.kind, d.id, "fetch", str(exc)) from exc

    def forget(self, d: ResourceData) -> None:
        logger.info("%s %s no longer exists, removing from state", self.kind, d.id)
        d.id = ""

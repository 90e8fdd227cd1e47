"""Run-state transitions that have to be sequenced around CRUD calls.

States per kind:
    processor, port, reporting task: STOPPED <-> RUNNING (DISABLED is left alone)
    controller service:              DISABLED <-> ENABLED
    funnel:                          no run state

Every transition is idempotent: asking for the current state is a no-op.
Port transitions and queue purges complete asynchronously on the server and
are confirmed with :func:`nifi_provider.polling.poll`; exhausting the attempt
budget is logged and reported to the caller as ``False``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from nifi_provider.client import NiFiClient
from nifi_provider.errors import ConflictError, NiFiError
from nifi_provider.models import (
    Connection,
    ConnectionHand,
    ControllerServiceState,
    EndpointKind,
    PortState,
    PortType,
    ProcessorState,
    ReportingTaskState,
)
from nifi_provider.polling import poll

logger = logging.getLogger(__name__)

PORT_STATE_ATTEMPTS = 5
DROP_REQUEST_ATTEMPTS = 10


class LifecycleController:
    """State machines for processors, ports, controller services and queues.

    Args:
        client: Entity repository used for every read and write.
        poll_interval: Seconds between polling attempts.
        sleep: Sleep function, injectable for tests.
    """

    def __init__(
        self,
        client: NiFiClient,
        poll_interval: float = 3.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.poll_interval = poll_interval
        self._sleep = sleep

    # ── Processors ────────────────────────────────────────────────────

    def start_processor(self, processor_id: str) -> None:
        processor = self.client.get_processor(processor_id)
        if processor.component.state == ProcessorState.RUNNING:
            return
        self.client.set_processor_state(processor, ProcessorState.RUNNING)
        logger.info("Processor %s started", processor_id)

    def stop_processor(self, processor_id: str) -> bool:
        """Stop a processor. Returns whether it was RUNNING beforehand."""
        processor = self.client.get_processor(processor_id)
        if processor.component.state != ProcessorState.RUNNING:
            return False
        self.client.set_processor_state(processor, ProcessorState.STOPPED)
        logger.info("Processor %s stopped", processor_id)
        return True

    # ── Ports ─────────────────────────────────────────────────────────

    def set_port_state(self, port_type: PortType, port_id: str, state: PortState) -> bool:
        """Move a port to ``state`` and wait until the server reports it.

        A 409 on the state change means the port is already in that state
        or is transitioning to it; convergence is still polled.

        Returns:
            True if the port was observed in ``state``, False on exhaustion.
        """
        port = self.client.get_port(port_type, port_id)
        if port.component.state == state:
            return True
        try:
            self.client.set_port_state(port, state)
        except ConflictError:
            logger.debug("Port %s already transitioning to %s", port_id, state)

        def converged() -> bool:
            return self.client.get_port(port_type, port_id).component.state == state

        done = poll(
            converged,
            attempts=PORT_STATE_ATTEMPTS,
            interval=self.poll_interval,
            description=f"port {port_id} {state}",
            sleep=self._sleep,
        )
        if done:
            logger.info("Port %s %s", port_id, state.lower())
        return done

    def start_port(self, port_type: PortType, port_id: str) -> bool:
        return self.set_port_state(port_type, port_id, PortState.RUNNING)

    def stop_port(self, port_type: PortType, port_id: str) -> bool:
        """Stop a port. Returns whether it was RUNNING beforehand."""
        port = self.client.get_port(port_type, port_id)
        if port.component.state != PortState.RUNNING:
            return False
        self.set_port_state(port_type, port_id, PortState.STOPPED)
        return True

    # ── Controller services ───────────────────────────────────────────

    def enable_controller_service(self, service_id: str) -> None:
        service = self.client.get_controller_service(service_id)
        if service.component.state == ControllerServiceState.ENABLED:
            return
        self.client.set_controller_service_state(service, ControllerServiceState.ENABLED)
        logger.info("Controller service %s enabled", service_id)

    def disable_controller_service(self, service_id: str) -> bool:
        """Disable a controller service. Returns whether it was ENABLED beforehand."""
        service = self.client.get_controller_service(service_id)
        if service.component.state != ControllerServiceState.ENABLED:
            return False
        self.client.set_controller_service_state(service, ControllerServiceState.DISABLED)
        logger.info("Controller service %s disabled", service_id)
        return True

    # ── Reporting tasks ───────────────────────────────────────────────

    def start_reporting_task(self, task_id: str) -> None:
        task = self.client.get_reporting_task(task_id)
        if task.component.state == ReportingTaskState.RUNNING:
            return
        self.client.set_reporting_task_state(task, ReportingTaskState.RUNNING)
        logger.info("Reporting task %s started", task_id)

    def stop_reporting_task(self, task_id: str) -> bool:
        task = self.client.get_reporting_task(task_id)
        if task.component.state != ReportingTaskState.RUNNING:
            return False
        self.client.set_reporting_task_state(task, ReportingTaskState.STOPPED)
        logger.info("Reporting task %s stopped", task_id)
        return True

    # ── Connections ───────────────────────────────────────────────────

    def drop_data(self, connection: Connection) -> bool:
        """Purge the queue of a connection.

        Issues a drop request, waits for it to finish, then deletes the
        request whatever the outcome.

        Returns:
            True if the drop request reported ``finished``.
        """
        request = self.client.create_drop_request(connection.id)
        logger.info("Dropping queued data of connection %s", connection.id)
        try:
            finished = poll(
                lambda: self.client.get_drop_request(connection.id, request.id).finished,
                attempts=DROP_REQUEST_ATTEMPTS,
                interval=self.poll_interval,
                description=f"drop request {request.id}",
                sleep=self._sleep,
            )
        finally:
            try:
                self.client.delete_drop_request(connection.id, request.id)
            except NiFiError as exc:
                logger.warning("Failed to remove drop request %s: %s", request.id, exc)
        return finished

    def endpoint(self, hand: ConnectionHand) -> Endpoint:
        return _ENDPOINTS.get(hand.type, UnmanagedEndpoint)(self, hand)

    def start_endpoint(self, hand: ConnectionHand) -> None:
        self.endpoint(hand).start()

    def stop_endpoint(self, hand: ConnectionHand) -> bool:
        return self.endpoint(hand).stop()


class Endpoint:
    """Start/stop capability of the component at one end of a connection."""

    def __init__(self, lifecycle: LifecycleController, hand: ConnectionHand) -> None:
        self.lifecycle = lifecycle
        self.hand = hand

    def start(self) -> None:
        raise NotImplementedError

    def stop(self) -> bool:
        """Stop the component. Returns whether it was running beforehand."""
        raise NotImplementedError


class ProcessorEndpoint(Endpoint):
    def start(self) -> None:
        self.lifecycle.start_processor(self.hand.id)

    def stop(self) -> bool:
        return self.lifecycle.stop_processor(self.hand.id)


class PortEndpoint(Endpoint):
    @property
    def port_type(self) -> PortType:
        return PortType(str(self.hand.type))

    def start(self) -> None:
        self.lifecycle.start_port(self.port_type, self.hand.id)

    def stop(self) -> bool:
        return self.lifecycle.stop_port(self.port_type, self.hand.id)


class FunnelEndpoint(Endpoint):
    def start(self) -> None:
        pass

    def stop(self) -> bool:
        return False


class UnmanagedEndpoint(Endpoint):
    """Endpoint kinds read back from NiFi whose run state is not ours to change.

    Remote process group ports follow the transmission state of their
    remote process group.
    """

    def start(self) -> None:
        logger.debug("Leaving %s %s as it is", self.hand.type, self.hand.id)

    def stop(self) -> bool:
        logger.debug("Leaving %s %s as it is", self.hand.type, self.hand.id)
        return False


_ENDPOINTS: dict[EndpointKind, type[Endpoint]] = {
    EndpointKind.PROCESSOR: ProcessorEndpoint,
    EndpointKind.INPUT_PORT: PortEndpoint,
    EndpointKind.OUTPUT_PORT: PortEndpoint,
    EndpointKind.FUNNEL: FunnelEndpoint,
}

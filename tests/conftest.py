"""Shared fixtures for the NiFi flow provider test suite.

Unit tests run against ``FakeNiFi``, an in-memory stand-in for the NiFi REST
API that plugs in where the HTTP transport normally sits. It keeps the rules
that make reconciliation ordering matter:

* every PUT/DELETE must carry the current revision (409 otherwise),
* a connection cannot be changed or deleted while an endpoint is running,
* a connection with queued flowfiles cannot be deleted,
* a relationship cannot be both auto-terminated and selected by a connection,
* a processor only starts when every relationship is terminated or connected,
* an input port without an incoming connection cannot be started,
* port state changes become visible only after a few reads,
* drop requests finish after a few polls.
"""

from __future__ import annotations

import copy
import itertools
from collections import defaultdict
from typing import Any, NamedTuple
from urllib.parse import parse_qs, urlsplit

import pytest

from nifi_provider.config import ProviderConfig
from nifi_provider.errors import TransportError
from nifi_provider.provider import Provider

# ---------------------------------------------------------------------------
# In-memory NiFi
# ---------------------------------------------------------------------------

ENDPOINT_COLLECTIONS = {
    "PROCESSOR": "processors",
    "INPUT_PORT": "input-ports",
    "OUTPUT_PORT": "output-ports",
    "FUNNEL": "funnels",
    "REMOTE_INPUT_PORT": "remote-ports",
    "REMOTE_OUTPUT_PORT": "remote-ports",
}

ENTITY_COLLECTIONS = {
    "process-groups",
    "processors",
    "connections",
    "controller-services",
    "input-ports",
    "output-ports",
    "remote-process-groups",
    "reporting-tasks",
    "funnels",
}


class Call(NamedTuple):
    method: str
    path: str
    body: Any
    locked: bool


class FakeNiFi:
    """In-memory NiFi exposing the ``call(method, path, body)`` transport interface."""

    ROOT_ID = "0f3a91c2-0187-1000-root"

    GENERATE = "org.apache.nifi.processors.standard.GenerateFlowFile"
    LOG_ATTRIBUTE = "org.apache.nifi.processors.standard.LogAttribute"
    REPLACE_TEXT = "org.apache.nifi.processors.standard.ReplaceText"
    DBCP = "org.apache.nifi.dbcp.DBCPConnectionPool"
    PROMETHEUS = "org.apache.nifi.reporting.prometheus.PrometheusReportingTask"

    RELATIONSHIPS = {
        GENERATE: ["success"],
        LOG_ATTRIBUTE: ["success"],
        REPLACE_TEXT: ["success", "failure"],
    }

    def __init__(self, drop_polls: int = 2, port_lag: int = 1) -> None:
        self.drop_polls = drop_polls
        self.port_lag = port_lag
        self.store: dict[str, dict[str, dict]] = defaultdict(dict)
        self.queues: dict[str, int] = {}
        self.drops: dict[str, dict] = {}
        self.pending: dict[str, list] = {}
        self.calls: list[Call] = []
        self.lock = None
        self._failures: list[dict] = []
        self._ids = itertools.count(1)
        self.store["process-groups"][self.ROOT_ID] = {
            "id": self.ROOT_ID,
            "revision": {"version": 0},
            "component": {
                "id": self.ROOT_ID,
                "name": "NiFi Flow",
                "position": {"x": 0.0, "y": 0.0},
                "comments": "",
            },
        }

    # ── transport interface ─────────────────────────────────────────────

    def call(self, method: str, path: str, body: Any = None) -> tuple[int, Any]:
        locked = self.lock is not None and self.lock.locked()
        self.calls.append(Call(method, path, copy.deepcopy(body), locked))
        self._maybe_fail(method, path)

        url = urlsplit(path)
        parts = [p for p in url.path.split("/") if p]
        payload = self._route(method, path, parts, parse_qs(url.query), body)
        return (201 if method == "POST" else 200), copy.deepcopy(payload)

    def close(self) -> None:
        pass

    # ── test helpers ────────────────────────────────────────────────────

    def fail(self, method: str, fragment: str, status: int = 500, times: int | None = 1) -> None:
        """Make matching calls fail with ``status`` (``times=None`` for always)."""
        self._failures.append(
            {"method": method, "fragment": fragment, "status": status, "times": times}
        )

    def calls_to(self, method: str, fragment: str = "") -> list[Call]:
        return [c for c in self.calls if c.method == method and fragment in c.path]

    def entity(self, collection: str, entity_id: str) -> dict:
        return self.store[collection][entity_id]

    def state(self, collection: str, entity_id: str) -> str:
        return self.store[collection][entity_id]["component"].get("state", "")

    def exists(self, collection: str, entity_id: str) -> bool:
        return entity_id in self.store[collection]

    def add(self, collection: str, component: dict, parent_id: str | None = ROOT_ID) -> str:
        entity_id = f"{collection[:-1]}-{next(self._ids)}"
        component = {**copy.deepcopy(component), "id": entity_id}
        if parent_id is not None:
            component["parentGroupId"] = parent_id
        self.store[collection][entity_id] = {
            "id": entity_id,
            "revision": {"version": 1},
            "component": component,
        }
        return entity_id

    def add_process_group(self, name: str, parent_id: str = ROOT_ID) -> str:
        return self.add(
            "process-groups", {"name": name, "position": {"x": 0.0, "y": 0.0}}, parent_id
        )

    def add_processor(
        self,
        name: str,
        type: str = GENERATE,
        state: str = "STOPPED",
        auto_terminated: tuple[str, ...] = (),
        parent_id: str = ROOT_ID,
    ) -> str:
        return self.add(
            "processors",
            {
                "name": name,
                "type": type,
                "state": state,
                "position": {"x": 0.0, "y": 0.0},
                "config": {
                    "schedulingStrategy": "TIMER_DRIVEN",
                    "schedulingPeriod": "0 sec",
                    "concurrentlySchedulableTaskCount": 1,
                    "properties": {"Custom Text": None},
                    "autoTerminatedRelationships": list(auto_terminated),
                },
            },
            parent_id,
        )

    def add_port(
        self, port_type: str, name: str, state: str = "STOPPED", parent_id: str = ROOT_ID
    ) -> str:
        collection = "input-ports" if port_type == "INPUT_PORT" else "output-ports"
        return self.add(
            collection,
            {
                "name": name,
                "type": port_type,
                "state": state,
                "comments": "",
                "position": {"x": 0.0, "y": 0.0},
            },
            parent_id,
        )

    def add_funnel(self, parent_id: str = ROOT_ID) -> str:
        return self.add("funnels", {"position": {"x": 0.0, "y": 0.0}}, parent_id)

    def add_remote_port(self, name: str, remote_group_id: str = "remote-process-group-1") -> str:
        """Add a port of a remote process group; its run state is not modelled."""
        return self.add("remote-ports", {"name": name, "groupId": remote_group_id}, None)

    def add_connection(
        self,
        source: tuple[str, str],
        destination: tuple[str, str],
        relationships: list[str],
        queued: int = 0,
        parent_id: str = ROOT_ID,
    ) -> str:
        connection_id = self.add(
            "connections",
            {
                "source": {"type": source[0], "id": source[1], "groupId": parent_id},
                "destination": {"type": destination[0], "id": destination[1], "groupId": parent_id},
                "selectedRelationships": list(relationships),
                "bends": [],
                "backPressureDataSizeThreshold": "1 GB",
                "backPressureObjectThreshold": 10000,
            },
            parent_id,
        )
        self.queues[connection_id] = queued
        return connection_id

    def add_controller_service(
        self, name: str, state: str = "DISABLED", parent_id: str = ROOT_ID
    ) -> str:
        return self.add(
            "controller-services",
            {"name": name, "type": self.DBCP, "state": state, "properties": {}},
            parent_id,
        )

    def add_reporting_task(self, name: str, state: str = "STOPPED") -> str:
        return self.add(
            "reporting-tasks",
            {
                "name": name,
                "type": self.PROMETHEUS,
                "state": state,
                "comments": "",
                "schedulingStrategy": "TIMER_DRIVEN",
                "schedulingPeriod": "60 sec",
                "properties": {},
            },
            None,
        )

    def add_user(self, identity: str) -> str:
        return self.add("users", {"identity": identity}, None)

    def add_group(self, identity: str, users: tuple[str, ...] = ()) -> str:
        return self.add(
            "user-groups", {"identity": identity, "users": [{"id": u} for u in users]}, None
        )

    # ── routing ─────────────────────────────────────────────────────────

    def _maybe_fail(self, method: str, path: str) -> None:
        for rule in self._failures:
            if rule["method"] == method and rule["fragment"] in path and rule["times"] != 0:
                if rule["times"] is not None:
                    rule["times"] -= 1
                raise TransportError(method, path, rule["status"], "injected failure")

    def _route(self, method: str, path: str, parts: list[str], query: dict, body: Any) -> Any:
        head = parts[0]
        if head == "process-groups" and len(parts) == 3:
            if method == "GET" and parts[2] == "connections":
                group_id = self._resolve(parts[1])
                return {
                    "connections": [
                        self._view("connections", c)
                        for c in self.store["connections"].values()
                        if c["component"].get("parentGroupId") == group_id
                    ]
                }
            if method == "POST":
                return self._create(method, path, parts[2], body, self._resolve(parts[1]))
        if parts[:2] == ["controller", "reporting-tasks"] and method == "POST":
            return self._create(method, path, "reporting-tasks", body, None)
        if head == "tenants":
            if parts[1] == "search-results":
                return self._search(query.get("q", [""])[0])
            if len(parts) == 2 and method == "POST":
                return self._create(method, path, parts[1], body, None)
            if len(parts) == 3:
                return self._entity(method, path, parts[1], parts[2], query, body)
        if head == "flowfile-queues":
            return self._drop(method, path, parts[1], parts[3] if len(parts) > 3 else None)
        if head in ENTITY_COLLECTIONS and len(parts) == 2:
            return self._entity(method, path, head, self._resolve(parts[1]), query, body)
        raise TransportError(method, path, 404, "no such endpoint")

    def _resolve(self, group_id: str) -> str:
        return self.ROOT_ID if group_id == "root" else group_id

    def _create(
        self, method: str, path: str, collection: str, body: dict, parent_id: str | None
    ) -> dict:
        if parent_id is not None and parent_id not in self.store["process-groups"]:
            raise TransportError(method, path, 404, "parent group not found")
        component = copy.deepcopy(body["component"])
        component.pop("id", None)
        if collection == "processors":
            component.setdefault("state", "STOPPED")
            config = component.setdefault("config", {})
            config["properties"] = {"Custom Text": None, **(config.get("properties") or {})}
        elif collection == "connections":
            self._check_endpoints_exist(method, path, component)
            self._check_overlap(method, path, component)
        elif collection == "controller-services":
            component["state"] = "DISABLED"
            component["properties"] = {"Validation Query": None, **component.get("properties", {})}
        elif collection in ("input-ports", "output-ports", "reporting-tasks"):
            component["state"] = "STOPPED"

        entity_id = self.add(collection, component, parent_id)
        if collection == "connections":
            self.queues[entity_id] = 0
        entity = self.store[collection][entity_id]
        return self._view(collection, entity)

    def _entity(
        self, method: str, path: str, collection: str, entity_id: str, query: dict, body: Any
    ) -> dict:
        entity = self.store[collection].get(entity_id)
        if entity is None:
            raise TransportError(method, path, 404, "not found")

        if method == "GET":
            if collection in ("input-ports", "output-ports"):
                self._advance_port(entity)
            return self._view(collection, entity)

        if method == "PUT":
            self._check_revision(method, path, entity, body["revision"]["version"])
            component = body["component"]
            if set(component) <= {"id", "state"}:
                self._set_state(method, path, collection, entity, component["state"])
            else:
                self._update(method, path, collection, entity, component)
            entity["revision"]["version"] += 1
            return self._view(collection, entity)

        if method == "DELETE":
            self._check_revision(method, path, entity, int(query.get("version", ["-1"])[0]))
            self._check_delete(method, path, collection, entity)
            del self.store[collection][entity_id]
            return self._view(collection, entity)

        raise TransportError(method, path, 405, "method not allowed")

    def _view(self, collection: str, entity: dict) -> dict:
        view = copy.deepcopy(entity)
        if collection == "processors":
            component = view["component"]
            terminated = set(component.get("config", {}).get("autoTerminatedRelationships") or [])
            component["relationships"] = [
                {"name": name, "autoTerminate": name in terminated}
                for name in self.RELATIONSHIPS.get(component.get("type"), ["success"])
            ]
        return view

    # ── rules ───────────────────────────────────────────────────────────

    def _check_revision(self, method: str, path: str, entity: dict, version: int) -> None:
        if version != entity["revision"]["version"]:
            current = entity["revision"]["version"]
            raise TransportError(method, path, 409, f"stale revision {version}, current {current}")

    def _endpoint(self, hand: dict) -> dict | None:
        return self.store[ENDPOINT_COLLECTIONS[hand["type"]]].get(hand["id"])

    def _is_running(self, hand: dict) -> bool:
        endpoint = self._endpoint(hand)
        return endpoint is not None and endpoint["component"].get("state") == "RUNNING"

    def _connections_of(self, entity_id: str) -> list[dict]:
        return [
            c["component"]
            for c in self.store["connections"].values()
            if entity_id in (c["component"]["source"]["id"], c["component"]["destination"]["id"])
        ]

    def _check_endpoints_exist(self, method: str, path: str, component: dict) -> None:
        for hand in (component["source"], component["destination"]):
            if self._endpoint(hand) is None:
                raise TransportError(method, path, 400, f"unknown endpoint {hand['id']}")

    def _check_overlap(self, method: str, path: str, component: dict) -> None:
        source = self._endpoint(component["source"])
        if component["source"]["type"] != "PROCESSOR" or source is None:
            return
        terminated = set(source["component"]["config"].get("autoTerminatedRelationships") or [])
        overlap = terminated & set(component.get("selectedRelationships") or [])
        if overlap:
            raise TransportError(method, path, 400, f"{sorted(overlap)} are auto-terminated")

    def _check_processor_overlap(
        self, method: str, path: str, processor_id: str, config: dict
    ) -> None:
        terminated = set(config.get("autoTerminatedRelationships") or [])
        for connection in self._connections_of(processor_id):
            if connection["source"]["id"] != processor_id:
                continue
            overlap = terminated & set(connection["selectedRelationships"])
            if overlap:
                raise TransportError(method, path, 400, f"{sorted(overlap)} are connected")

    def _set_state(self, method: str, path: str, collection: str, entity: dict, state: str) -> None:
        component = entity["component"]
        if collection == "processors" and state == "RUNNING":
            terminated = set(component["config"].get("autoTerminatedRelationships") or [])
            connected = {
                r
                for c in self._connections_of(component["id"])
                if c["source"]["id"] == component["id"]
                for r in c["selectedRelationships"]
            }
            for name in self.RELATIONSHIPS.get(component["type"], ["success"]):
                if name not in terminated | connected:
                    raise TransportError(method, path, 409, f"relationship {name} is invalid")
        if collection in ("input-ports", "output-ports"):
            if state == "RUNNING" and collection == "input-ports":
                incoming = [
                    c for c in self._connections_of(component["id"])
                    if c["destination"]["id"] == component["id"]
                ]
                if not incoming:
                    raise TransportError(method, path, 409, "input port has no connection")
            if self.port_lag:
                self.pending[component["id"]] = [state, self.port_lag]
                return
        component["state"] = state

    def _advance_port(self, entity: dict) -> None:
        pending = self.pending.get(entity["id"])
        if pending is None:
            return
        if pending[1] > 0:
            pending[1] -= 1
            return
        entity["component"]["state"] = pending[0]
        del self.pending[entity["id"]]

    def _update(
        self, method: str, path: str, collection: str, entity: dict, component: dict
    ) -> None:
        current = entity["component"]
        if collection in ("processors", "input-ports", "output-ports", "reporting-tasks"):
            if current.get("state") == "RUNNING":
                raise TransportError(method, path, 409, f"{current['id']} is running")
        if collection == "controller-services" and current.get("state") == "ENABLED":
            raise TransportError(method, path, 409, f"{current['id']} is enabled")
        if collection == "connections":
            for hand in (current["source"], current["destination"]):
                if self._is_running(hand):
                    raise TransportError(method, path, 409, f"endpoint {hand['id']} is running")
            self._check_overlap(method, path, component)
        if collection == "processors":
            config = component.get("config") or {}
            self._check_processor_overlap(method, path, current["id"], config)
            config["properties"] = {"Custom Text": None, **(config.get("properties") or {})}

        for key, value in component.items():
            if key not in ("id", "parentGroupId", "state"):
                current[key] = copy.deepcopy(value)

    def _check_delete(self, method: str, path: str, collection: str, entity: dict) -> None:
        component = entity["component"]
        if component.get("state") in ("RUNNING", "ENABLED"):
            raise TransportError(method, path, 409, f"{component['id']} is {component['state']}")
        if collection == "connections":
            for hand in (component["source"], component["destination"]):
                if self._is_running(hand):
                    raise TransportError(method, path, 409, f"endpoint {hand['id']} is running")
            if self.queues.get(component["id"], 0):
                raise TransportError(method, path, 409, "queue is not empty")
        if collection in ("processors", "input-ports", "output-ports", "funnels"):
            if self._connections_of(component["id"]):
                raise TransportError(method, path, 409, f"{component['id']} has connections")
        if collection == "process-groups":
            for items in self.store.values():
                for child in items.values():
                    if child["component"].get("parentGroupId") == component["id"]:
                        raise TransportError(method, path, 409, "process group is not empty")

    def _search(self, query: str) -> dict:
        def matches(collection: str) -> list[dict]:
            return [
                {"id": t["id"], "component": {"identity": t["component"]["identity"]}}
                for t in self.store[collection].values()
                if query in t["component"]["identity"]
            ]

        return {"users": matches("users"), "userGroups": matches("user-groups")}

    def _drop(self, method: str, path: str, connection_id: str, drop_id: str | None) -> dict:
        if connection_id not in self.store["connections"]:
            raise TransportError(method, path, 404, "connection not found")
        if method == "POST":
            drop_id = f"drop-{next(self._ids)}"
            self.drops[drop_id] = {"id": drop_id, "finished": False, "polls": 0}
        elif drop_id not in self.drops:
            raise TransportError(method, path, 404, "drop request not found")

        request = self.drops[drop_id]
        if method == "GET":
            request["polls"] += 1
            if request["polls"] >= self.drop_polls:
                request["finished"] = True
                self.queues[connection_id] = 0
        elif method == "DELETE":
            del self.drops[drop_id]
        return {"dropRequest": {"id": request["id"], "finished": request["finished"]}}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def fake_nifi() -> FakeNiFi:
    """Return an empty in-memory NiFi holding only the root process group."""
    return FakeNiFi()


@pytest.fixture()
def config() -> ProviderConfig:
    """Return a configuration pointing at a plaintext NiFi with no poll delay."""
    return ProviderConfig(host="nifi.test:8080", poll_interval=0.0)


@pytest.fixture()
def sleeps() -> list[float]:
    """Collect the sleeps requested by polling loops instead of sleeping."""
    return []


@pytest.fixture()
def provider(config: ProviderConfig, fake_nifi: FakeNiFi, sleeps: list[float]) -> Provider:
    """Return a Provider wired to ``fake_nifi``; the fake observes the global lock."""
    p = Provider(config, transport=fake_nifi, sleep=sleeps.append)
    fake_nifi.lock = p.client.lock
    return p


@pytest.fixture()
def client(provider: Provider):
    return provider.client


@pytest.fixture()
def lifecycle(provider: Provider):
    return provider.lifecycle

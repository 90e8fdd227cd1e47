"""User and user-group reconcilers.

A tenant declared without an id is looked up by identity: no match means it
does not exist yet, one match is adopted, and several matches are an error
since nothing distinguishes them.
"""

from __future__ import annotations

import logging

from nifi_provider import schema
from nifi_provider.errors import (
    AmbiguousIdentityError,
    NiFiError,
    NotFoundError,
    ReconcileError,
)
from nifi_provider.models import Group, TenantKind, User
from nifi_provider.resources.base import Resource, Step
from nifi_provider.schema import ResourceData

logger = logging.getLogger(__name__)


class TenantResource(Resource):
    tenant_kind = TenantKind.USER

    def identity(self, d: ResourceData) -> str:
        return schema.component_block(d).get("identity", "")

    def find_by_identity(self, identity: str) -> str:
        """Return the id of the single tenant with ``identity``.

        Raises:
            NotFoundError: When no tenant matches.
            AmbiguousIdentityError: When more than one tenant matches.
        """
        ids = self.client.search_tenants(self.tenant_kind, identity)
        if not ids:
            raise NotFoundError(self.kind, identity)
        if len(ids) > 1:
            raise AmbiguousIdentityError(self.kind, identity, ids)
        return ids[0]

    def exists(self, d: ResourceData) -> bool:
        if d.id:
            return super().exists(d)

        identity = self.identity(d)
        try:
            found = self.find_by_identity(identity)
        except NotFoundError:
            return False
        except AmbiguousIdentityError:
            raise
        except NiFiError as exc:
            raise ReconcileError(self.kind, identity, "search by identity", str(exc)) from exc
        logger.info("Adopting existing %s %r (%s)", self.kind, identity, found)
        d.id = found
        return True

    def delete(self, d: ResourceData) -> None:
        with self.client.lock:
            current = self.fetch_existing(d)
            if current is None:
                return
            logger.info("Deleting %s %s", self.kind, d.id)
            self.run_steps(d, [Step(f"delete {self.kind}", lambda ctx: self.remove(current))])
        d.id = ""

    def remove(self, entity) -> None:
        raise NotImplementedError


class UserResource(TenantResource):
    kind = "user"
    type_name = "nifi_user"
    tenant_kind = TenantKind.USER

    def fetch(self, d: ResourceData) -> User:
        return self.client.get_user(d.id)

    def to_schema(self, d: ResourceData, entity: User) -> None:
        schema.user_to_schema(d, entity)

    def remove(self, entity: User) -> None:
        self.client.delete_user(entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.user_from_schema(d)
        logger.info("Creating user %r", desired.identity)

        def create(ctx):
            d.id = self.client.create_user(desired).id

        self.run_steps(d, [Step("create user", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.user_from_schema(d)

        def apply(ctx):
            current = self.fetch(d)
            current.identity = desired.identity
            self.client.update_user(current)

        with self.client.lock:
            self.run_steps(d, [Step("update user", apply)])
        self.read(d)


class GroupResource(TenantResource):
    kind = "group"
    type_name = "nifi_group"
    tenant_kind = TenantKind.GROUP

    def fetch(self, d: ResourceData) -> Group:
        return self.client.get_group(d.id)

    def to_schema(self, d: ResourceData, entity: Group) -> None:
        schema.group_to_schema(d, entity)

    def remove(self, entity: Group) -> None:
        self.client.delete_group(entity)

    def create(self, d: ResourceData) -> None:
        desired = schema.group_from_schema(d)
        logger.info("Creating group %r with %d member(s)", desired.identity, len(desired.users))

        def create(ctx):
            d.id = self.client.create_group(desired).id

        self.run_steps(d, [Step("create group", create)])
        self.read(d)

    def update(self, d: ResourceData) -> None:
        desired = schema.group_from_schema(d)

        def apply(ctx):
            current = self.fetch(d)
            current.identity = desired.identity
            current.users = desired.users
            self.client.update_group(current)

        with self.client.lock:
            self.run_steps(d, [Step("update group", apply)])
        self.read(d)

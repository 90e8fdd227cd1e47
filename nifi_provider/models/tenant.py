"""Tenants: users and user groups."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from nifi_provider.models.common import Revision, identity_fields


class TenantKind(StrEnum):
    """Tenant flavour, selecting the sub-path under ``/tenants``."""

    USER = "users"
    GROUP = "user-groups"

    @property
    def search_key(self) -> str:
        """Key of this kind's matches in a tenant search result."""
        return "users" if self is TenantKind.USER else "userGroups"

    @property
    def label(self) -> str:
        return "user" if self is TenantKind.USER else "group"


@dataclass
class User:
    identity: str = ""
    id: str = ""
    parent_group_id: str = ""
    revision: Revision = field(default_factory=Revision)

    kind = TenantKind.USER

    def to_dict(self) -> dict[str, Any]:
        return {
            "revision": self.revision.to_dict(),
            "component": {
                **identity_fields(self.id, self.parent_group_id),
                "identity": self.identity,
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        comp = data.get("component", {})
        return cls(
            identity=comp.get("identity", ""),
            id=comp.get("id", data.get("id", "")),
            parent_group_id=comp.get("parentGroupId", ""),
            revision=Revision.from_dict(data.get("revision")),
        )


@dataclass
class Group:
    """A user group. Members are weak references by tenant id."""

    identity: str = ""
    id: str = ""
    parent_group_id: str = ""
    users: list[str] = field(default_factory=list)
    revision: Revision = field(default_factory=Revision)

    kind = TenantKind.GROUP

    def to_dict(self) -> dict[str, Any]:
        return {
            "revision": self.revision.to_dict(),
            "component": {
                **identity_fields(self.id, self.parent_group_id),
                "identity": self.identity,
                "users": [{"id": user_id} for user_id in self.users],
            },
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Group:
        comp = data.get("component", {})
        return cls(
            identity=comp.get("identity", ""),
            id=comp.get("id", data.get("id", "")),
            parent_group_id=comp.get("parentGroupId", ""),
            users=[t["id"] for t in comp.get("users") or [] if t.get("id")],
            revision=Revision.from_dict(data.get("revision")),
        )

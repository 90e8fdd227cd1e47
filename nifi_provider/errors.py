"""Exception hierarchy for the NiFi provider.

``NiFiError`` and its subclasses are recoverable: the current reconciliation
step fails and the caller decides what to do. ``ConfigurationError`` is kept
outside that hierarchy so best-effort steps can never swallow it.
"""

from __future__ import annotations


class ConfigurationError(Exception):
    """Raised for unrecoverable misconfiguration (bad endpoint type, missing host, ...)."""


class NiFiError(Exception):
    """Base class for failures talking to or reconciling against NiFi."""


class TransportError(NiFiError):
    """An HTTP call failed or returned a status of 300 or above.

    ``status_code`` is 0 when no response was received at all.
    """

    def __init__(self, method: str, path: str, status_code: int, detail: str = "") -> None:
        self.method = method
        self.path = path
        self.status_code = status_code
        self.detail = detail
        message = f"{method} {path} failed with the code of {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EntityError(NiFiError):
    """A repository operation failed for a specific entity."""

    action = "access"

    def __init__(self, kind: str, entity_id: str = "", status_code: int = 0) -> None:
        self.kind = kind
        self.entity_id = entity_id
        self.status_code = status_code
        target = f"{kind} {entity_id}" if entity_id else kind
        message = f"Failed to {self.action} {target}"
        if status_code:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)


class NotFoundError(EntityError):
    action = "find"


class ConflictError(EntityError):
    """The server rejected an update because the supplied revision is stale."""

    action = "update (stale revision)"


class CreateFailed(EntityError):
    action = "create"


class ReadFailed(EntityError):
    action = "read"


class UpdateFailed(EntityError):
    action = "update"


class DeleteFailed(EntityError):
    action = "delete"


class AmbiguousIdentityError(NiFiError):
    """A tenant identity search matched more than one tenant."""

    def __init__(self, kind: str, identity: str, ids: list[str]) -> None:
        self.kind = kind
        self.identity = identity
        self.ids = ids
        super().__init__(
            f"More than one {kind} found with identity {identity!r}: {', '.join(ids)}"
        )


class SchemaParseError(NiFiError):
    """The desired state does not have the expected shape."""


class ConvergenceTimeout(NiFiError):
    """A polled condition did not hold within the attempt budget."""


class ReconcileError(NiFiError):
    """A reconciliation step that must not fail did fail.

    The underlying error is chained as ``__cause__``.
    """

    def __init__(self, kind: str, resource_id: str, step: str, reason: str = "") -> None:
        self.kind = kind
        self.resource_id = resource_id
        self.step = step
        message = f"{kind} {resource_id or '<new>'}: {step} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)

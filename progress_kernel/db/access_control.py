"""
Storage-Boundary Access Control.

===============================================================================
WHY THIS EXISTS
===============================================================================

The engine performs no authorization of its own.  Whether a given actor may
create, update or delete a document is decided by an access policy that sits
at the storage boundary, exactly where a document store's security rules
would sit.  Write services therefore see permission failures the same way
they would see them from a remote store: as a typed error raised by the
write itself.

    session.flush()
         |
         v
    [before_flush] --> policy.check(AccessRequest) --> StoragePermissionError
         |
         v
    SQL sent to database (only if every pending document is allowed)

Because the check runs before any SQL is emitted for the flush, a denial
leaves the transaction with nothing new written by that flush; the service
that owns the transaction rolls back whatever earlier flushes did.

===============================================================================
USAGE
===============================================================================

    register_access_listeners()                  # once, at startup
    bind_access_policy(session, policy, actor_id="u-42")

A session without a bound policy is trusted (seed scripts, migrations).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Iterator, Protocol, runtime_checkable

from sqlalchemy import event
from sqlalchemy.orm import Session

from progress_kernel.domain.values import StorageOperation
from progress_kernel.exceptions import StoragePermissionError
from progress_kernel.logging_config import get_logger

logger = get_logger("db.access_control")

ACCESS_POLICY_KEY = "progress_access_policy"
ACCESS_ACTOR_KEY = "progress_access_actor"


@dataclass(frozen=True)
class AccessRequest:
    """One document operation awaiting a policy decision."""

    operation: StorageOperation
    path: str
    data: dict[str, Any] | None = None
    actor_id: str | None = None


@runtime_checkable
class AccessPolicy(Protocol):
    """Decides whether a document operation is allowed.

    Returns (allowed, reason); reason is empty when allowed.
    """

    def check(self, request: AccessRequest) -> tuple[bool, str]: ...


class AllowAllPolicy:
    """Allows every operation."""

    def check(self, request: AccessRequest) -> tuple[bool, str]:
        return (True, "")


class DenyAllPolicy:
    """Denies every operation. Models a read-only credential."""

    def __init__(self, reason: str = "read-only access"):
        self._reason = reason

    def check(self, request: AccessRequest) -> tuple[bool, str]:
        return (False, self._reason)


@dataclass(frozen=True)
class AccessRule:
    """
    A single path rule.

    ``path_pattern`` is a shell-style pattern matched against the full
    document path (``*`` also crosses ``/``, so ``projects/*`` covers the
    weeklyReports subcollection).  An empty ``actor_ids`` set matches
    every actor.
    """

    path_pattern: str
    operations: frozenset[StorageOperation]
    allow: bool
    actor_ids: frozenset[str] = field(default_factory=frozenset)

    def matches(self, request: AccessRequest) -> bool:
        if request.operation not in self.operations:
            return False
        if self.actor_ids and request.actor_id not in self.actor_ids:
            return False
        return fnmatchcase(request.path, self.path_pattern)


class RuleAccessPolicy:
    """First matching rule wins; ``default_allow`` applies when none match."""

    def __init__(self, rules: tuple[AccessRule, ...] | list[AccessRule], default_allow: bool = True):
        self.rules = tuple(rules)
        self.default_allow = default_allow

    def check(self, request: AccessRequest) -> tuple[bool, str]:
        for rule in self.rules:
            if rule.matches(request):
                if rule.allow:
                    return (True, "")
                return (False, f"denied by rule '{rule.path_pattern}'")
        if self.default_allow:
            return (True, "")
        return (False, "no rule allows this operation")


def bind_access_policy(
    session: Session,
    policy: AccessPolicy | None,
    actor_id: str | None = None,
) -> None:
    """Attach a policy (and the acting user) to a session."""
    if policy is None:
        session.info.pop(ACCESS_POLICY_KEY, None)
        session.info.pop(ACCESS_ACTOR_KEY, None)
        return
    session.info[ACCESS_POLICY_KEY] = policy
    session.info[ACCESS_ACTOR_KEY] = actor_id


def _pending_operations(session: Session) -> Iterator[tuple[StorageOperation, Any]]:
    for obj in list(session.new):
        yield StorageOperation.CREATE, obj
    for obj in list(session.dirty):
        if session.is_modified(obj, include_collections=False):
            yield StorageOperation.UPDATE, obj
    for obj in list(session.deleted):
        yield StorageOperation.DELETE, obj


def _check_access_before_flush(session, flush_context, instances):
    """Evaluate the bound policy for every pending document operation."""
    policy = session.info.get(ACCESS_POLICY_KEY)
    if policy is None:
        return
    actor_id = session.info.get(ACCESS_ACTOR_KEY)

    for operation, obj in _pending_operations(session):
        path = getattr(obj, "document_path", None)
        if path is None:
            continue
        data = None if operation is StorageOperation.DELETE else obj.to_document()
        allowed, reason = policy.check(
            AccessRequest(operation=operation, path=path, data=data, actor_id=actor_id)
        )
        if not allowed:
            logger.warning(
                "storage_access_denied",
                extra={
                    "path": path,
                    "storage_operation": operation.value,
                    "reason": reason,
                },
            )
            raise StoragePermissionError(
                path=path,
                operation=operation.value,
                attempted_data=data,
                reason=reason,
            )


def register_access_listeners() -> None:
    """Install the before_flush access check on every Session (idempotent)."""
    if not event.contains(Session, "before_flush", _check_access_before_flush):
        event.listen(Session, "before_flush", _check_access_before_flush)


def unregister_access_listeners() -> None:
    """Remove the access check. FOR TESTING ONLY."""
    if event.contains(Session, "before_flush", _check_access_before_flush):
        event.remove(Session, "before_flush", _check_access_before_flush)

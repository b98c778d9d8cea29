"""
Shared helpers for the write services.

Used by report_writer, project_deletion_service, project_service and
catalog_service to keep transaction settlement, permission-error
publication and storage-error translation in one place.
"""

from __future__ import annotations

from typing import Protocol

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.orm import Session

from progress_kernel.domain.notifications import (
    PermissionErrorChannel,
    PermissionErrorEvent,
)
from progress_kernel.exceptions import StoragePermissionError, StorageUnavailableError
from progress_kernel.services.results import SUCCESS_STATUSES, WriteStatus

UNAVAILABLE_ERRORS: tuple[type[Exception], ...] = (OperationalError, InterfaceError)


class SettlesTransaction(Protocol):
    status: WriteStatus


def is_success(result: SettlesTransaction) -> bool:
    return result.status in SUCCESS_STATUSES


def commit_or_rollback(session: Session, result: SettlesTransaction) -> None:
    """Commit the session if the write succeeded, otherwise rollback."""
    if is_success(result):
        session.commit()
    else:
        session.rollback()


def publish_permission_error(
    channel: PermissionErrorChannel,
    error: StoragePermissionError,
    path: str | None = None,
    operation: str | None = None,
) -> PermissionErrorEvent:
    """Publish a denial on the channel and return the event for the result."""
    event = PermissionErrorEvent.from_error(error, path=path, operation=operation)
    channel.publish(event)
    return event


def to_unavailable(error: DBAPIError, operation: str, path: str) -> StorageUnavailableError:
    """Translate a driver-level connectivity failure into the kernel type."""
    reason = str(error.orig) if error.orig is not None else str(error)
    return StorageUnavailableError(operation=operation, path=path, reason=reason)

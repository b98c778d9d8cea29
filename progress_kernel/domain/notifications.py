"""
Permission-error channel.

A denied storage write is published as a PermissionErrorEvent to the single
subscriber registered on a PermissionErrorChannel (typically the UI layer's
error surface).  Publishing is fire-and-forget: a failing subscriber is
logged and never interferes with the caller that reported the denial.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from progress_kernel.exceptions import StoragePermissionError
from progress_kernel.logging_config import get_logger

logger = get_logger("domain.notifications")


@dataclass(frozen=True)
class PermissionErrorEvent:
    """Diagnostic context of one denied operation."""

    path: str
    operation: str
    attempted_data: dict[str, Any] | None = None
    reason: str | None = None

    @classmethod
    def from_error(
        cls,
        error: StoragePermissionError,
        path: str | None = None,
        operation: str | None = None,
    ) -> PermissionErrorEvent:
        """Build an event from a denial, optionally overriding path/operation."""
        return cls(
            path=path or error.path,
            operation=operation or error.operation,
            attempted_data=error.attempted_data,
            reason=error.reason,
        )


PermissionErrorSubscriber = Callable[[PermissionErrorEvent], None]


class PermissionErrorChannel:
    """Single-subscriber publish point for permission errors."""

    def __init__(self, subscriber: PermissionErrorSubscriber | None = None):
        self._subscriber = subscriber

    @property
    def has_subscriber(self) -> bool:
        return self._subscriber is not None

    def subscribe(self, subscriber: PermissionErrorSubscriber) -> None:
        """Register the subscriber, replacing any previous one."""
        self._subscriber = subscriber

    def unsubscribe(self) -> None:
        self._subscriber = None

    def publish(self, event: PermissionErrorEvent) -> None:
        logger.warning(
            "permission_error_published",
            extra={"path": event.path, "storage_operation": event.operation},
        )
        if self._subscriber is None:
            return
        try:
            self._subscriber(event)
        except Exception:
            logger.error(
                "permission_error_subscriber_failed",
                extra={"path": event.path},
                exc_info=True,
            )

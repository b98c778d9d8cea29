"""
BaseService -- abstract base for the kernel's write services.

Responsibility:
    Common constructor for every write service: the caller's Session, the
    Clock that stamps creation times, and the PermissionErrorChannel denied
    writes are published on.

Invariants enforced:
    Each public write method is one logical operation and owns its
    transaction boundary: it commits on success and rolls back on every
    failure before returning or raising.  No method leaves a half-applied
    unit of work in the session.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from progress_kernel.db.base import Base
from progress_kernel.domain.clock import Clock, SystemClock
from progress_kernel.domain.notifications import PermissionErrorChannel

ModelType = TypeVar("ModelType", bound=Base)


class BaseService(ABC, Generic[ModelType]):
    """
    Abstract base class for kernel write services.

    Args:
        session: SQLAlchemy session for database operations.
        clock: Time source; SystemClock when omitted.
        channel: Permission-error channel; a subscriber-less channel when
            omitted (events are still logged).
    """

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        channel: PermissionErrorChannel | None = None,
    ):
        self.session = session
        self._clock = clock or SystemClock()
        self._channel = channel or PermissionErrorChannel()

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def channel(self) -> PermissionErrorChannel:
        return self._channel

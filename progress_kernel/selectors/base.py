"""
Module: progress_kernel.selectors.base
Responsibility: Abstract base class for all read-only query selectors.
Architecture position: Kernel > Selectors.  May import from db/, models/ and
    domain/ DTOs.  MUST NOT import from services/ or outer layers.

Invariants enforced:
    - Read-only access: selectors accept a Session from the caller and never
      add, delete, flush or commit.
    - DTO return convention: selectors return frozen DTOs, never ORM rows.

Failure modes:
    - Returns None or an empty sequence when nothing matches; only the
      ``get_*`` methods raise a NotFoundError.
"""

from abc import ABC
from typing import Generic, TypeVar

from sqlalchemy.orm import Session

from progress_kernel.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseSelector(ABC, Generic[ModelType]):
    """
    Abstract base class for all selectors.

    Contract:
        Selectors accept a Session from the caller, perform read-only queries,
        and return DTOs.  The caller owns the session and its transaction.
    """

    def __init__(self, session: Session):
        self.session = session

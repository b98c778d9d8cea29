"""
Write outcome statuses shared by the kernel write services.

Every write returns a frozen result whose ``status`` is exactly one of
these.  ``SAVED`` and ``DELETED`` are the success statuses; everything else
means nothing was written.
"""

from enum import Enum


class WriteStatus(str, Enum):
    """Status of a write operation."""

    SAVED = "saved"
    DELETED = "deleted"
    VALIDATION_FAILED = "validation_failed"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    DUPLICATE_WEEK = "duplicate_week"
    UNAVAILABLE = "unavailable"
    CONCURRENT_MODIFICATION = "concurrent_modification"


SUCCESS_STATUSES: frozenset[WriteStatus] = frozenset(
    {WriteStatus.SAVED, WriteStatus.DELETED}
)

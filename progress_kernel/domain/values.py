"""
Value enums shared by the domain, models and services.

Architecture position:
    Kernel > Domain -- pure value objects, ZERO I/O.  Models import these
    so that ORM columns and DTOs share one definition.
"""

from enum import Enum


class ProjectStatus(str, Enum):
    """Project lifecycle status.

    Contract: COMPLETED is only entered through an explicit caller decision
    (the completion confirmation) or a direct status update.
    """

    ON_TRACK = "On Track"
    AT_RISK = "At Risk"
    OFF_TRACK = "Off Track"
    ON_HOLD = "On Hold"
    COMPLETED = "Completed"


class ReportStatus(str, Enum):
    """Trajectory of a single week.

    Narrower than ProjectStatus: a report describes a week, never a
    terminal state, so ON_HOLD and COMPLETED are absent.
    """

    ON_TRACK = "On Track"
    AT_RISK = "At Risk"
    OFF_TRACK = "Off Track"


class StorageOperation(str, Enum):
    """Document operation kinds seen by the access policy and the
    permission-error channel."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    WRITE = "write"


PROJECT_STATUS_VALUES: frozenset[str] = frozenset(s.value for s in ProjectStatus)
REPORT_STATUS_VALUES: frozenset[str] = frozenset(s.value for s in ReportStatus)

"""
ORM-Level Immutability Enforcement for weekly reports.

===============================================================================
PROTECTED FIELDS
===============================================================================

Entity        | Field       | Why
--------------|-------------|---------------------------------------------------
WeeklyReport  | created_at  | Creation time is set once; edits must preserve it
WeeklyReport  | week        | Edits update a report in place, never renumber it
WeeklyReport  | project_id  | A report belongs to exactly one project for life

SQLAlchemy fires ``before_update`` before the UPDATE reaches the database.
If a protected attribute has pending changes, ImmutabilityViolationError is
raised and the transaction is aborted.

===============================================================================
USAGE
===============================================================================

    from progress_kernel.db.immutability import register_immutability_listeners
    register_immutability_listeners()  # Called once at startup

To temporarily disable (TESTS ONLY):

    unregister_immutability_listeners()
"""

from sqlalchemy import event
from sqlalchemy.orm.attributes import get_history

from progress_kernel.exceptions import ImmutabilityViolationError
from progress_kernel.logging_config import get_logger

logger = get_logger("db.immutability")

WEEKLY_REPORT_FIXED_FIELDS: tuple[str, ...] = ("created_at", "week", "project_id")


def _check_weekly_report_immutability(mapper, connection, target):
    """Block changes to a weekly report's fixed fields."""
    for field in WEEKLY_REPORT_FIXED_FIELDS:
        history = get_history(target, field)
        if history.deleted and history.added and history.deleted[0] != history.added[0]:
            logger.error(
                "immutability_violation_blocked",
                extra={
                    "entity_type": "WeeklyReport",
                    "entity_id": str(target.id),
                    "operation": "UPDATE",
                    "field": field,
                },
            )
            raise ImmutabilityViolationError(
                entity_type="WeeklyReport",
                entity_id=str(target.id),
                field=field,
            )


def register_immutability_listeners() -> None:
    """Register all immutability enforcement event listeners (idempotent)."""
    from progress_kernel.models.weekly_report import WeeklyReport

    if not event.contains(WeeklyReport, "before_update", _check_weekly_report_immutability):
        event.listen(WeeklyReport, "before_update", _check_weekly_report_immutability)


def unregister_immutability_listeners() -> None:
    """Remove immutability listeners. FOR TESTING ONLY."""
    from progress_kernel.models.weekly_report import WeeklyReport

    if event.contains(WeeklyReport, "before_update", _check_weekly_report_immutability):
        event.remove(WeeklyReport, "before_update", _check_weekly_report_immutability)

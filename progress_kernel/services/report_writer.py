"""
ReportWriter -- validate and persist one weekly report.

Responsibility:
    Given a ReportDraft for a new or existing report, compute the checked
    milestone set (selections plus the inherited floor), compute progress
    against the current catalog, validate, and write the report.  Later
    weeks of the same project are brought up to the new floor in the same
    transaction so completion is never retracted, whatever order weeks are
    edited in.

Architecture position:
    Kernel > Services -- imperative shell.  Reads through the selectors,
    decides through ``domain.report_composer``, writes through the ORM.

Invariants enforced:
    MONOTONIC_MILESTONES -- earlier weeks' milestones are a subset of later
                            weeks' milestones after every save.
    CREATED_AT_FIXED     -- created_at is stamped from the Clock on insert
                            and never assigned on edit.
    UNIQUE_WEEK          -- pre-checked here, backed by the unique constraint.
    PROGRESS_BOUNDS      -- progress is derived, never accepted from callers.

Failure modes (all settle the transaction before returning):
    NOT_FOUND           -- project or report does not exist.
    VALIDATION_FAILED   -- field errors; nothing written.
    DUPLICATE_WEEK      -- the week is already used (pre-check or constraint).
    PERMISSION_DENIED   -- the access policy refused a document; published on
                           the permission-error channel, nothing written.
    UNAVAILABLE         -- the store could not be reached.
    Anything else rolls back and propagates.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from uuid import UUID, uuid4

from sqlalchemy.exc import IntegrityError

from progress_kernel.domain.accumulator import ReportAccumulator
from progress_kernel.domain.dtos import ReportDraft, WeeklyReportInfo
from progress_kernel.domain.milestones import compute_progress, storage_order
from progress_kernel.domain.notifications import PermissionErrorEvent
from progress_kernel.domain.report_composer import ComposedReport, compose_report
from progress_kernel.domain.values import StorageOperation
from progress_kernel.exceptions import (
    DuplicateWeekError,
    ProjectNotFoundError,
    ReportNotFoundError,
    ReportValidationError,
    StoragePermissionError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_kernel.models.project import Project
from progress_kernel.models.weekly_report import WeeklyReport, report_collection_path
from progress_kernel.selectors.milestone_selector import MilestoneSelector
from progress_kernel.selectors.report_selector import ReportSelector, report_to_info
from progress_kernel.services._write_helpers import (
    UNAVAILABLE_ERRORS,
    commit_or_rollback,
    publish_permission_error,
    to_unavailable,
)
from progress_kernel.services.base import BaseService
from progress_kernel.services.results import SUCCESS_STATUSES, WriteStatus

logger = get_logger("services.report_writer")


def _is_duplicate_week(error: IntegrityError) -> bool:
    detail = str(error.orig)
    return (
        "uq_weekly_report_project_week" in detail
        or "weekly_reports.project_id, weekly_reports.week" in detail
    )


@dataclass(frozen=True)
class ReportWriteResult:
    """Outcome of ReportWriter.save()."""

    status: WriteStatus
    report: WeeklyReportInfo | None = None
    created: bool = False
    completes_catalog: bool = False
    catalog_ids: frozenset[str] = frozenset()
    ignored_removals: frozenset[str] = frozenset()
    propagated_report_ids: tuple[UUID, ...] = ()
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    permission_error: PermissionErrorEvent | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in SUCCESS_STATUSES


class ReportWriter(BaseService[WeeklyReport]):
    """
    Create or edit a weekly report.

    Contract:
        ``save`` returns only after the transaction has been committed
        (SAVED) or rolled back (every other status).
    """

    def save(self, draft: ReportDraft) -> ReportWriteResult:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=draft.actor_id,
            project_id=draft.project_id,
            report_id=draft.report_id,
            operation="save_report",
        ):
            logger.info(
                "report_write_started",
                extra={"week": draft.week, "is_new": draft.is_new},
            )
            t0 = time.monotonic()
            path = self._path_for(draft)

            try:
                result = self._do_save(draft)
                commit_or_rollback(self.session, result)
            except StoragePermissionError as exc:
                self.session.rollback()
                event = publish_permission_error(self._channel, exc)
                result = ReportWriteResult(
                    status=WriteStatus.PERMISSION_DENIED,
                    permission_error=event,
                    message=str(exc),
                )
            except IntegrityError as exc:
                self.session.rollback()
                if not draft.is_new or not _is_duplicate_week(exc):
                    logger.error("report_write_failed", exc_info=True)
                    raise
                duplicate = DuplicateWeekError(draft.project_id, draft.week)
                logger.warning(
                    "report_duplicate_week",
                    extra={"week": draft.week, "detail": str(exc.orig)},
                )
                result = ReportWriteResult(
                    status=WriteStatus.DUPLICATE_WEEK,
                    field_errors={"week": [str(duplicate)]},
                    message=str(duplicate),
                )
            except UNAVAILABLE_ERRORS as exc:
                self.session.rollback()
                unavailable = to_unavailable(exc, StorageOperation.WRITE.value, path)
                logger.warning(
                    "report_write_unavailable", extra={"reason": unavailable.reason}
                )
                result = ReportWriteResult(
                    status=WriteStatus.UNAVAILABLE,
                    message=str(unavailable),
                )
            except Exception:
                self.session.rollback()
                logger.error(
                    "report_write_failed",
                    extra={"duration_ms": round((time.monotonic() - t0) * 1000, 2)},
                    exc_info=True,
                )
                raise

            logger.info(
                "report_saved" if result.is_success else "report_write_rejected",
                extra={
                    "status": result.status.value,
                    "week": result.report.week if result.report else draft.week,
                    "progress": result.report.progress if result.report else None,
                    "completes_catalog": result.completes_catalog,
                    "propagated": len(result.propagated_report_ids),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    def _do_save(self, draft: ReportDraft) -> ReportWriteResult:
        project = self.session.get(Project, draft.project_id)
        if project is None:
            error = ProjectNotFoundError(draft.project_id)
            return ReportWriteResult(status=WriteStatus.NOT_FOUND, message=str(error))

        row: WeeklyReport | None = None
        if draft.report_id is not None:
            row = self.session.get(WeeklyReport, draft.report_id)
            if row is None or row.project_id != project.id:
                error = ReportNotFoundError(draft.project_id, draft.report_id)
                return ReportWriteResult(status=WriteStatus.NOT_FOUND, message=str(error))

        reports = ReportSelector(self.session).read_reports(project.id)
        accumulator = ReportAccumulator(project.project_type, reports)
        catalog = MilestoneSelector(self.session).list_milestones(project.project_type)
        existing = report_to_info(row) if row is not None else None

        composed = compose_report(draft, accumulator, catalog, existing)
        if not composed.is_valid:
            return ReportWriteResult(
                status=WriteStatus.VALIDATION_FAILED,
                catalog_ids=composed.catalog_ids,
                field_errors=composed.field_errors,
                message=str(ReportValidationError(composed.field_errors)),
            )

        if row is None and accumulator.report_for_week(composed.week) is not None:
            duplicate = DuplicateWeekError(project.id, composed.week)
            return ReportWriteResult(
                status=WriteStatus.DUPLICATE_WEEK,
                catalog_ids=composed.catalog_ids,
                field_errors={"week": [str(duplicate)]},
                message=str(duplicate),
            )

        created = row is None
        if created:
            row = WeeklyReport(
                id=uuid4(),
                project_id=project.id,
                week=composed.week,
                created_at=self._clock.now(),
                created_by_id=draft.actor_id,
            )
            self.session.add(row)
        self._apply(row, composed, draft.actor_id)

        propagated = self._propagate_forward(composed, accumulator, draft.actor_id)
        self.session.flush()

        if composed.ignored_removals:
            logger.info(
                "inherited_removals_ignored",
                extra={"milestone_ids": composed.ignored_removals},
            )

        return ReportWriteResult(
            status=WriteStatus.SAVED,
            report=report_to_info(row),
            created=created,
            completes_catalog=composed.completes_catalog,
            catalog_ids=composed.catalog_ids,
            ignored_removals=composed.ignored_removals,
            propagated_report_ids=propagated,
        )

    @staticmethod
    def _apply(row: WeeklyReport, composed: ComposedReport, actor_id: str | None) -> None:
        # Only the mutable fields; week, project_id and created_at stay put.
        row.summary = composed.summary
        row.status = composed.status
        row.milestones = storage_order(composed.checked)
        row.progress = composed.progress
        row.updated_by_id = actor_id

    def _propagate_forward(
        self,
        composed: ComposedReport,
        accumulator: ReportAccumulator,
        actor_id: str | None,
    ) -> tuple[UUID, ...]:
        """Raise every later week to at least ``composed.checked``."""
        touched: list[UUID] = []
        for later in accumulator.reports_after(composed.week):
            if composed.checked <= later.milestones:
                continue
            merged = later.milestones | composed.checked
            row = self.session.get(WeeklyReport, later.id)
            row.milestones = storage_order(merged)
            row.progress = compute_progress(merged, composed.catalog_ids)
            row.updated_by_id = actor_id
            touched.append(later.id)

        if touched:
            logger.info(
                "milestones_propagated_forward",
                extra={"from_week": composed.week, "report_count": len(touched)},
            )
        return tuple(touched)

    @staticmethod
    def _path_for(draft: ReportDraft) -> str:
        collection = report_collection_path(draft.project_id)
        if draft.report_id is None:
            return collection
        return f"{collection}/{draft.report_id}"

"""
ProjectDeletionCoordinator -- remove a project and every weekly report
under it as one atomic unit.

Responsibility:
    Enumerate the project's reports once, delete each of them and then the
    project, and commit once.  Either everything is gone or nothing is.

Architecture position:
    Kernel > Services -- imperative shell.  Irreversible; the calling layer
    is responsible for asking the user before invoking it.

Invariants enforced:
    ATOMIC_PROJECT_DELETION -- a single transaction covers every report row
        and the project row; the weekly_reports foreign key makes a project
        deletion with surviving reports impossible at the database level.

Failure modes (each rolls back before returning):
    NOT_FOUND               -- no such project.
    PERMISSION_DENIED       -- the policy refused any one document; published
                               with path "projects/{id} and its subcollections"
                               and operation "delete".
    CONCURRENT_MODIFICATION -- a report appeared after enumeration.
    UNAVAILABLE             -- the store could not be reached.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from uuid import UUID, uuid4

from sqlalchemy import select

from progress_kernel.domain.notifications import PermissionErrorEvent
from progress_kernel.domain.values import StorageOperation
from progress_kernel.exceptions import (
    ConcurrentModificationError,
    ProjectNotFoundError,
    StoragePermissionError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_kernel.models.project import PROJECTS_COLLECTION, Project
from progress_kernel.models.weekly_report import WeeklyReport
from progress_kernel.selectors.report_selector import ReportSelector
from progress_kernel.services._write_helpers import (
    UNAVAILABLE_ERRORS,
    commit_or_rollback,
    publish_permission_error,
    to_unavailable,
)
from progress_kernel.services.base import BaseService
from progress_kernel.services.results import SUCCESS_STATUSES, WriteStatus

logger = get_logger("services.project_deletion")


def deletion_path(project_id: UUID) -> str:
    return f"{PROJECTS_COLLECTION}/{project_id} and its subcollections"


@dataclass(frozen=True)
class DeletionResult:
    status: WriteStatus
    project_id: UUID
    deleted_report_ids: tuple[UUID, ...] = ()
    permission_error: PermissionErrorEvent | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in SUCCESS_STATUSES


class ProjectDeletionCoordinator(BaseService[Project]):
    """Deletes a project together with all of its weekly reports."""

    def delete_project(self, project_id: UUID, actor_id: str | None = None) -> DeletionResult:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=actor_id,
            project_id=project_id,
            operation="delete_project",
        ):
            logger.info("project_deletion_started")
            t0 = time.monotonic()
            path = deletion_path(project_id)

            try:
                result = self._do_delete(project_id)
                commit_or_rollback(self.session, result)
            except StoragePermissionError as exc:
                self.session.rollback()
                event = publish_permission_error(
                    self._channel,
                    exc,
                    path=path,
                    operation=StorageOperation.DELETE.value,
                )
                result = DeletionResult(
                    status=WriteStatus.PERMISSION_DENIED,
                    project_id=project_id,
                    permission_error=event,
                    message=str(exc),
                )
            except ConcurrentModificationError as exc:
                self.session.rollback()
                logger.warning(
                    "project_deletion_conflict",
                    extra={"unexpected_report_ids": exc.unexpected_report_ids},
                )
                result = DeletionResult(
                    status=WriteStatus.CONCURRENT_MODIFICATION,
                    project_id=project_id,
                    message=str(exc),
                )
            except UNAVAILABLE_ERRORS as exc:
                self.session.rollback()
                result = DeletionResult(
                    status=WriteStatus.UNAVAILABLE,
                    project_id=project_id,
                    message=str(to_unavailable(exc, StorageOperation.DELETE.value, path)),
                )
            except Exception:
                self.session.rollback()
                logger.error("project_deletion_failed", exc_info=True)
                raise

            logger.info(
                "project_deleted" if result.is_success else "project_deletion_rejected",
                extra={
                    "status": result.status.value,
                    "report_count": len(result.deleted_report_ids),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return result

    def _do_delete(self, project_id: UUID) -> DeletionResult:
        project = self.session.get(Project, project_id)
        if project is None:
            return DeletionResult(
                status=WriteStatus.NOT_FOUND,
                project_id=project_id,
                message=str(ProjectNotFoundError(project_id)),
            )

        report_ids = ReportSelector(self.session).report_ids(project_id)
        for report_id in report_ids:
            report = self.session.get(WeeklyReport, report_id)
            if report is not None:
                self.session.delete(report)
        self.session.flush()

        # Anything still here was written after enumeration.
        remaining = list(
            self.session.scalars(
                select(WeeklyReport.id).where(WeeklyReport.project_id == project_id)
            )
        )
        if remaining:
            raise ConcurrentModificationError(project_id, [str(r) for r in remaining])

        self.session.delete(project)
        self.session.flush()
        return DeletionResult(
            status=WriteStatus.DELETED,
            project_id=project_id,
            deleted_report_ids=tuple(report_ids),
        )

"""
ProjectService -- create and maintain project records.

Responsibility:
    Validated create/update of projects and the status-only update used by
    the completion decision.  Deletion is not here: it belongs to
    ProjectDeletionCoordinator, which removes the reports with the project.

Failure modes (each settles the transaction before returning):
    VALIDATION_FAILED, NOT_FOUND, PERMISSION_DENIED (published on the
    permission-error channel), UNAVAILABLE.  Anything else rolls back and
    propagates.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date
from typing import Any
from uuid import UUID, uuid4

from progress_kernel.domain.dtos import ProjectInfo
from progress_kernel.domain.notifications import PermissionErrorEvent
from progress_kernel.domain.values import PROJECT_STATUS_VALUES, ProjectStatus
from progress_kernel.exceptions import (
    ProjectNotFoundError,
    ProjectValidationError,
    StoragePermissionError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_kernel.models.project import PROJECTS_COLLECTION, Project
from progress_kernel.selectors.project_selector import project_to_info
from progress_kernel.services._write_helpers import (
    UNAVAILABLE_ERRORS,
    commit_or_rollback,
    publish_permission_error,
    to_unavailable,
)
from progress_kernel.services.base import BaseService
from progress_kernel.services.results import SUCCESS_STATUSES, WriteStatus

logger = get_logger("services.project")

REQUIRED_TEXT_FIELDS = ("name", "manager_id", "project_type")
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "client_id",
        "manager_id",
        "project_type",
        "status",
        "start_date",
        "estimated_end_date",
    }
)


@dataclass(frozen=True)
class ProjectWriteResult:
    status: WriteStatus
    project: ProjectInfo | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    permission_error: PermissionErrorEvent | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in SUCCESS_STATUSES


def validate_project_fields(values: dict[str, Any]) -> dict[str, list[str]]:
    """Field errors for a complete set of project values."""
    errors: dict[str, list[str]] = {}
    for name in REQUIRED_TEXT_FIELDS:
        value = values.get(name)
        if value is None or not str(value).strip():
            errors.setdefault(name, []).append(f"{name} is required.")

    status = values.get("status")
    if status not in PROJECT_STATUS_VALUES:
        allowed = ", ".join(s.value for s in ProjectStatus)
        errors.setdefault("status", []).append(f"Status must be one of: {allowed}.")

    start = values.get("start_date")
    end = values.get("estimated_end_date")
    if not isinstance(start, date):
        errors.setdefault("start_date", []).append("A start date is required.")
    if not isinstance(end, date):
        errors.setdefault("estimated_end_date", []).append(
            "An estimated end date is required."
        )
    if isinstance(start, date) and isinstance(end, date) and end < start:
        errors.setdefault("estimated_end_date", []).append(
            "Estimated end date cannot be before the start date."
        )
    return errors


def _status_value(status: ProjectStatus | str | None) -> str | None:
    return status.value if isinstance(status, ProjectStatus) else status


def _rejected(errors: dict[str, list[str]]) -> ProjectWriteResult:
    return ProjectWriteResult(
        status=WriteStatus.VALIDATION_FAILED,
        field_errors=errors,
        message=str(ProjectValidationError(errors)),
    )


class ProjectService(BaseService[Project]):
    """Validated writes to project records."""

    def create_project(
        self,
        *,
        name: str,
        manager_id: str,
        project_type: str,
        start_date: date,
        estimated_end_date: date,
        client_id: str | None = None,
        status: ProjectStatus | str = ProjectStatus.ON_TRACK,
        actor_id: str | None = None,
    ) -> ProjectWriteResult:
        values = {
            "name": name,
            "client_id": client_id,
            "manager_id": manager_id,
            "project_type": project_type,
            "status": _status_value(status),
            "start_date": start_date,
            "estimated_end_date": estimated_end_date,
        }

        def write() -> ProjectWriteResult:
            errors = validate_project_fields(values)
            if errors:
                return _rejected(errors)
            project = Project(
                id=uuid4(),
                created_at=self._clock.now(),
                created_by_id=actor_id,
                updated_by_id=actor_id,
                **values,
            )
            self.session.add(project)
            self.session.flush()
            return ProjectWriteResult(status=WriteStatus.SAVED, project=project_to_info(project))

        return self._run("create_project", None, actor_id, PROJECTS_COLLECTION, write)

    def update_project(
        self,
        project_id: UUID,
        *,
        actor_id: str | None = None,
        **changes: Any,
    ) -> ProjectWriteResult:
        """
        Apply ``changes`` (any of UPDATABLE_FIELDS) to an existing project.

        Raises:
            TypeError: An unknown field name was passed.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown project field(s): {', '.join(sorted(unknown))}")
        if "status" in changes:
            changes["status"] = _status_value(changes["status"])

        def write() -> ProjectWriteResult:
            project = self.session.get(Project, project_id)
            if project is None:
                return self._not_found(project_id)
            values = {name: getattr(project, name) for name in UPDATABLE_FIELDS}
            values["status"] = _status_value(values["status"])
            values.update(changes)
            errors = validate_project_fields(values)
            if errors:
                return _rejected(errors)
            for name, value in changes.items():
                setattr(project, name, value)
            project.updated_by_id = actor_id
            self.session.flush()
            return ProjectWriteResult(status=WriteStatus.SAVED, project=project_to_info(project))

        return self._run(
            "update_project", project_id, actor_id, f"{PROJECTS_COLLECTION}/{project_id}", write
        )

    def update_status(
        self,
        project_id: UUID,
        status: ProjectStatus | str,
        actor_id: str | None = None,
    ) -> ProjectWriteResult:
        """Change only the lifecycle status of a project."""
        value = _status_value(status)

        def write() -> ProjectWriteResult:
            if value not in PROJECT_STATUS_VALUES:
                allowed = ", ".join(s.value for s in ProjectStatus)
                return _rejected({"status": [f"Status must be one of: {allowed}."]})
            project = self.session.get(Project, project_id)
            if project is None:
                return self._not_found(project_id)
            project.status = value
            project.updated_by_id = actor_id
            self.session.flush()
            return ProjectWriteResult(status=WriteStatus.SAVED, project=project_to_info(project))

        return self._run(
            "update_project_status",
            project_id,
            actor_id,
            f"{PROJECTS_COLLECTION}/{project_id}",
            write,
        )

    @staticmethod
    def _not_found(project_id: UUID) -> ProjectWriteResult:
        return ProjectWriteResult(
            status=WriteStatus.NOT_FOUND, message=str(ProjectNotFoundError(project_id))
        )

    def _run(
        self,
        operation: str,
        project_id: UUID | None,
        actor_id: str | None,
        path: str,
        write: Callable[[], ProjectWriteResult],
    ) -> ProjectWriteResult:
        with LogContext.bind(
            correlation_id=str(uuid4()),
            actor_id=actor_id,
            project_id=project_id,
            operation=operation,
        ):
            try:
                result = write()
                commit_or_rollback(self.session, result)
            except StoragePermissionError as exc:
                self.session.rollback()
                event = publish_permission_error(self._channel, exc)
                result = ProjectWriteResult(
                    status=WriteStatus.PERMISSION_DENIED,
                    permission_error=event,
                    message=str(exc),
                )
            except UNAVAILABLE_ERRORS as exc:
                self.session.rollback()
                unavailable = to_unavailable(exc, operation, path)
                result = ProjectWriteResult(
                    status=WriteStatus.UNAVAILABLE, message=str(unavailable)
                )
            except Exception:
                self.session.rollback()
                logger.error("project_write_failed", exc_info=True)
                raise

            logger.info(
                "project_saved" if result.is_success else "project_write_rejected",
                extra={
                    "status": result.status.value,
                    "field_errors": result.field_errors or None,
                },
            )
            return result

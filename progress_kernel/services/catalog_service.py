"""
CatalogService -- maintenance path for the milestone catalog.

The progress engine only reads the catalog; this service is how catalog
entries are created and edited (admin screens, the seed script).  Changing
the catalog never rewrites the stored progress of existing reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID, uuid4

from progress_kernel.domain.dtos import MilestoneInfo
from progress_kernel.domain.notifications import PermissionErrorEvent
from progress_kernel.exceptions import (
    MilestoneNotFoundError,
    MilestoneValidationError,
    StoragePermissionError,
)
from progress_kernel.logging_config import LogContext, get_logger
from progress_kernel.models.milestone import MILESTONES_COLLECTION, Milestone
from progress_kernel.selectors.milestone_selector import milestone_to_info
from progress_kernel.services._write_helpers import (
    UNAVAILABLE_ERRORS,
    commit_or_rollback,
    publish_permission_error,
    to_unavailable,
)
from progress_kernel.services.base import BaseService
from progress_kernel.services.results import SUCCESS_STATUSES, WriteStatus

logger = get_logger("services.catalog")


@dataclass(frozen=True)
class MilestoneWriteResult:
    status: WriteStatus
    milestone: MilestoneInfo | None = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)
    permission_error: PermissionErrorEvent | None = None
    message: str | None = None

    @property
    def is_success(self) -> bool:
        return self.status in SUCCESS_STATUSES


def validate_milestone_fields(
    name: str | None, description: str | None, project_type: str | None
) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    if not name or not name.strip():
        errors["name"] = ["Name is required."]
    if not description or not description.strip():
        errors["description"] = ["Description is required."]
    if not project_type or not project_type.strip():
        errors["project_type"] = ["Project type is required."]
    return errors


class CatalogService(BaseService[Milestone]):
    """Validated writes to milestone catalog entries."""

    def create_milestone(
        self,
        name: str,
        description: str,
        project_type: str,
        actor_id: str | None = None,
    ) -> MilestoneWriteResult:
        with LogContext.bind(actor_id=actor_id, operation="create_milestone"):
            errors = validate_milestone_fields(name, description, project_type)
            if errors:
                logger.info("milestone_write_rejected", extra={"field_errors": errors})
                return MilestoneWriteResult(
                    status=WriteStatus.VALIDATION_FAILED,
                    field_errors=errors,
                    message=str(MilestoneValidationError(errors)),
                )
            milestone = Milestone(
                id=uuid4(),
                name=name.strip(),
                description=description.strip(),
                project_type=project_type.strip(),
                created_at=self._clock.now(),
                created_by_id=actor_id,
                updated_by_id=actor_id,
            )
            self.session.add(milestone)
            return self._settle(milestone, MILESTONES_COLLECTION)

    def update_milestone(
        self,
        milestone_id: UUID,
        *,
        name: str | None = None,
        description: str | None = None,
        project_type: str | None = None,
        actor_id: str | None = None,
    ) -> MilestoneWriteResult:
        """Update the given fields; omitted (None) fields are kept."""
        with LogContext.bind(actor_id=actor_id, operation="update_milestone"):
            milestone = self.session.get(Milestone, milestone_id)
            if milestone is None:
                return MilestoneWriteResult(
                    status=WriteStatus.NOT_FOUND,
                    message=str(MilestoneNotFoundError(milestone_id)),
                )
            merged = (
                milestone.name if name is None else name,
                milestone.description if description is None else description,
                milestone.project_type if project_type is None else project_type,
            )
            errors = validate_milestone_fields(*merged)
            if errors:
                logger.info("milestone_write_rejected", extra={"field_errors": errors})
                return MilestoneWriteResult(
                    status=WriteStatus.VALIDATION_FAILED,
                    field_errors=errors,
                    message=str(MilestoneValidationError(errors)),
                )
            milestone.name, milestone.description, milestone.project_type = (
                value.strip() for value in merged
            )
            milestone.updated_by_id = actor_id
            return self._settle(milestone, milestone.document_path)

    def _settle(self, milestone: Milestone, path: str) -> MilestoneWriteResult:
        try:
            self.session.flush()
            result = MilestoneWriteResult(
                status=WriteStatus.SAVED, milestone=milestone_to_info(milestone)
            )
            commit_or_rollback(self.session, result)
        except StoragePermissionError as exc:
            self.session.rollback()
            event = publish_permission_error(self._channel, exc)
            return MilestoneWriteResult(
                status=WriteStatus.PERMISSION_DENIED,
                permission_error=event,
                message=str(exc),
            )
        except UNAVAILABLE_ERRORS as exc:
            self.session.rollback()
            return MilestoneWriteResult(
                status=WriteStatus.UNAVAILABLE,
                message=str(to_unavailable(exc, "write", path)),
            )
        except Exception:
            self.session.rollback()
            logger.error("milestone_write_failed", exc_info=True)
            raise
        logger.info("milestone_saved", extra={"milestone_id": milestone.id})
        return result

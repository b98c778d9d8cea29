"""
Module: progress_kernel.models.weekly_report
Responsibility: ORM persistence for weekly status reports.  Each row records a
    project's overall progress at the end of one week and the set of catalog
    milestones complete as of that week.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - (project_id, week) is unique (uq_weekly_report_project_week).
    - week >= 1 and 0 <= progress <= 100 (check constraints).
    - created_at, week and project_id are fixed after insert
      (db/immutability.py).
    - Earlier weeks' milestones are a subset of later weeks' milestones
      (ReportWriter; not expressible as a table constraint).

Failure modes:
    - IntegrityError on a duplicate week for the same project.
    - IntegrityError if the owning project does not exist.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import (
    JSON,
    CheckConstraint,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from progress_kernel.db.base import TrackedBase, UUIDString
from progress_kernel.domain.values import ReportStatus
from progress_kernel.models.project import PROJECTS_COLLECTION

WEEKLY_REPORTS_SUBCOLLECTION = "weeklyReports"


def report_collection_path(project_id: UUID | str) -> str:
    return f"{PROJECTS_COLLECTION}/{project_id}/{WEEKLY_REPORTS_SUBCOLLECTION}"


class WeeklyReport(TrackedBase):
    """
    One week's report for one project.

    Guarantees:
        - id is stable across edits and independent of week.
        - milestones is stored de-duplicated and sorted; services always
          assign a new list rather than mutating it in place.
        - progress is the value computed when the report was written and is
          never recomputed for display.
    """

    __tablename__ = "weekly_reports"

    __table_args__ = (
        UniqueConstraint("project_id", "week", name="uq_weekly_report_project_week"),
        CheckConstraint("week >= 1", name="ck_weekly_report_week_positive"),
        CheckConstraint(
            "progress >= 0 AND progress <= 100",
            name="ck_weekly_report_progress_range",
        ),
        Index("idx_weekly_report_project", "project_id"),
    )

    project_id: Mapped[UUID] = mapped_column(
        UUIDString(),
        ForeignKey("projects.id"),
        nullable=False,
    )

    week: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    progress: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    summary: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    status: Mapped[ReportStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ReportStatus.ON_TRACK,
    )

    # Milestone ids complete as of this week
    milestones: Mapped[list[str]] = mapped_column(
        JSON,
        nullable=False,
        default=list,
    )

    @property
    def document_path(self) -> str:
        collection = report_collection_path(self.project_id)
        if self.id is None:
            return collection
        return f"{collection}/{self.id}"

    def to_document(self) -> dict[str, Any]:
        """Plain-data view used for access checks and permission errors."""
        return {
            "projectId": str(self.project_id),
            "week": self.week,
            "progress": self.progress,
            "summary": self.summary,
            "status": ReportStatus(self.status).value if self.status else None,
            "milestones": list(self.milestones or []),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self) -> str:
        return f"<WeeklyReport project={self.project_id} week={self.week} progress={self.progress}>"

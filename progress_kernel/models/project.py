"""
Module: progress_kernel.models.project
Responsibility: ORM persistence for solar-installation projects.  A project's
    project_type selects the milestone catalog subset its reports are measured
    against; its status is the lifecycle state the completion decision may move
    to Completed.
Architecture position: Kernel > Models.  May import from db/base.py and
    domain/values.py only.

Invariants enforced:
    - A project row is deleted only together with all of its weekly reports
      (ProjectDeletionCoordinator; the weekly_reports FK blocks anything else).

Failure modes:
    - IntegrityError when deleting a project that still has weekly reports.
"""

from datetime import date
from typing import Any

from sqlalchemy import Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from progress_kernel.db.base import TrackedBase
from progress_kernel.domain.values import ProjectStatus

PROJECTS_COLLECTION = "projects"


class Project(TrackedBase):
    """
    A solar-installation project owned by a manager.

    Guarantees:
        - status is always one of ProjectStatus (validated by services).
        - project_type is the exact key used to filter the milestone catalog.

    Non-goals:
        - The model does not know about its reports; enumeration goes through
          ReportSelector so deletion can see every child explicitly.
    """

    __tablename__ = "projects"

    __table_args__ = (
        Index("idx_project_type", "project_type"),
        Index("idx_project_manager", "manager_id"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    # Client record lives outside the engine
    client_id: Mapped[str | None] = mapped_column(
        String(128),
        nullable=True,
    )

    manager_id: Mapped[str] = mapped_column(
        String(128),
        nullable=False,
    )

    project_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    status: Mapped[ProjectStatus] = mapped_column(
        String(20),
        nullable=False,
        default=ProjectStatus.ON_TRACK,
    )

    start_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    estimated_end_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    @property
    def document_path(self) -> str:
        if self.id is None:
            return PROJECTS_COLLECTION
        return f"{PROJECTS_COLLECTION}/{self.id}"

    def to_document(self) -> dict[str, Any]:
        """Plain-data view used for access checks and permission errors."""
        return {
            "name": self.name,
            "clientId": self.client_id,
            "managerId": self.manager_id,
            "projectType": self.project_type,
            "status": ProjectStatus(self.status).value if self.status else None,
            "startDate": self.start_date.isoformat() if self.start_date else None,
            "estimatedEndDate": (
                self.estimated_end_date.isoformat() if self.estimated_end_date else None
            ),
        }

    def __repr__(self) -> str:
        return f"<Project {self.name} ({self.project_type}, {self.status})>"

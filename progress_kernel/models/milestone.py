"""
Module: progress_kernel.models.milestone
Responsibility: ORM persistence for the milestone catalog.  Each row is a
    milestone template scoped to one project type.  The engine only reads
    the catalog; CatalogService is the maintenance path.
Architecture position: Kernel > Models.  May import from db/base.py only.
"""

from typing import Any

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from progress_kernel.db.base import TrackedBase

MILESTONES_COLLECTION = "milestones"


class Milestone(TrackedBase):
    """A milestone definition for one project type."""

    __tablename__ = "milestones"

    __table_args__ = (
        Index("idx_milestone_project_type", "project_type"),
    )

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    project_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )

    @property
    def document_path(self) -> str:
        if self.id is None:
            return MILESTONES_COLLECTION
        return f"{MILESTONES_COLLECTION}/{self.id}"

    def to_document(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "projectType": self.project_type,
        }

    def __repr__(self) -> str:
        return f"<Milestone {self.name} ({self.project_type})>"

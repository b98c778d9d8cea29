"""
Module: progress_kernel.selectors.milestone_selector
Responsibility: Read-only access to the milestone catalog, filtered by
    project type.  An unknown type yields an empty catalog, not an error.
"""

from uuid import UUID

from sqlalchemy import select

from progress_kernel.domain.dtos import MilestoneInfo
from progress_kernel.exceptions import MilestoneNotFoundError
from progress_kernel.models.milestone import Milestone
from progress_kernel.selectors.base import BaseSelector


def milestone_to_info(milestone: Milestone) -> MilestoneInfo:
    return MilestoneInfo(
        id=str(milestone.id),
        name=milestone.name,
        description=milestone.description,
        project_type=milestone.project_type,
    )


class MilestoneSelector(BaseSelector[Milestone]):
    """Selector for catalog queries."""

    def list_milestones(self, project_type: str) -> list[MilestoneInfo]:
        """Catalog subset for one project type, ordered by name."""
        stmt = (
            select(Milestone)
            .where(Milestone.project_type == project_type)
            .order_by(Milestone.name, Milestone.id)
        )
        return [milestone_to_info(m) for m in self.session.scalars(stmt)]

    def catalog_ids(self, project_type: str) -> frozenset[str]:
        stmt = select(Milestone.id).where(Milestone.project_type == project_type)
        return frozenset(str(mid) for mid in self.session.scalars(stmt))

    def get_milestone(self, milestone_id: UUID) -> MilestoneInfo:
        milestone = self.session.get(Milestone, milestone_id)
        if milestone is None:
            raise MilestoneNotFoundError(milestone_id)
        return milestone_to_info(milestone)

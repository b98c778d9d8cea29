"""
Module: progress_kernel.selectors.project_selector
Responsibility: Read-only access to projects as ProjectInfo DTOs.
"""

from uuid import UUID

from sqlalchemy import select

from progress_kernel.domain.dtos import ProjectInfo
from progress_kernel.domain.values import ProjectStatus
from progress_kernel.exceptions import ProjectNotFoundError
from progress_kernel.models.project import Project
from progress_kernel.selectors.base import BaseSelector


def project_to_info(project: Project) -> ProjectInfo:
    return ProjectInfo(
        id=project.id,
        name=project.name,
        client_id=project.client_id,
        manager_id=project.manager_id,
        project_type=project.project_type,
        status=ProjectStatus(project.status),
        start_date=project.start_date,
        estimated_end_date=project.estimated_end_date,
    )


class ProjectSelector(BaseSelector[Project]):
    """Selector for project queries."""

    def find(self, project_id: UUID) -> ProjectInfo | None:
        project = self.session.get(Project, project_id)
        return project_to_info(project) if project is not None else None

    def get(self, project_id: UUID) -> ProjectInfo:
        """Like find(), but raises ProjectNotFoundError when absent."""
        info = self.find(project_id)
        if info is None:
            raise ProjectNotFoundError(project_id)
        return info

    def list_projects(self, manager_id: str | None = None) -> list[ProjectInfo]:
        """All projects, optionally those of one manager, ordered by name."""
        stmt = select(Project)
        if manager_id is not None:
            stmt = stmt.where(Project.manager_id == manager_id)
        stmt = stmt.order_by(Project.name, Project.id)
        return [project_to_info(p) for p in self.session.scalars(stmt)]

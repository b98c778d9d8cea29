"""
Data Transfer Objects for the progress kernel.

Frozen dataclasses passed between selectors, the pure domain layer and the
write services.  No ORM dependencies: selectors convert rows into these, and
the accumulator, composer and completion decision only ever see these.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID

from progress_kernel.domain.values import ProjectStatus, ReportStatus


@dataclass(frozen=True)
class ProjectInfo:
    """Immutable view of a project."""

    id: UUID
    name: str
    client_id: str | None
    manager_id: str
    project_type: str
    status: ProjectStatus
    start_date: date
    estimated_end_date: date

    @property
    def is_completed(self) -> bool:
        return self.status == ProjectStatus.COMPLETED


@dataclass(frozen=True)
class MilestoneInfo:
    """Immutable view of a catalog milestone."""

    id: str
    name: str
    description: str
    project_type: str


@dataclass(frozen=True)
class WeeklyReportInfo:
    """Immutable view of a stored weekly report."""

    id: UUID
    project_id: UUID
    week: int
    progress: int
    summary: str
    status: ReportStatus
    milestones: frozenset[str]
    created_at: datetime


@dataclass(frozen=True)
class ReportDraft:
    """
    A report as submitted by a manager, before composition and validation.

    ``report_id`` is None for a new report.  ``week`` is required for new
    reports (the caller decides the week number) and optional for edits,
    where the stored week always wins.  ``status`` is kept as given so that
    an out-of-range value surfaces as a field error rather than a crash.
    """

    project_id: UUID
    summary: str
    status: str
    milestones: frozenset[str] = field(default_factory=frozenset)
    week: int | None = None
    report_id: UUID | None = None
    actor_id: str | None = None

    @property
    def is_new(self) -> bool:
        return self.report_id is None

"""
Module: progress_kernel.selectors.progress_selector
Responsibility: The consolidated "general report" of one project: its
    history, latest progress, milestone checklist and schedule position.

Invariants enforced:
    - Overall progress is the stored progress of the latest week; it is
      never recomputed from the current catalog.
    - The checklist marks a milestone completed when any report checked it.
"""

from dataclasses import dataclass
from datetime import date
from uuid import UUID

from sqlalchemy.orm import Session

from progress_kernel.domain.accumulator import ReportAccumulator
from progress_kernel.domain.dtos import MilestoneInfo, ProjectInfo, WeeklyReportInfo
from progress_kernel.domain.schedule import SchedulePosition, compute_schedule_progress
from progress_kernel.selectors.milestone_selector import MilestoneSelector
from progress_kernel.selectors.project_selector import ProjectSelector
from progress_kernel.selectors.report_selector import ReportSelector


@dataclass(frozen=True)
class ChecklistItem:
    milestone: MilestoneInfo
    completed: bool


@dataclass(frozen=True)
class GeneralReport:
    project: ProjectInfo
    reports: tuple[WeeklyReportInfo, ...]
    overall_progress: int
    latest_week: int | None
    checklist: tuple[ChecklistItem, ...]
    schedule: SchedulePosition

    @property
    def completed_count(self) -> int:
        return sum(1 for item in self.checklist if item.completed)


class ProjectProgressSelector:
    """Composes project, report and catalog reads into a GeneralReport."""

    def __init__(self, session: Session):
        self.session = session
        self._projects = ProjectSelector(session)
        self._reports = ReportSelector(session)
        self._milestones = MilestoneSelector(session)

    def general_report(self, project_id: UUID, today: date) -> GeneralReport:
        """
        Raises:
            ProjectNotFoundError: No project with this id.
        """
        project = self._projects.get(project_id)
        accumulator = ReportAccumulator(
            project.project_type, self._reports.read_reports(project_id)
        )
        completed = accumulator.all_completed_milestones()
        latest = accumulator.latest_report()

        checklist = tuple(
            ChecklistItem(milestone=m, completed=m.id in completed)
            for m in self._milestones.list_milestones(project.project_type)
        )
        return GeneralReport(
            project=project,
            reports=accumulator.reports,
            overall_progress=accumulator.latest_progress(),
            latest_week=latest.week if latest is not None else None,
            checklist=checklist,
            schedule=compute_schedule_progress(
                project.start_date, project.estimated_end_date, today
            ),
        )

"""
Module: progress_kernel.selectors.report_selector
Responsibility: Read-only access to a project's weekly reports.

Invariants enforced:
    - read_reports() is ordered by week ascending, so callers (accumulator,
      general report) see a deterministic history.
"""

from uuid import UUID

from sqlalchemy import func, select

from progress_kernel.domain.dtos import WeeklyReportInfo
from progress_kernel.domain.values import ReportStatus
from progress_kernel.exceptions import ReportNotFoundError
from progress_kernel.models.weekly_report import WeeklyReport
from progress_kernel.selectors.base import BaseSelector


def report_to_info(report: WeeklyReport) -> WeeklyReportInfo:
    return WeeklyReportInfo(
        id=report.id,
        project_id=report.project_id,
        week=report.week,
        progress=report.progress,
        summary=report.summary,
        status=ReportStatus(report.status),
        milestones=frozenset(report.milestones or ()),
        created_at=report.created_at,
    )


class ReportSelector(BaseSelector[WeeklyReport]):
    """Selector for weekly report queries."""

    def read_reports(self, project_id: UUID) -> list[WeeklyReportInfo]:
        """Every report of the project, ordered by week."""
        stmt = (
            select(WeeklyReport)
            .where(WeeklyReport.project_id == project_id)
            .order_by(WeeklyReport.week)
        )
        return [report_to_info(r) for r in self.session.scalars(stmt)]

    def find_report(self, project_id: UUID, report_id: UUID) -> WeeklyReportInfo | None:
        report = self.session.get(WeeklyReport, report_id)
        if report is None or report.project_id != project_id:
            return None
        return report_to_info(report)

    def get_report(self, project_id: UUID, report_id: UUID) -> WeeklyReportInfo:
        info = self.find_report(project_id, report_id)
        if info is None:
            raise ReportNotFoundError(project_id, report_id)
        return info

    def report_ids(self, project_id: UUID) -> list[UUID]:
        """Ids of every report of the project (deletion enumeration)."""
        stmt = select(WeeklyReport.id).where(WeeklyReport.project_id == project_id)
        return list(self.session.scalars(stmt))

    def next_week_number(self, project_id: UUID) -> int:
        """Highest stored week + 1, or 1 for a project without reports."""
        stmt = select(func.max(WeeklyReport.week)).where(
            WeeklyReport.project_id == project_id
        )
        highest = self.session.scalar(stmt)
        return (highest or 0) + 1

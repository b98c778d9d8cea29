"""
ReportAccumulator -- milestone inheritance and latest progress over a
project's weekly reports.

Responsibility:
    Given a project's type and its reports (any order), answer:

    * which milestones a report at week W inherits (union over every report
      with week < W) -- the floor a new or edited report cannot uncheck;
    * the project's latest overall progress (the stored progress of the
      highest week, 0 with no reports).

Architecture position:
    Kernel > Domain -- pure functional core, ZERO I/O.  Callers read the
    reports through ReportSelector and pass them in.

Invariants enforced:
    Progress is never recomputed here.  Historical progress is whatever was
    stored when that week was written, even if the catalog has changed
    since.
"""

from __future__ import annotations

from collections.abc import Iterable

from progress_kernel.domain.dtos import WeeklyReportInfo


class ReportAccumulator:
    """
    Read-only view over one project's weekly reports.

    Contract:
        Reports are sorted by week ascending on construction; every query is
        independent of the order they were supplied in.
    """

    def __init__(self, project_type: str, reports: Iterable[WeeklyReportInfo]):
        self.project_type = project_type
        self._reports: tuple[WeeklyReportInfo, ...] = tuple(
            sorted(reports, key=lambda r: r.week)
        )

    @property
    def reports(self) -> tuple[WeeklyReportInfo, ...]:
        return self._reports

    def __len__(self) -> int:
        return len(self._reports)

    def inherited_milestones(self, before_week: int) -> frozenset[str]:
        """Union of milestones from every report strictly before ``before_week``."""
        inherited: set[str] = set()
        for report in self._reports:
            if report.week >= before_week:
                break
            inherited.update(report.milestones)
        return frozenset(inherited)

    def latest_report(self) -> WeeklyReportInfo | None:
        if not self._reports:
            return None
        return self._reports[-1]

    def latest_progress(self) -> int:
        """Stored progress of the highest week, or 0 with no reports."""
        latest = self.latest_report()
        return latest.progress if latest is not None else 0

    def all_completed_milestones(self) -> frozenset[str]:
        """Every milestone checked in any report."""
        completed: set[str] = set()
        for report in self._reports:
            completed.update(report.milestones)
        return frozenset(completed)

    def report_for_week(self, week: int) -> WeeklyReportInfo | None:
        for report in self._reports:
            if report.week == week:
                return report
        return None

    def reports_after(self, week: int) -> tuple[WeeklyReportInfo, ...]:
        return tuple(r for r in self._reports if r.week > week)

    def next_week_number(self) -> int:
        """Week number offered for the next new report."""
        latest = self.latest_report()
        return latest.week + 1 if latest is not None else 1

"""Tests for the read side: project, report and general-report selectors."""

from datetime import date
from uuid import uuid4

import pytest

from progress_kernel.exceptions import ProjectNotFoundError, ReportNotFoundError
from progress_kernel.selectors import (
    MilestoneSelector,
    ProjectProgressSelector,
    ProjectSelector,
    ReportSelector,
)


class TestGeneralReport:

    def test_general_report(self, session, project_id, solar_roof_catalog, create_report):
        survey, permits, panels, grid = solar_roof_catalog
        create_report(project_id, 1, [survey, permits], catalog=solar_roof_catalog)
        create_report(project_id, 2, [survey, permits, panels], catalog=solar_roof_catalog)

        report = ProjectProgressSelector(session).general_report(project_id, date(2024, 4, 1))

        assert [r.week for r in report.reports] == [1, 2]
        assert report.overall_progress == 75
        assert report.latest_week == 2
        assert report.completed_count == 3
        names = [item.milestone.name for item in report.checklist]
        assert names == ["Grid connection", "Panels installed", "Permits approved", "Site survey"]
        assert [item.completed for item in report.checklist] == [False, True, True, True]
        assert report.schedule.total_days == 181
        assert report.schedule.time_progress == 50
        assert report.schedule.days_remaining == 90

    def test_project_without_reports(self, session, project_id, solar_roof_catalog):
        report = ProjectProgressSelector(session).general_report(project_id, date(2024, 1, 1))
        assert report.overall_progress == 0
        assert report.latest_week is None
        assert report.completed_count == 0
        assert len(report.checklist) == 4

    def test_stored_progress_not_recomputed(
        self, session, project_id, solar_roof_catalog, create_report, create_milestone
    ):
        create_report(project_id, 1, solar_roof_catalog[:2], catalog=solar_roof_catalog)
        create_milestone("Monitoring live")

        report = ProjectProgressSelector(session).general_report(project_id, date(2024, 2, 1))

        assert report.overall_progress == 50
        assert len(report.checklist) == 5

    def test_unknown_project(self, session):
        with pytest.raises(ProjectNotFoundError):
            ProjectProgressSelector(session).general_report(uuid4(), date(2024, 1, 1))


class TestReportSelector:

    def test_next_week_number(self, session, project_id, create_report):
        selector = ReportSelector(session)
        assert selector.next_week_number(project_id) == 1
        create_report(project_id, 1)
        create_report(project_id, 4)
        assert selector.next_week_number(project_id) == 5

    def test_read_reports_ordered_by_week(self, session, project_id, create_report):
        create_report(project_id, 3)
        create_report(project_id, 1)
        assert [r.week for r in ReportSelector(session).read_reports(project_id)] == [1, 3]

    def test_get_report_scoped_to_project(self, session, project_id, create_project, create_report):
        other = create_project(name="Elsewhere")
        report_id = create_report(other, 1)
        with pytest.raises(ReportNotFoundError):
            ReportSelector(session).get_report(project_id, report_id)


class TestProjectAndCatalogSelectors:

    def test_list_projects_by_manager(self, session, create_project):
        create_project(name="Beta", manager_id="m-2")
        create_project(name="Alpha", manager_id="m-2")
        create_project(name="Gamma", manager_id="m-3")

        names = [p.name for p in ProjectSelector(session).list_projects(manager_id="m-2")]
        assert names == ["Alpha", "Beta"]
        assert len(ProjectSelector(session).list_projects()) == 3

    def test_get_unknown_project(self, session):
        with pytest.raises(ProjectNotFoundError):
            ProjectSelector(session).get(uuid4())

    def test_catalog_filtered_by_type(self, session, create_milestone):
        roof = create_milestone("Panels installed")
        create_milestone("Turbine erected", project_type="Wind Farm")
        assert MilestoneSelector(session).catalog_ids("Solar Roof") == frozenset({roof})
        assert MilestoneSelector(session).list_milestones("Geothermal") == []

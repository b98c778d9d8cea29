"""Tests for ReportWriter: accumulation, edits, duplicates and storage failures."""

from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from progress_kernel.db.access_control import DenyAllPolicy, bind_access_policy
from progress_kernel.domain.accumulator import ReportAccumulator
from progress_kernel.models.milestone import Milestone
from progress_kernel.models.weekly_report import WeeklyReport
from progress_kernel.selectors.report_selector import ReportSelector
from progress_kernel.services.results import WriteStatus


class TestSolarRoofAccumulation:

    def test_first_week(self, report_writer, project_id, solar_roof_catalog, make_draft):
        a, b, _, _ = solar_roof_catalog
        result = report_writer.save(make_draft(project_id, {a, b}, week=1))

        assert result.status == WriteStatus.SAVED
        assert result.created
        assert result.report.week == 1
        assert result.report.progress == 50
        assert result.report.milestones == frozenset({a, b})
        assert not result.completes_catalog

    def test_unchecking_inherited_milestone_is_ignored(
        self, report_writer, project_id, solar_roof_catalog, make_draft
    ):
        a, b, c, _ = solar_roof_catalog
        report_writer.save(make_draft(project_id, {a, b}, week=1))

        result = report_writer.save(make_draft(project_id, {b, c}, week=2))

        assert result.is_success
        assert result.report.milestones == frozenset({a, b, c})
        assert result.report.progress == 75
        assert result.ignored_removals == frozenset({a})

    def test_all_milestones_completes_catalog(
        self, report_writer, project_id, solar_roof_catalog, make_draft
    ):
        result = report_writer.save(make_draft(project_id, solar_roof_catalog, week=1))
        assert result.report.progress == 100
        assert result.completes_catalog
        assert result.catalog_ids == frozenset(solar_roof_catalog)

    def test_milestones_stored_sorted(
        self, report_writer, session, project_id, solar_roof_catalog, make_draft
    ):
        result = report_writer.save(make_draft(project_id, solar_roof_catalog, week=1))
        row = session.get(WeeklyReport, result.report.id)
        assert row.milestones == sorted(solar_roof_catalog)

    def test_saved_logged_with_progress(
        self, report_writer, project_id, solar_roof_catalog, make_draft, captured_logs
    ):
        report_writer.save(make_draft(project_id, solar_roof_catalog[:1], week=1))
        saved = [r for r in captured_logs() if r["message"] == "report_saved"]
        assert len(saved) == 1
        assert saved[0]["progress"] == 25
        assert saved[0]["project_id"] == str(project_id)
        assert saved[0]["actor_id"] == "manager-1"


    def test_ignored_removals_logged_as_sorted_list(
        self, report_writer, project_id, solar_roof_catalog, make_draft, captured_logs
    ):
        a, b, c, _ = solar_roof_catalog
        report_writer.save(make_draft(project_id, {a, b}, week=1))

        report_writer.save(make_draft(project_id, {c}, week=2))

        ignored = [r for r in captured_logs() if r["message"] == "inherited_removals_ignored"]
        assert len(ignored) == 1
        assert ignored[0]["milestone_ids"] == sorted([a, b])

    def test_catalog_shrink_keeps_stored_progress(
        self, report_writer, session, project_id, solar_roof_catalog, make_draft
    ):
        a, b, _, d = solar_roof_catalog
        first = report_writer.save(make_draft(project_id, {a, b}, week=1))
        assert first.report.progress == 50

        session.delete(session.get(Milestone, UUID(d)))
        session.commit()

        second = report_writer.save(make_draft(project_id, {a, b}, week=2))

        assert second.report.progress == 67
        history = ReportSelector(session).read_reports(project_id)
        assert [(r.week, r.progress) for r in history] == [(1, 50), (2, 67)]


class TestEditing:

    def test_edit_updates_in_place_and_keeps_created_at(
        self, report_writer, session, deterministic_clock, project_id, solar_roof_catalog, make_draft
    ):
        a, b, _, _ = solar_roof_catalog
        first = report_writer.save(make_draft(project_id, {a}, week=1))
        created_at = first.report.created_at

        deterministic_clock.advance_days(3)
        result = report_writer.save(
            make_draft(project_id, {a, b}, report_id=first.report.id, summary="Revised")
        )

        assert result.status == WriteStatus.SAVED
        assert not result.created
        assert result.report.id == first.report.id

        session.expire_all()
        row = session.get(WeeklyReport, first.report.id)
        assert row.created_at == created_at
        assert row.week == 1
        assert row.summary == "Revised"
        assert row.progress == 50
        assert len(ReportSelector(session).read_reports(project_id)) == 1

    def test_edit_with_different_week_rejected(
        self, report_writer, project_id, solar_roof_catalog, make_draft
    ):
        first = report_writer.save(make_draft(project_id, week=1))
        result = report_writer.save(
            make_draft(project_id, week=4, report_id=first.report.id)
        )
        assert result.status == WriteStatus.VALIDATION_FAILED
        assert "week" in result.field_errors

    def test_edit_of_earlier_week_propagates_forward(
        self, report_writer, session, project_id, solar_roof_catalog, make_draft
    ):
        a, b, c, _ = solar_roof_catalog
        week1 = report_writer.save(make_draft(project_id, {a}, week=1))
        week2 = report_writer.save(make_draft(project_id, {b}, week=2))

        result = report_writer.save(
            make_draft(project_id, {a, c}, report_id=week1.report.id)
        )

        assert result.propagated_report_ids == (week2.report.id,)
        later = ReportSelector(session).get_report(project_id, week2.report.id)
        assert later.milestones == frozenset({a, b, c})
        assert later.progress == 75

    def test_edit_without_new_milestones_propagates_nothing(
        self, report_writer, project_id, solar_roof_catalog, make_draft
    ):
        a, b, _, _ = solar_roof_catalog
        week1 = report_writer.save(make_draft(project_id, {a}, week=1))
        report_writer.save(make_draft(project_id, {b}, week=2))

        result = report_writer.save(
            make_draft(project_id, {a}, report_id=week1.report.id, summary="Typo fixed")
        )
        assert result.propagated_report_ids == ()

    def test_unknown_report(self, report_writer, project_id, make_draft):
        result = report_writer.save(make_draft(project_id, report_id=uuid4()))
        assert result.status == WriteStatus.NOT_FOUND

    def test_report_of_another_project(
        self, report_writer, create_project, project_id, make_draft
    ):
        other = create_project(name="Other Roof")
        theirs = report_writer.save(make_draft(other, week=1))
        result = report_writer.save(make_draft(project_id, report_id=theirs.report.id))
        assert result.status == WriteStatus.NOT_FOUND


class TestRejections:

    def test_unknown_project(self, report_writer, make_draft):
        result = report_writer.save(make_draft(uuid4(), week=1))
        assert result.status == WriteStatus.NOT_FOUND

    def test_duplicate_week(self, report_writer, session, project_id, make_draft):
        report_writer.save(make_draft(project_id, week=1))
        result = report_writer.save(make_draft(project_id, week=1, summary="Again"))

        assert result.status == WriteStatus.DUPLICATE_WEEK
        assert "week" in result.field_errors
        assert len(ReportSelector(session).read_reports(project_id)) == 1

    def test_duplicate_week_caught_by_constraint(
        self, report_writer, session, project_id, make_draft, monkeypatch
    ):
        report_writer.save(make_draft(project_id, week=1))
        monkeypatch.setattr(ReportAccumulator, "report_for_week", lambda self, week: None)

        result = report_writer.save(make_draft(project_id, week=1, summary="Race"))

        assert result.status == WriteStatus.DUPLICATE_WEEK
        assert len(ReportSelector(session).read_reports(project_id)) == 1

    def test_validation_failure_writes_nothing(
        self, report_writer, session, project_id, make_draft
    ):
        result = report_writer.save(
            make_draft(project_id, week=1, summary=" ", status="Completed")
        )
        assert result.status == WriteStatus.VALIDATION_FAILED
        assert set(result.field_errors) == {"summary", "status"}
        assert result.message.startswith("Invalid weekly report")
        assert ReportSelector(session).read_reports(project_id) == []

    def test_unknown_milestone(self, report_writer, project_id, solar_roof_catalog, make_draft):
        result = report_writer.save(make_draft(project_id, {"not-a-milestone"}, week=1))
        assert result.status == WriteStatus.VALIDATION_FAILED
        assert "milestones" in result.field_errors


class TestStorageFailures:

    def test_permission_denied_publishes_event(
        self, report_writer, session, project_id, make_draft, permission_events
    ):
        bind_access_policy(session, DenyAllPolicy(), actor_id="manager-1")

        result = report_writer.save(make_draft(project_id, week=1))

        assert result.status == WriteStatus.PERMISSION_DENIED
        assert len(permission_events) == 1
        event = permission_events[0]
        assert event is result.permission_error
        assert event.operation == "create"
        assert event.path.startswith(f"projects/{project_id}/weeklyReports/")
        assert event.attempted_data["week"] == 1

        bind_access_policy(session, None)
        assert ReportSelector(session).read_reports(project_id) == []

    def test_permission_denied_on_edit_keeps_stored_report(
        self, report_writer, session, project_id, solar_roof_catalog, make_draft, permission_events
    ):
        a, b, _, _ = solar_roof_catalog
        first = report_writer.save(make_draft(project_id, {a}, week=1))
        bind_access_policy(session, DenyAllPolicy())

        result = report_writer.save(make_draft(project_id, {a, b}, report_id=first.report.id))

        assert result.status == WriteStatus.PERMISSION_DENIED
        assert permission_events[0].operation == "update"
        bind_access_policy(session, None)
        stored = ReportSelector(session).get_report(project_id, first.report.id)
        assert stored.milestones == frozenset({a})

    def test_store_unreachable(self, report_writer, session, project_id, make_draft, monkeypatch):
        def _down():
            raise OperationalError("COMMIT", {}, Exception("connection refused"))

        monkeypatch.setattr(session, "commit", _down)

        result = report_writer.save(make_draft(project_id, week=1))

        assert result.status == WriteStatus.UNAVAILABLE
        assert "connection refused" in result.message
        assert ReportSelector(session).read_reports(project_id) == []

    def test_unexpected_error_propagates(
        self, report_writer, project_id, make_draft, monkeypatch
    ):
        def _boom(self, week):
            raise RuntimeError("bug")

        monkeypatch.setattr(ReportAccumulator, "reports_after", _boom)
        with pytest.raises(RuntimeError):
            report_writer.save(make_draft(project_id, week=1))

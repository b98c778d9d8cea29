"""Tests for the WeeklyReport fixed-field listener."""

from datetime import datetime, timezone

import pytest

from progress_kernel.exceptions import ImmutabilityViolationError
from progress_kernel.models.weekly_report import WeeklyReport


class TestReportImmutability:

    def test_week_cannot_change(self, session, project_id, create_report):
        report = session.get(WeeklyReport, create_report(project_id, 1))
        report.week = 2
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        session.rollback()
        assert exc_info.value.field == "week"

    def test_created_at_cannot_change(self, session, project_id, create_report):
        report = session.get(WeeklyReport, create_report(project_id, 1))
        report.created_at = datetime(2030, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(ImmutabilityViolationError) as exc_info:
            session.flush()
        session.rollback()
        assert exc_info.value.field == "created_at"

    def test_mutable_fields_update(self, session, project_id, create_report):
        report_id = create_report(project_id, 1)
        report = session.get(WeeklyReport, report_id)
        report.summary = "Updated summary"
        report.progress = 40
        session.commit()

        session.expire_all()
        assert session.get(WeeklyReport, report_id).summary == "Updated summary"

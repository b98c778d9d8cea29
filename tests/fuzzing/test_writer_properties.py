"""
Property-based tests for ReportWriter against a real database.

Random sequences of creates and edits, touching weeks in any order, must
leave a history in which every earlier week's milestones are contained in
every later week's and stored progress matches the catalog.
"""

from contextlib import contextmanager
from datetime import date
from uuid import uuid4

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from progress_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from progress_kernel.domain.clock import DeterministicClock
from progress_kernel.domain.dtos import ReportDraft
from progress_kernel.domain.milestones import compute_progress
from progress_kernel.models.milestone import Milestone
from progress_kernel.models.project import Project
from progress_kernel.selectors.report_selector import ReportSelector
from progress_kernel.services.report_writer import ReportWriter
from progress_kernel.services.results import WriteStatus

CATALOG_SIZE = 5

steps_strategy = st.lists(
    st.tuples(
        st.integers(min_value=1, max_value=6),
        st.frozensets(st.integers(min_value=0, max_value=CATALOG_SIZE - 1)),
    ),
    min_size=1,
    max_size=15,
)


@contextmanager
def _fresh_project():
    """An in-memory database holding one Solar Roof project and its catalog."""
    init_engine_from_url("sqlite://")
    create_tables()
    session = get_session()
    clock = DeterministicClock()
    try:
        catalog = []
        for i in range(CATALOG_SIZE):
            milestone = Milestone(
                id=uuid4(),
                name=f"Milestone {i}",
                description="Checked on site",
                project_type="Solar Roof",
                created_at=clock.now(),
            )
            session.add(milestone)
            catalog.append(str(milestone.id))
        project = Project(
            id=uuid4(),
            name="Property Roof",
            manager_id="manager-1",
            project_type="Solar Roof",
            status="On Track",
            start_date=date(2024, 1, 1),
            estimated_end_date=date(2024, 6, 30),
            created_at=clock.now(),
        )
        session.add(project)
        session.commit()
        yield session, ReportWriter(session, clock=clock), project.id, catalog
    finally:
        session.close()
        drop_tables()
        reset_engine()


class TestWriterProperties:

    @given(steps_strategy)
    @settings(
        max_examples=40,
        deadline=None,
        suppress_health_check=[HealthCheck.function_scoped_fixture],
    )
    def test_history_stays_monotonic_under_any_edit_order(self, steps):
        with _fresh_project() as (session, writer, project_id, catalog):
            catalog_ids = frozenset(catalog)
            selector = ReportSelector(session)

            for week, picks in steps:
                selected = frozenset(catalog[i] for i in picks)
                existing = {r.week: r.id for r in selector.read_reports(project_id)}
                draft = ReportDraft(
                    project_id=project_id,
                    summary=f"Week {week} update",
                    status="On Track",
                    milestones=selected,
                    week=None if week in existing else week,
                    report_id=existing.get(week),
                )
                result = writer.save(draft)
                assert result.status == WriteStatus.SAVED, result.field_errors
                assert selected <= result.report.milestones

                history = selector.read_reports(project_id)
                for earlier, later in zip(history, history[1:]):
                    assert earlier.milestones <= later.milestones
                    assert earlier.progress <= later.progress
                for report in history:
                    assert report.progress == compute_progress(report.milestones, catalog_ids)

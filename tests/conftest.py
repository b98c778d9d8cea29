"""
Pytest fixtures for the progress kernel test suite.

Provides:
- A fresh in-memory SQLite database per test (foreign keys enforced)
- Kernel ORM listeners (access control, report immutability)
- Deterministic clock and a recording permission-error channel
- Catalog / project / report factories
- Captured structured logs
"""

import json
import logging
from collections.abc import Generator
from datetime import date
from io import StringIO
from uuid import UUID, uuid4

import pytest
from sqlalchemy.orm import Session

from progress_kernel.db.access_control import (
    register_access_listeners,
    unregister_access_listeners,
)
from progress_kernel.db.engine import (
    create_tables,
    drop_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from progress_kernel.db.immutability import (
    register_immutability_listeners,
    unregister_immutability_listeners,
)
from progress_kernel.domain.clock import DeterministicClock
from progress_kernel.domain.dtos import ReportDraft
from progress_kernel.domain.milestones import compute_progress, storage_order
from progress_kernel.domain.notifications import PermissionErrorChannel, PermissionErrorEvent
from progress_kernel.domain.values import ProjectStatus, ReportStatus
from progress_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from progress_kernel.models.milestone import Milestone
from progress_kernel.models.project import Project
from progress_kernel.models.weekly_report import WeeklyReport
from progress_kernel.services.catalog_service import CatalogService
from progress_kernel.services.project_deletion_service import ProjectDeletionCoordinator
from progress_kernel.services.project_service import ProjectService
from progress_kernel.services.report_submission_service import ReportSubmissionService
from progress_kernel.services.report_writer import ReportWriter

TEST_ACTOR_ID = "manager-1"
SOLAR_ROOF = "Solar Roof"
SOLAR_ROOF_MILESTONES = (
    "Site survey",
    "Permits approved",
    "Panels installed",
    "Grid connection",
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture progress_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, report_writer):
            report_writer.save(draft)
            assert any(r["message"] == "report_saved" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("progress_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _kernel_listeners():
    """Access-control and immutability listeners stay active for the session."""
    register_access_listeners()
    register_immutability_listeners()
    yield
    unregister_immutability_listeners()
    unregister_access_listeners()


@pytest.fixture
def db_engine():
    """A fresh in-memory database for each test."""
    eng = init_engine_from_url("sqlite://")
    create_tables()
    yield eng
    drop_tables()
    reset_engine()


@pytest.fixture
def session(db_engine) -> Generator[Session, None, None]:
    sess = get_session()
    yield sess
    sess.close()


@pytest.fixture
def deterministic_clock() -> DeterministicClock:
    return DeterministicClock()


@pytest.fixture
def permission_events() -> list[PermissionErrorEvent]:
    """Every event delivered to the channel's subscriber."""
    return []


@pytest.fixture
def channel(permission_events) -> PermissionErrorChannel:
    return PermissionErrorChannel(permission_events.append)


# =============================================================================
# Service fixtures
# =============================================================================


@pytest.fixture
def report_writer(session, deterministic_clock, channel) -> ReportWriter:
    return ReportWriter(session, clock=deterministic_clock, channel=channel)


@pytest.fixture
def submission_service(session, deterministic_clock, channel) -> ReportSubmissionService:
    return ReportSubmissionService(session, clock=deterministic_clock, channel=channel)


@pytest.fixture
def deletion_coordinator(session, deterministic_clock, channel) -> ProjectDeletionCoordinator:
    return ProjectDeletionCoordinator(session, clock=deterministic_clock, channel=channel)


@pytest.fixture
def project_service(session, deterministic_clock, channel) -> ProjectService:
    return ProjectService(session, clock=deterministic_clock, channel=channel)


@pytest.fixture
def catalog_service(session, deterministic_clock, channel) -> CatalogService:
    return CatalogService(session, clock=deterministic_clock, channel=channel)


# =============================================================================
# Data factories
# =============================================================================


@pytest.fixture
def create_milestone(session, deterministic_clock):
    """Insert a catalog milestone; returns its id as a string."""

    def _create(name: str, project_type: str = SOLAR_ROOF, description: str = "") -> str:
        milestone = Milestone(
            id=uuid4(),
            name=name,
            description=description or f"{name} done",
            project_type=project_type,
            created_at=deterministic_clock.now(),
        )
        session.add(milestone)
        session.commit()
        return str(milestone.id)

    return _create


@pytest.fixture
def solar_roof_catalog(create_milestone) -> list[str]:
    """Four Solar Roof milestones, in catalog order."""
    return [create_milestone(name) for name in SOLAR_ROOF_MILESTONES]


@pytest.fixture
def create_project(session, deterministic_clock):
    """Insert a project; returns its id."""

    def _create(
        project_type: str = SOLAR_ROOF,
        status: ProjectStatus = ProjectStatus.ON_TRACK,
        name: str = "Maple Street Rooftop",
        manager_id: str = TEST_ACTOR_ID,
        start_date: date = date(2024, 1, 1),
        estimated_end_date: date = date(2024, 6, 30),
    ) -> UUID:
        project = Project(
            id=uuid4(),
            name=name,
            client_id="client-1",
            manager_id=manager_id,
            project_type=project_type,
            status=status.value,
            start_date=start_date,
            estimated_end_date=estimated_end_date,
            created_at=deterministic_clock.now(),
        )
        session.add(project)
        session.commit()
        return project.id

    return _create


@pytest.fixture
def project_id(create_project) -> UUID:
    return create_project()


@pytest.fixture
def create_report(session, deterministic_clock):
    """Insert a weekly report directly (bypassing the writer); returns its id."""

    def _create(
        project_id: UUID,
        week: int,
        milestones: list[str] | tuple[str, ...] = (),
        progress: int | None = None,
        catalog: list[str] | None = None,
        summary: str = "Seeded report",
        status: ReportStatus = ReportStatus.ON_TRACK,
    ) -> UUID:
        if progress is None:
            progress = compute_progress(milestones, frozenset(catalog or ()))
        report = WeeklyReport(
            id=uuid4(),
            project_id=project_id,
            week=week,
            progress=progress,
            summary=summary,
            status=status.value,
            milestones=storage_order(milestones),
            created_at=deterministic_clock.now(),
        )
        session.add(report)
        session.commit()
        return report.id

    return _create


def _make_draft(
    project_id: UUID,
    milestones=(),
    week: int | None = None,
    report_id: UUID | None = None,
    summary: str = "Crew on site all week.",
    status: str = "On Track",
    actor_id: str | None = TEST_ACTOR_ID,
) -> ReportDraft:
    return ReportDraft(
        project_id=project_id,
        summary=summary,
        status=status,
        milestones=frozenset(milestones),
        week=week,
        report_id=report_id,
        actor_id=actor_id,
    )


@pytest.fixture
def make_draft():
    """Build a ReportDraft; defaults to an On Track report by the test manager."""
    return _make_draft

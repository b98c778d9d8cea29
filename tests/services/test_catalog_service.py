"""Tests for CatalogService."""

from uuid import UUID, uuid4

from progress_kernel.db.access_control import DenyAllPolicy, bind_access_policy
from progress_kernel.selectors.milestone_selector import MilestoneSelector
from progress_kernel.selectors.report_selector import ReportSelector
from progress_kernel.services.results import WriteStatus


class TestCatalogService:

    def test_create(self, catalog_service, session):
        result = catalog_service.create_milestone(
            " Inverter installed ", "Inverters mounted and wired", "Solar Farm", actor_id="admin"
        )
        assert result.status == WriteStatus.SAVED
        assert result.milestone.name == "Inverter installed"
        catalog = MilestoneSelector(session).list_milestones("Solar Farm")
        assert [m.name for m in catalog] == ["Inverter installed"]

    def test_create_requires_fields(self, catalog_service):
        result = catalog_service.create_milestone("", "", "Solar Farm")
        assert result.status == WriteStatus.VALIDATION_FAILED
        assert set(result.field_errors) == {"name", "description"}
        assert result.message.startswith("Invalid milestone")

    def test_update_keeps_omitted_fields(self, catalog_service, session, create_milestone):
        milestone_id = create_milestone("Site survey", description="Survey done")
        result = catalog_service.update_milestone(UUID(milestone_id), name="Site survey signed")
        assert result.is_success
        info = MilestoneSelector(session).get_milestone(UUID(milestone_id))
        assert info.name == "Site survey signed"
        assert info.description == "Survey done"

    def test_update_unknown(self, catalog_service):
        result = catalog_service.update_milestone(uuid4(), name="x")
        assert result.status == WriteStatus.NOT_FOUND

    def test_catalog_change_leaves_stored_progress(
        self, catalog_service, session, project_id, solar_roof_catalog, create_report
    ):
        create_report(project_id, 1, solar_roof_catalog[:2], catalog=solar_roof_catalog)
        catalog_service.create_milestone("Monitoring live", "Monitoring online", "Solar Roof")

        report = ReportSelector(session).read_reports(project_id)[0]
        assert report.progress == 50

    def test_denied(self, catalog_service, session, permission_events):
        bind_access_policy(session, DenyAllPolicy())
        result = catalog_service.create_milestone("A", "B", "Solar Roof")
        assert result.status == WriteStatus.PERMISSION_DENIED
        assert permission_events[0].path.startswith("milestones/")
        bind_access_policy(session, None)
        assert MilestoneSelector(session).list_milestones("Solar Roof") == []

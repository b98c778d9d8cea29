"""Services for the progress kernel (write side)."""

from progress_kernel.services.catalog_service import CatalogService, MilestoneWriteResult
from progress_kernel.services.project_deletion_service import (
    DeletionResult,
    ProjectDeletionCoordinator,
)
from progress_kernel.services.project_service import ProjectService, ProjectWriteResult
from progress_kernel.services.report_submission_service import (
    CompletionOutcome,
    ReportSubmission,
    ReportSubmissionService,
)
from progress_kernel.services.report_writer import ReportWriter, ReportWriteResult
from progress_kernel.services.results import WriteStatus

__all__ = [
    "CatalogService",
    "CompletionOutcome",
    "DeletionResult",
    "MilestoneWriteResult",
    "ProjectDeletionCoordinator",
    "ProjectService",
    "ProjectWriteResult",
    "ReportSubmission",
    "ReportSubmissionService",
    "ReportWriteResult",
    "ReportWriter",
    "WriteStatus",
]

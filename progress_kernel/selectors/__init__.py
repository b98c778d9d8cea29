"""Read-only query selectors returning frozen DTOs."""

from progress_kernel.selectors.milestone_selector import MilestoneSelector
from progress_kernel.selectors.progress_selector import (
    ChecklistItem,
    GeneralReport,
    ProjectProgressSelector,
)
from progress_kernel.selectors.project_selector import ProjectSelector
from progress_kernel.selectors.report_selector import ReportSelector

__all__ = [
    "ChecklistItem",
    "GeneralReport",
    "MilestoneSelector",
    "ProjectProgressSelector",
    "ProjectSelector",
    "ReportSelector",
]

"""ORM models for the progress kernel."""

from progress_kernel.models.milestone import Milestone
from progress_kernel.models.project import Project
from progress_kernel.models.weekly_report import WeeklyReport, report_collection_path

__all__ = [
    "Milestone",
    "Project",
    "WeeklyReport",
    "report_collection_path",
]

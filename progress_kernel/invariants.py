"""
Kernel Invariants Contract.

These invariants are structural law. They are enforced inside the write
services and the ORM flush listeners, never by caller discipline. No
configuration, access rule, or catalog change may override them.

This module exists solely to declare these invariants explicitly. The
enforcement is distributed across ReportWriter, ProjectDeletionCoordinator,
the immutability listeners, and the weekly report table constraints.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Each value names one structural guarantee that the kernel provides
    unconditionally.
    """

    MONOTONIC_MILESTONES = "monotonic_milestones"
    """For two reports of one project, the earlier week's milestones are a
    subset of the later week's. Enforced by ReportWriter (union with the
    inherited floor plus forward propagation)."""

    CREATED_AT_FIXED = "created_at_fixed"
    """A report's created_at, week and project_id never change after
    insert. Enforced by progress_kernel.db.immutability."""

    UNIQUE_WEEK = "unique_week"
    """At most one report per (project, week). Enforced by ReportWriter and
    the uq_weekly_report_project_week constraint."""

    PROGRESS_BOUNDS = "progress_bounds"
    """Stored progress is an integer in [0, 100]. Enforced by report
    validation and a check constraint."""

    ATOMIC_PROJECT_DELETION = "atomic_project_deletion"
    """A project and all of its reports are removed in one transaction or
    not at all. Enforced by ProjectDeletionCoordinator."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "progress_config",
    "scripts",
)

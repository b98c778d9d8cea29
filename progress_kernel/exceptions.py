"""
Typed Exception Hierarchy for the Progress Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of the engine must tell failures apart without parsing messages.
A permission denial is actionable by a permissions administrator, a
validation failure by the person filing the report, and a storage outage by
nobody but a later retry.  Each of those is a distinct type here:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (not just a message string)

Example:
    try:
        writer.save(draft)
    except StoragePermissionError as e:
        channel.publish(PermissionErrorEvent.from_error(e))
    except StorageUnavailableError as e:
        log.warning("storage down", extra={"path": e.path})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ProgressKernelError (base)
    |
    +-- ValidationError
    |   +-- ReportValidationError
    |   +-- ProjectValidationError
    |   +-- MilestoneValidationError
    |
    +-- StorageError
    |   +-- StoragePermissionError
    |   +-- StorageUnavailableError
    |
    +-- NotFoundError
    |   +-- ProjectNotFoundError
    |   +-- ReportNotFoundError
    |   +-- MilestoneNotFoundError
    |
    +-- ReportError
    |   +-- DuplicateWeekError
    |   +-- ConcurrentModificationError
    |
    +-- ImmutabilityError
    |   +-- ImmutabilityViolationError
    |
    +-- CompletionError
        +-- InvalidCompletionTransitionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Validation      | REPORT_VALIDATION_FAILED    | Draft report has field errors
                | PROJECT_VALIDATION_FAILED   | Project payload has field errors
                | MILESTONE_VALIDATION_FAILED | Catalog entry has field errors
----------------|-----------------------------|-----------------------------------------
Storage         | PERMISSION_DENIED           | Access policy refused a document write
                | STORAGE_UNAVAILABLE         | Connection/availability failure
----------------|-----------------------------|-----------------------------------------
Not found       | PROJECT_NOT_FOUND           | Project ID doesn't exist
                | REPORT_NOT_FOUND            | Report ID doesn't exist for project
                | MILESTONE_NOT_FOUND         | Milestone ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Report          | DUPLICATE_WEEK              | Week number already used by project
                | CONCURRENT_MODIFICATION     | Reports appeared during deletion
----------------|-----------------------------|-----------------------------------------
Immutability    | IMMUTABILITY_VIOLATION      | created_at/week/project_id changed
----------------|-----------------------------|-----------------------------------------
Completion      | INVALID_COMPLETION_TRANSITION | confirm/decline outside awaiting state

===============================================================================
"""

from __future__ import annotations

from typing import Any


class ProgressKernelError(Exception):
    """
    Base exception for all progress kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "PROGRESS_KERNEL_ERROR"


# Validation exceptions


class ValidationError(ProgressKernelError):
    """Payload failed field validation. Nothing was written."""

    code: str = "VALIDATION_FAILED"
    entity_type: str = "payload"

    def __init__(self, field_errors: dict[str, list[str]]):
        self.field_errors = {k: list(v) for k, v in field_errors.items()}
        joined = "; ".join(
            f"{name}: {', '.join(messages)}"
            for name, messages in sorted(self.field_errors.items())
        )
        super().__init__(f"Invalid {self.entity_type}: {joined}")


class ReportValidationError(ValidationError):
    """Weekly report draft failed validation."""

    code: str = "REPORT_VALIDATION_FAILED"
    entity_type: str = "weekly report"


class ProjectValidationError(ValidationError):
    """Project payload failed validation."""

    code: str = "PROJECT_VALIDATION_FAILED"
    entity_type: str = "project"


class MilestoneValidationError(ValidationError):
    """Milestone catalog entry failed validation."""

    code: str = "MILESTONE_VALIDATION_FAILED"
    entity_type: str = "milestone"


# Storage exceptions


class StorageError(ProgressKernelError):
    """Base exception for storage-layer failures."""

    code: str = "STORAGE_ERROR"


class StoragePermissionError(StorageError):
    """The storage access policy denied a document operation.

    Carries enough context (path, operation, attempted payload) for a
    human or a policy-debug tool to diagnose the rule that refused it.
    """

    code: str = "PERMISSION_DENIED"

    def __init__(
        self,
        path: str,
        operation: str,
        attempted_data: dict[str, Any] | None = None,
        reason: str | None = None,
    ):
        self.path = path
        self.operation = operation
        self.attempted_data = attempted_data
        self.reason = reason
        message = f"Permission denied: {operation} on {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class StorageUnavailableError(StorageError):
    """Network or availability failure talking to the store."""

    code: str = "STORAGE_UNAVAILABLE"

    def __init__(self, operation: str, path: str, reason: str):
        self.operation = operation
        self.path = path
        self.reason = reason
        super().__init__(f"Storage unavailable during {operation} on {path}: {reason}")


# Not-found exceptions


class NotFoundError(ProgressKernelError):
    """Base exception for absent documents."""

    code: str = "NOT_FOUND"


class ProjectNotFoundError(NotFoundError):
    """Project with given ID was not found."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


class ReportNotFoundError(NotFoundError):
    """Weekly report with given ID was not found under the project."""

    code: str = "REPORT_NOT_FOUND"

    def __init__(self, project_id: str, report_id: str):
        self.project_id = project_id
        self.report_id = report_id
        super().__init__(f"Weekly report not found: {report_id} (project {project_id})")


class MilestoneNotFoundError(NotFoundError):
    """Milestone with given ID was not found."""

    code: str = "MILESTONE_NOT_FOUND"

    def __init__(self, milestone_id: str):
        self.milestone_id = milestone_id
        super().__init__(f"Milestone not found: {milestone_id}")


# Report exceptions


class ReportError(ProgressKernelError):
    """Base exception for weekly report write conflicts."""

    code: str = "REPORT_ERROR"


class DuplicateWeekError(ReportError):
    """A report for this week already exists for the project."""

    code: str = "DUPLICATE_WEEK"

    def __init__(self, project_id: str, week: int):
        self.project_id = project_id
        self.week = week
        super().__init__(f"Project {project_id} already has a report for week {week}")


class ConcurrentModificationError(ReportError):
    """Reports were added to a project while it was being deleted."""

    code: str = "CONCURRENT_MODIFICATION"

    def __init__(self, project_id: str, unexpected_report_ids: list[str]):
        self.project_id = project_id
        self.unexpected_report_ids = unexpected_report_ids
        super().__init__(
            f"Project {project_id} gained {len(unexpected_report_ids)} report(s) during deletion"
        )


# Immutability exceptions


class ImmutabilityError(ProgressKernelError):
    """Base exception for immutability violations."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """Attempted to modify a field that is fixed once written."""

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, field: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.field = field
        super().__init__(f"Cannot modify {field} on {entity_type} {entity_id}")


# Completion exceptions


class CompletionError(ProgressKernelError):
    """Base exception for the project completion decision."""

    code: str = "COMPLETION_ERROR"


class InvalidCompletionTransitionError(CompletionError):
    """confirm/decline was requested from a state that does not allow it."""

    code: str = "INVALID_COMPLETION_TRANSITION"

    def __init__(self, current_state: str, action: str):
        self.current_state = current_state
        self.action = action
        super().__init__(f"Cannot {action} completion from state '{current_state}'")

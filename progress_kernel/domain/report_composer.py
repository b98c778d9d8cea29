"""
Report composition and validation.

Responsibility:
    Turn a ReportDraft into the exact values that will be persisted:

    1. checked = explicit selections ∪ inherited floor (attempted removals of
       inherited ids are ignored, never reported as errors);
    2. progress = compute_progress(checked, current catalog);
    3. field-level validation of summary, status, progress, week and the
       selected ids.

Architecture position:
    Kernel > Domain -- pure functional core, ZERO I/O.  ReportWriter reads
    the project, prior reports and catalog, then calls ``compose_report``.

Invariants enforced:
    The inherited floor is always a subset of ``checked``, so no draft can
    retract a milestone completed in an earlier week.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from uuid import UUID

from progress_kernel.domain.accumulator import ReportAccumulator
from progress_kernel.domain.dtos import MilestoneInfo, ReportDraft, WeeklyReportInfo
from progress_kernel.domain.milestones import (
    compute_progress,
    covers_catalog,
    ignored_removals,
    merge_with_floor,
    normalize_milestone_ids,
)
from progress_kernel.domain.values import REPORT_STATUS_VALUES, ReportStatus

FieldErrors = dict[str, list[str]]


@dataclass(frozen=True)
class ComposedReport:
    """Values ready to persist, plus the validation verdict."""

    project_id: UUID
    report_id: UUID | None
    week: int | None
    summary: str
    status: str
    checked: frozenset[str]
    progress: int
    catalog_ids: frozenset[str]
    inherited: frozenset[str] = frozenset()
    ignored_removals: frozenset[str] = frozenset()
    field_errors: FieldErrors = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.field_errors

    @property
    def completes_catalog(self) -> bool:
        return covers_catalog(self.checked, self.catalog_ids)


def _add(errors: FieldErrors, name: str, message: str) -> None:
    errors.setdefault(name, []).append(message)


def validate_report_fields(
    summary: str | None,
    status: str | None,
    progress: int,
    week: int | None,
) -> FieldErrors:
    """Field checks that need no knowledge of other reports."""
    errors: FieldErrors = {}
    if summary is None or not str(summary).strip():
        _add(errors, "summary", "Summary is required.")
    if status not in REPORT_STATUS_VALUES:
        allowed = ", ".join(s.value for s in ReportStatus)
        _add(errors, "status", f"Status must be one of: {allowed}.")
    if not isinstance(progress, int) or isinstance(progress, bool) or not 0 <= progress <= 100:
        _add(errors, "progress", "Progress must be between 0 and 100.")
    if week is None or isinstance(week, bool) or not isinstance(week, int) or week < 1:
        _add(errors, "week", "Week must be a positive integer.")
    return errors


def compose_report(
    draft: ReportDraft,
    accumulator: ReportAccumulator,
    catalog: Iterable[MilestoneInfo],
    existing: WeeklyReportInfo | None = None,
) -> ComposedReport:
    """
    Compose and validate a draft against the project's history and catalog.

    Preconditions:
        - ``existing`` is the stored report when ``draft.report_id`` is set.
    Postconditions:
        - ``result.inherited <= result.checked``.
        - ``result.progress == compute_progress(result.checked, catalog ids)``.
    """
    catalog_ids = frozenset(m.id for m in catalog)
    status = draft.status.value if isinstance(draft.status, ReportStatus) else draft.status
    errors: FieldErrors = {}

    if existing is not None:
        week = existing.week
        if draft.week is not None and draft.week != existing.week:
            _add(errors, "week", "The week of an existing report cannot change.")
    else:
        week = draft.week

    selected = normalize_milestone_ids(draft.milestones)
    floor = accumulator.inherited_milestones(week) if isinstance(week, int) else frozenset()
    checked = merge_with_floor(selected, floor)
    progress = compute_progress(checked, catalog_ids)

    for name, messages in validate_report_fields(draft.summary, status, progress, week).items():
        for message in messages:
            _add(errors, name, message)

    already_held = existing.milestones if existing is not None else frozenset()
    unknown = selected - catalog_ids - floor - already_held
    if unknown:
        _add(errors, "milestones", f"Unknown milestone id(s): {', '.join(sorted(unknown))}.")

    return ComposedReport(
        project_id=draft.project_id,
        report_id=draft.report_id,
        week=week,
        summary=draft.summary,
        status=status,
        checked=checked,
        progress=progress,
        catalog_ids=catalog_ids,
        inherited=floor,
        ignored_removals=ignored_removals(selected, floor),
        field_errors=errors,
    )

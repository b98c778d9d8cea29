"""
Milestone-set rules shared by the accumulator, the report composer and the
completion decision.

Architecture position:
    Kernel > Domain -- pure functions, ZERO I/O.

Rules:
    * Milestone selections have set semantics: duplicates collapse.
    * Progress is ``round_half_up(100 * K / N)`` where N is the current
      catalog size for the project type and K the number of checked ids
      that belong to that catalog.  N == 0 gives 0.
    * A checked set "covers" the catalog only when the catalog is non-empty
      and every catalog id is checked.
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

PERCENT = Decimal("100")


def normalize_milestone_ids(ids: Iterable[object] | None) -> frozenset[str]:
    """Collapse a selection to a set of non-empty string ids."""
    if not ids:
        return frozenset()
    return frozenset(str(i).strip() for i in ids if i is not None and str(i).strip())


def storage_order(ids: Iterable[str]) -> list[str]:
    """Deterministic list form for persistence."""
    return sorted(set(ids))


def merge_with_floor(selected: Iterable[str], floor: Iterable[str]) -> frozenset[str]:
    """Union of explicit selections and the inherited floor.

    Removing a floor id is impossible through this path: the floor is
    always a subset of the result.
    """
    return normalize_milestone_ids(selected) | frozenset(floor)


def ignored_removals(
    selected: Iterable[str], floor: Iterable[str]
) -> frozenset[str]:
    """Floor ids the caller left unchecked (and that were kept anyway)."""
    return frozenset(floor) - normalize_milestone_ids(selected)


def count_in_catalog(checked: Iterable[str], catalog_ids: frozenset[str]) -> int:
    return len(frozenset(checked) & catalog_ids)


def compute_progress(checked: Iterable[str], catalog_ids: frozenset[str]) -> int:
    """Whole-number percentage of catalog milestones checked, rounded half up."""
    total = len(catalog_ids)
    if total == 0:
        return 0
    done = count_in_catalog(checked, catalog_ids)
    ratio = Decimal(done) * PERCENT / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def covers_catalog(checked: Iterable[str], catalog_ids: frozenset[str]) -> bool:
    """True when the catalog is non-empty and fully checked.

    An empty catalog never counts as covered, so projects without a
    milestone template are never offered completion.
    """
    if not catalog_ids:
        return False
    return catalog_ids <= frozenset(checked)

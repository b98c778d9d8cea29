"""
CompletionDecision -- the confirm/decline step offered after a save that
checks every catalog milestone.

States:
    PENDING                 nothing to decide
    AWAITING_CONFIRMATION   a save covered the full catalog and the project
                            is not yet Completed

Actions:
    offer    PENDING -> AWAITING_CONFIRMATION  (evaluate() after a save)
    confirm  AWAITING_CONFIRMATION -> PENDING  (project status := Completed)
    decline  AWAITING_CONFIRMATION -> PENDING  (project status unchanged)

Pure state machine, ZERO I/O.  ReportSubmissionService applies the status
change that ``confirm`` asks for.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import Enum

from progress_kernel.domain.milestones import covers_catalog
from progress_kernel.domain.values import ProjectStatus
from progress_kernel.domain.workflow import Transition, Workflow
from progress_kernel.exceptions import InvalidCompletionTransitionError


class CompletionState(str, Enum):
    PENDING = "pending"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class CompletionAction(str, Enum):
    OFFER = "offer"
    CONFIRM = "confirm"
    DECLINE = "decline"


COMPLETION_WORKFLOW = Workflow(
    name="project_completion",
    description="Offer to mark a project Completed once every milestone is checked",
    initial_state=CompletionState.PENDING.value,
    states=(
        CompletionState.PENDING.value,
        CompletionState.AWAITING_CONFIRMATION.value,
    ),
    transitions=(
        Transition(
            CompletionState.PENDING.value,
            CompletionState.AWAITING_CONFIRMATION.value,
            CompletionAction.OFFER.value,
        ),
        Transition(
            CompletionState.AWAITING_CONFIRMATION.value,
            CompletionState.PENDING.value,
            CompletionAction.CONFIRM.value,
        ),
        Transition(
            CompletionState.AWAITING_CONFIRMATION.value,
            CompletionState.PENDING.value,
            CompletionAction.DECLINE.value,
        ),
    ),
)


def should_offer_completion(
    checked: Iterable[str],
    catalog_ids: frozenset[str],
    project_status: ProjectStatus | str,
) -> bool:
    """True when a non-empty catalog is fully checked and the project is not Completed."""
    if ProjectStatus(project_status) == ProjectStatus.COMPLETED:
        return False
    return covers_catalog(checked, catalog_ids)


class CompletionDecision:
    """
    One decision per save.

    ``evaluate`` moves to AWAITING_CONFIRMATION when completion should be
    offered; ``confirm`` and ``decline`` are legal only from there and both
    return to PENDING.  ``confirm`` returns the status the project must be
    set to; ``decline`` returns None.
    """

    def __init__(self, workflow: Workflow = COMPLETION_WORKFLOW):
        self._workflow = workflow
        self._state = CompletionState(workflow.initial_state)

    @property
    def state(self) -> CompletionState:
        return self._state

    @property
    def awaiting_confirmation(self) -> bool:
        return self._state == CompletionState.AWAITING_CONFIRMATION

    def evaluate(
        self,
        checked: Iterable[str],
        catalog_ids: frozenset[str],
        project_status: ProjectStatus | str,
    ) -> CompletionState:
        if self._state == CompletionState.PENDING and should_offer_completion(
            checked, catalog_ids, project_status
        ):
            self._fire(CompletionAction.OFFER)
        return self._state

    def confirmation_target(self) -> ProjectStatus:
        """The status a confirmation applies; the state is left unchanged."""
        self._require(CompletionAction.CONFIRM)
        return ProjectStatus.COMPLETED

    def confirm(self) -> ProjectStatus:
        self._fire(CompletionAction.CONFIRM)
        return ProjectStatus.COMPLETED

    def decline(self) -> None:
        self._fire(CompletionAction.DECLINE)

    def _require(self, action: CompletionAction) -> Transition:
        transition = self._workflow.find_transition(self._state.value, action.value)
        if transition is None:
            raise InvalidCompletionTransitionError(self._state.value, action.value)
        return transition

    def _fire(self, action: CompletionAction) -> None:
        self._state = CompletionState(self._require(action).to_state)

"""
ReportSubmissionService -- save a weekly report, then run the completion
decision on the result.

Flow:
    submit(draft)
        1. ReportWriter.save(draft)            (own transaction)
        2. read the project's current status
        3. CompletionDecision.evaluate(...)    (pure)
    confirm(submission)
        4a. ProjectService.update_status(..., COMPLETED)  (own transaction);
            the decision leaves AWAITING_CONFIRMATION only once it succeeds
    decline(submission)
        4b. nothing is written

The report half and the status half settle independently, and
CompletionOutcome says which of them succeeded, so a denied status update
never hides the fact that the report was saved.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from progress_kernel.domain.clock import Clock
from progress_kernel.domain.completion import CompletionAction, CompletionDecision
from progress_kernel.domain.dtos import ReportDraft
from progress_kernel.domain.notifications import PermissionErrorChannel
from progress_kernel.domain.values import ProjectStatus
from progress_kernel.logging_config import LogContext, get_logger
from progress_kernel.selectors.project_selector import ProjectSelector
from progress_kernel.services.project_service import ProjectService, ProjectWriteResult
from progress_kernel.services.report_writer import ReportWriter, ReportWriteResult

logger = get_logger("services.report_submission")


@dataclass
class ReportSubmission:
    """A saved (or rejected) report and the completion decision it opened."""

    write: ReportWriteResult
    decision: CompletionDecision
    project_status: ProjectStatus | None = None
    actor_id: str | None = None

    @property
    def report_saved(self) -> bool:
        return self.write.is_success

    @property
    def awaiting_confirmation(self) -> bool:
        return self.decision.awaiting_confirmation


@dataclass(frozen=True)
class CompletionOutcome:
    """Result of confirming or declining completion."""

    action: CompletionAction
    report_saved: bool
    project_status: ProjectStatus | None
    status_update: ProjectWriteResult | None = None

    @property
    def status_updated(self) -> bool:
        return self.status_update is not None and self.status_update.is_success

    @property
    def is_success(self) -> bool:
        if self.action == CompletionAction.CONFIRM:
            return self.report_saved and self.status_updated
        return self.report_saved


class ReportSubmissionService:
    """Coordinates ReportWriter, CompletionDecision and ProjectService."""

    def __init__(
        self,
        session: Session,
        clock: Clock | None = None,
        channel: PermissionErrorChannel | None = None,
    ):
        self.session = session
        self._writer = ReportWriter(session, clock=clock, channel=channel)
        self._projects = ProjectService(session, clock=clock, channel=channel)

    def submit(self, draft: ReportDraft) -> ReportSubmission:
        write = self._writer.save(draft)
        decision = CompletionDecision()
        submission = ReportSubmission(write=write, decision=decision, actor_id=draft.actor_id)
        if not write.is_success:
            return submission

        project = ProjectSelector(self.session).get(draft.project_id)
        submission.project_status = project.status
        decision.evaluate(write.report.milestones, write.catalog_ids, project.status)

        if decision.awaiting_confirmation:
            with LogContext.bind(project_id=draft.project_id, report_id=write.report.id):
                logger.info(
                    "completion_offered",
                    extra={"week": write.report.week, "progress": write.report.progress},
                )
        return submission

    def confirm(self, submission: ReportSubmission) -> CompletionOutcome:
        """
        Mark the project Completed.

        A failed status update leaves the submission awaiting confirmation,
        so the same submission can be confirmed again later.

        Raises:
            InvalidCompletionTransitionError: The submission is not awaiting
                confirmation.
        """
        target = submission.decision.confirmation_target()
        project_id = submission.write.report.project_id
        update = self._projects.update_status(
            project_id, target, actor_id=submission.actor_id
        )
        if update.is_success:
            submission.decision.confirm()
            status = update.project.status
        else:
            status = submission.project_status
        with LogContext.bind(project_id=project_id):
            logger.info(
                "completion_confirmed" if update.is_success else "completion_status_update_failed",
                extra={"status_update": update.status.value},
            )
        return CompletionOutcome(
            action=CompletionAction.CONFIRM,
            report_saved=True,
            project_status=status,
            status_update=update,
        )

    def decline(self, submission: ReportSubmission) -> CompletionOutcome:
        """
        Leave the project status untouched; the saved report stands.

        Raises:
            InvalidCompletionTransitionError: The submission is not awaiting
                confirmation.
        """
        submission.decision.decline()
        with LogContext.bind(project_id=submission.write.report.project_id):
            logger.info("completion_declined")
        return CompletionOutcome(
            action=CompletionAction.DECLINE,
            report_saved=True,
            project_status=submission.project_status,
        )

    def submit_and_decide(
        self,
        draft: ReportDraft,
        decide: Callable[[ReportSubmission], bool],
    ) -> tuple[ReportSubmission, CompletionOutcome | None]:
        """
        Submit, and when completion is offered ask ``decide`` (True confirms).

        The outcome is None when no decision was needed.
        """
        submission = self.submit(draft)
        if not submission.awaiting_confirmation:
            return submission, None
        if decide(submission):
            return submission, self.confirm(submission)
        return submission, self.decline(submission)


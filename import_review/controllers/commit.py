"""Commit controller: the two-step confirm flow that finalizes an import review.

State machine: ``idle -> confirmation_shown -> committing -> committed`` on success, or back to ``idle`` with the
error surfaced at page level on failure. Selection lives entirely on the server, so the commit request carries no
keys.
"""

from collections.abc import Callable

from import_review.controllers.state import CommitPhase, ReviewState
from import_review.core.errors import RemoteStoreError, handle_api_error
from import_review.core.models import CompleteReviewResult, ImportConfirmation
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore

logger = get_logger("import-review.commit")

TRANSACTIONS_VIEW = "transactions"


class CommitController:
    """Confirmation and commit of the selected candidates."""

    def __init__(
        self,
        store: ReviewStore,
        state: ReviewState,
        on_navigate: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the controller with the store, shared state and an optional navigation callback."""
        self.store = store
        self.state = state
        self.on_navigate = on_navigate

    @property
    def can_commit(self) -> bool:
        """Whether at least one candidate is selected in the cached summary."""
        summary = self.state.summary
        return not self.state.closed and summary is not None and summary.selected_count > 0

    def request_commit(self) -> ImportConfirmation | None:
        """Show the confirmation step; returns None when nothing is selected."""
        self.state.require_open()
        if self.state.commit_phase is not CommitPhase.IDLE:
            logger.debug(f"Commit requested while {self.state.commit_phase}")
            return None
        if not self.can_commit:
            logger.info("Commit requested with no selected transactions")
            return None
        self.state.commit_phase = CommitPhase.CONFIRMATION_SHOWN
        return ImportConfirmation.from_summary(self.state.summary)

    def cancel_commit(self) -> None:
        """Close the confirmation step without contacting the server."""
        if self.state.commit_phase is CommitPhase.CONFIRMATION_SHOWN:
            self.state.commit_phase = CommitPhase.IDLE
    
    async def confirm_commit(self) -> CompleteReviewResult | None:
        """Commit the review session; returns None when not confirmed or when the server failed."""
        if self.state.commit_phase is not CommitPhase.CONFIRMATION_SHOWN:
            logger.debug("Commit confirmed without an open confirmation step")
            return None
        workspace = self.state.require_open()
        self.state.commit_phase = CommitPhase.COMMITTING
        self.state.page_error = None
        logger.info(f"Committing import review for workspace {workspace.key}")
        try:
            result = await self.store.complete_review(workspace.key)
        except RemoteStoreError as exc:
            self.state.page_error = handle_api_error(exc, "Import Failed", "Failed to import transactions")
            self.state.commit_phase = CommitPhase.IDLE
            return None

        self.state.commit_phase = CommitPhase.COMMITTED
        self.state.closed = True
        self.state.clear_cache()
        self.state.upload_status = None
        self.state.navigated_to = TRANSACTIONS_VIEW
        if self.on_navigate is not None:
            self.on_navigate(TRANSACTIONS_VIEW)
        logger.info(f"Imported {result.accepted_count} transactions, discarded {result.rejected_count}")
        return result

"""Discard flow: delete every pending candidate after an explicit confirmation."""

from import_review.controllers.pagination import FIRST_PAGE, PaginationCoordinator
from import_review.controllers.state import DiscardPhase, ReviewState
from import_review.core.errors import RemoteStoreError, handle_api_error
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore

logger = get_logger("import-review.discard")


class DiscardController:
    """Confirmation and bulk deletion of the pending review session."""

    def __init__(self, store: ReviewStore, state: ReviewState, pagination: PaginationCoordinator) -> None:
        """Initialize the controller with the store, shared state and pagination coordinator."""
        self.store = store
        self.state = state
        self.pagination = pagination

    def request_discard(self) -> int | None:
        """Show the confirmation step; returns the count to delete, or None when there is nothing pending."""
        self.state.require_open()
        summary = self.state.summary
        if summary is None or summary.total_count == 0 or self.state.discard_phase is not DiscardPhase.IDLE:
            return None
        self.state.discard_phase = DiscardPhase.CONFIRMATION_SHOWN
        return summary.total_count

    def cancel_discard(self) -> None:
        """Close the confirmation step without contacting the server."""
        if self.state.discard_phase is DiscardPhase.CONFIRMATION_SHOWN:
            self.state.discard_phase = DiscardPhase.IDLE

    async def confirm_discard(self) -> bool:
        """Delete all pending candidates and reload the empty review list."""
        if self.state.discard_phase is not DiscardPhase.CONFIRMATION_SHOWN:
            return False
        workspace = self.state.require_open()
        self.state.discard_phase = DiscardPhase.DELETING
        self.state.page_error = None
        logger.info(f"Deleting all pending imports for workspace {workspace.key}")
        try:
            await self.store.delete_all_pending_review(workspace.key)
        except RemoteStoreError as exc:
            self.state.page_error = handle_api_error(exc, "Delete Failed", "Failed to delete pending imports")
            return False
        finally:
            self.state.discard_phase = DiscardPhase.IDLE
        self.state.upload_status = None
        return await self.pagination.reload(FIRST_PAGE)

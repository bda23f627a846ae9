"""ImportReviewController: facade over the import review components.

This module wires the shared ``ReviewState`` to the pagination, selection, upload, commit and discard components
and exposes one method per user action. Every action catches precondition failures and turns them into the
page-level error record, so nothing escapes to the caller as an exception.
"""

from collections.abc import Awaitable, Callable, Iterable
from typing import TypeVar

from import_review.controllers.commit import CommitController
from import_review.controllers.discard import DiscardController
from import_review.controllers.pagination import FIRST_PAGE, PaginationCoordinator
from import_review.controllers.selection import SelectionSynchronizer
from import_review.controllers.state import ReviewState
from import_review.controllers.upload import UploadOrchestrator
from import_review.core.errors import PreconditionError
from import_review.core.models import (
    CompleteReviewResult,
    DuplicateStatus,
    ImportConfirmation,
    UploadStatus,
    Workspace,
)
from import_review.core.settings import Settings, get_settings
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore
from import_review.services.statement_files import StatementFile

logger = get_logger("import-review.controller")

T = TypeVar("T")


class ImportReviewController:
    """User-facing actions of the bank import review workflow."""

    def __init__(
        self,
        store: ReviewStore,
        settings: Settings | None = None,
        workspace: Workspace | None = None,
        on_navigate: Callable[[str], None] | None = None,
    ) -> None:
        """Initialize the controller and its components around one shared state."""
        self.store = store
        self.settings = settings or get_settings()
        self.state = ReviewState(workspace=workspace)
        self.pagination = PaginationCoordinator(store, self.state, self.settings)
        self.selection = SelectionSynchronizer(store, self.state, self.pagination)
        self.uploads = UploadOrchestrator(store, self.state, self.pagination, self.settings)
        self.commit = CommitController(store, self.state, on_navigate)
        self.discard = DiscardController(store, self.state, self.pagination)

    def _surface(self, exc: PreconditionError) -> None:
        logger.info(f"{exc.title}: {exc.detail}")
        self.state.page_error = exc.to_problem()

    async def _guarded(self, action: Awaitable[T], default: T) -> T:
        try:
            return await action
        except PreconditionError as exc:
            self._surface(exc)
            return default

    def _guarded_sync(self, action: Callable[[], T], default: T) -> T:
        try:
            return action()
        except PreconditionError as exc:
            self._surface(exc)
            return default

    @property
    def has_potential_duplicates(self) -> bool:
        """Whether the review session holds potential duplicates to look at."""
        summary = self.state.summary
        if summary is not None:
            return summary.potential_duplicate_count > 0
        page = self.state.page
        return page is not None and any(
            item.duplicate_status is DuplicateStatus.POTENTIAL_DUPLICATE for item in page.items
        )

    async def select_workspace(self, workspace: Workspace | None) -> bool:
        """Switch to another workspace and load its review session.

        Any confirmation step left open on the previous workspace is dropped, and a session closed by a commit
        does not carry over.
        """
        self.state.workspace = workspace
        self.state.reset_session()
        if workspace is None:
            return False
        return await self.open()

    async def open(self) -> bool:
        """Load the first page and the summary of the current workspace."""
        return await self._guarded(self.pagination.reload(FIRST_PAGE), False)

    async def refresh(self) -> bool:
        """Reload the current page and the summary."""
        return await self._guarded(self.pagination.reload(), False)

    async def go_to_page(self, page_number: int) -> bool:
        """Load a specific page of the review list."""
        return await self._guarded(self.pagination.load_page(page_number), False)

    async def next_page(self) -> bool:
        """Load the following page, if any."""
        return await self._guarded(self.pagination.next_page(), False)

    async def previous_page(self) -> bool:
        """Load the preceding page, if any."""
        return await self._guarded(self.pagination.previous_page(), False)

    def choose_files(self, files: Iterable[StatementFile]) -> None:
        """Set the files waiting to be uploaded."""
        self.uploads.choose_files(files)

    async def upload_selected(self) -> UploadStatus | None:
        """Upload the chosen files."""
        return await self._guarded(self.uploads.upload_selected(), None)

    async def upload(self, files: Iterable[StatementFile]) -> UploadStatus | None:
        """Upload the given files."""
        return await self._guarded(self.uploads.upload(files), None)

    def dismiss_upload_status(self) -> None:
        """Hide the upload status pane."""
        self.uploads.dismiss_status()

    async def toggle(self, key: str) -> bool:
        """Flip the selection of one candidate."""
        return await self._guarded(self.selection.toggle(key), False)

    async def select_all(self) -> bool:
        """Select every candidate."""
        return await self._guarded(self.selection.select_all(), False)

    async def deselect_all(self) -> bool:
        """Deselect every candidate."""
        return await self._guarded(self.selection.deselect_all(), False)

    def request_commit(self) -> ImportConfirmation | None:
        """Open the import confirmation step."""
        return self._guarded_sync(self.commit.request_commit, None)

    def cancel_commit(self) -> None:
        """Close the import confirmation step."""
        self.commit.cancel_commit()

    async def confirm_commit(self) -> CompleteReviewResult | None:
        """Commit the selected candidates."""
        return await self._guarded(self.commit.confirm_commit(), None)

    def request_discard(self) -> int | None:
        """Open the delete-all confirmation step."""
        return self._guarded_sync(self.discard.request_discard, None)

    def cancel_discard(self) -> None:
        """Close the delete-all confirmation step."""
        self.discard.cancel_discard()

    async def confirm_discard(self) -> bool:
        """Delete every pending candidate."""
        return await self._guarded(self.discard.confirm_discard(), False)

    def clear_error(self) -> None:
        """Dismiss the page-level error."""
        self.state.page_error = None

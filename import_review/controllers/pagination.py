"""Pagination and summary coordination for the review list.

A page and the workspace-wide summary are fetched independently: the page is scoped to the current view, while
the summary always reflects the whole backlog across every page.
"""

from import_review.controllers.state import ReviewState
from import_review.core.errors import RemoteStoreError, handle_api_error
from import_review.core.settings import Settings
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore

logger = get_logger("import-review.pagination")

FIRST_PAGE = 1
LOAD_ERROR_TITLE = "Load Failed"


class PaginationCoordinator:
    """Loads review pages and the review summary into the shared state."""

    def __init__(self, store: ReviewStore, state: ReviewState, settings: Settings) -> None:
        """Initialize the coordinator with the store, shared state and settings."""
        self.store = store
        self.state = state
        self.settings = settings

    async def load_page(self, page_number: int = FIRST_PAGE, *, clear_error: bool = True) -> bool:
        """Replace the cached page with ``page_number``; return False when the fetch failed.

        With ``clear_error=False`` an error already on display is kept even if this fetch fails too.
        Raises ``NoWorkspaceError`` or ``PermissionDeniedError`` before any request is made.
        """
        workspace = self.state.require_editor()
        if clear_error:
            self.state.page_error = None
        self.state.is_loading = True
        logger.info(f"Loading review page {page_number} for workspace {workspace.key}")
        try:
            page = await self.store.get_pending_review(page_number, self.settings.page_size, workspace.key)
        except RemoteStoreError as exc:
            self._report(exc, "Failed to load pending import transactions", keep_existing=not clear_error)
            return False
        finally:
            self.state.is_loading = False
        page.metadata.page_number = page_number
        self.state.page = page
        logger.info(f"Loaded {len(page.items)} of {page.metadata.total_count} pending transactions")
        return True

    async def load_summary(self, *, keep_error: bool = False) -> bool:
        """Replace the cached summary; return False when the fetch failed."""
        workspace = self.state.require_workspace()
        try:
            summary = await self.store.get_review_summary(workspace.key)
        except RemoteStoreError as exc:
            self._report(exc, "Failed to load import summary", keep_existing=keep_error)
            return False
        self.state.summary = summary
        logger.debug(
            f"Summary: {summary.selected_count}/{summary.total_count} selected, "
            f"{summary.potential_duplicate_count} potential duplicates"
        )
        return True

    async def reload(self, page_number: int | None = None, *, clear_error: bool = True) -> bool:
        """Discard the cache and re-fetch a page (the current one by default) and the summary."""
        if page_number is None:
            page_number = self.state.current_page_number
        self.state.clear_cache()
        page_ok = await self.load_page(page_number, clear_error=clear_error)
        # Either the caller kept its error or load_page just set one; the summary must not replace it.
        summary_ok = await self.load_summary(keep_error=True)
        return page_ok and summary_ok

    def _report(self, exc: RemoteStoreError, detail: str, *, keep_existing: bool) -> None:
        problem = handle_api_error(exc, LOAD_ERROR_TITLE, detail)
        if keep_existing and self.state.page_error is not None:
            logger.warning(f"Reload failed as well, keeping the earlier error: {problem}")
            return
        self.state.page_error = problem

    async def next_page(self) -> bool:
        """Load the following page when there is one."""
        if self.state.page is None or not self.state.page.metadata.has_next_page:
            return False
        return await self.load_page(self.state.current_page_number + 1)

    async def previous_page(self) -> bool:
        """Load the preceding page when there is one."""
        if self.state.page is None or not self.state.page.metadata.has_previous_page:
            return False
        return await self.load_page(self.state.current_page_number - 1)

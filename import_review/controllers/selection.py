"""Selection synchronization between the cached review page and the server.

Selection changes are applied to the cache first so the view reacts immediately, then sent to the server. There
is no fine-grained rollback: when a request fails, the cached page and summary are discarded and reloaded, so the
server's state always wins over any speculative local edit.
"""

from import_review.controllers.pagination import PaginationCoordinator
from import_review.controllers.state import ReviewState
from import_review.core.errors import CandidateNotLoadedError, RemoteStoreError, handle_api_error
from import_review.core.models import SelectionRequest
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore

logger = get_logger("import-review.selection")

SELECTION_ERROR_TITLE = "Selection Failed"
SELECTION_ERROR_DETAIL = "Failed to update transaction selection"


class SelectionSynchronizer:
    """Optimistic single and bulk selection with reload-on-error reconciliation."""

    def __init__(self, store: ReviewStore, state: ReviewState, pagination: PaginationCoordinator) -> None:
        """Initialize the synchronizer with the store, shared state and pagination coordinator."""
        self.store = store
        self.state = state
        self.pagination = pagination

    async def toggle(self, key: str) -> bool:
        """Flip the selection of one loaded candidate; return False when the server rejected it."""
        workspace = self.state.require_open()
        candidate = self.state.page.find(key) if self.state.page else None
        if candidate is None:
            raise CandidateNotLoadedError(key)
        self.state.page_error = None

        new_value = not candidate.is_selected
        candidate.is_selected = new_value
        if self.state.summary is not None:
            self.state.summary.adjust_selected(1 if new_value else -1)
        logger.debug(f"Toggled {key} -> {new_value} (optimistic)")

        try:
            await self.store.set_selection(workspace.key, SelectionRequest(keys=[key], is_selected=new_value))
        except RemoteStoreError as exc:
            await self._reconcile(exc, SELECTION_ERROR_DETAIL)
            return False
        return True

    async def select_all(self) -> bool:
        """Select every candidate in the review session."""
        return await self._set_all(True)

    async def deselect_all(self) -> bool:
        """Deselect every candidate in the review session."""
        return await self._set_all(False)

    async def _set_all(self, is_selected: bool) -> bool:
        workspace = self.state.require_open()
        self.state.page_error = None

        # Only the loaded page can be marked locally; the summary refresh below corrects the rest.
        if self.state.page is not None:
            for item in self.state.page.items:
                item.is_selected = is_selected
        if self.state.summary is not None:
            self.state.summary.selected_count = self.state.summary.total_count if is_selected else 0

        operation = self.store.select_all if is_selected else self.store.deselect_all
        label = "select all" if is_selected else "deselect all"
        logger.info(f"Requesting {label} for workspace {workspace.key}")
        try:
            await operation(workspace.key)
        except RemoteStoreError as exc:
            await self._reconcile(exc, f"Failed to {label} transactions")
            return False
        return await self.pagination.load_summary()

    async def _reconcile(self, exc: RemoteStoreError, detail: str) -> None:
        """Surface the failure and reload the authoritative page and summary."""
        logger.warning(f"Selection update failed, reloading from server: {exc}")
        self.state.page_error = handle_api_error(exc, SELECTION_ERROR_TITLE, detail)
        await self.pagination.reload(clear_error=False)

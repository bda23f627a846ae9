"""Remote review store abstraction.

This module defines the abstract base class for the server-owned review session: the set of pending import
candidates of a workspace together with their persisted selection flags. Controllers only talk to this interface.
"""

from abc import ABC, abstractmethod

from import_review.core.models import (
    CompleteReviewResult,
    ReviewPage,
    ReviewSummary,
    SelectionRequest,
    TransactionRecord,
    UploadResult,
    Workspace,
)
from import_review.services.statement_files import StatementFile


class ReviewStore(ABC):
    """Abstract base class for the remote review store."""

    @abstractmethod
    async def list_workspaces(self) -> list[Workspace]:
        """List the workspaces visible to the current user, with roles."""

    @abstractmethod
    async def upload_file(self, workspace_key: str, file: StatementFile) -> UploadResult:
        """Upload one statement file and stage its rows for review."""

    @abstractmethod
    async def get_pending_review(self, page_number: int, page_size: int, workspace_key: str) -> ReviewPage:
        """Fetch one page of pending candidates."""

    @abstractmethod
    async def get_review_summary(self, workspace_key: str) -> ReviewSummary:
        """Fetch workspace-wide review counts."""

    @abstractmethod
    async def set_selection(self, workspace_key: str, request: SelectionRequest) -> None:
        """Set the selection flag of the given candidates."""

    @abstractmethod
    async def select_all(self, workspace_key: str) -> None:
        """Select every pending candidate."""

    @abstractmethod
    async def deselect_all(self, workspace_key: str) -> None:
        """Deselect every pending candidate."""

    @abstractmethod
    async def complete_review(self, workspace_key: str) -> CompleteReviewResult:
        """Commit the selected candidates and discard the rest."""

    @abstractmethod
    async def delete_all_pending_review(self, workspace_key: str) -> None:
        """Discard every pending candidate without importing."""

    @abstractmethod
    async def list_transactions(self, workspace_key: str) -> list[TransactionRecord]:
        """List committed transactions of the workspace."""

"""Client-side review state: a read-through cache of the server's review session.

The cached page and summary are speculative copies; whenever a mutation fails the controllers throw them away
and reload from the server. The confirmation steps close on failure, so
every error is shown as the single page-level record.
"""

from enum import StrEnum

from pydantic import BaseModel, Field

from import_review.core.errors import NoWorkspaceError, PermissionDeniedError, ReviewClosedError
from import_review.core.models import ProblemDetails, ReviewPage, ReviewSummary, UploadStatus, Workspace
from import_review.services.statement_files import StatementFile


class CommitPhase(StrEnum):
    """States of the commit confirmation flow."""

    IDLE = "idle"
    CONFIRMATION_SHOWN = "confirmation_shown"
    COMMITTING = "committing"
    COMMITTED = "committed"


class DiscardPhase(StrEnum):
    """States of the delete-all confirmation flow."""

    IDLE = "idle"
    CONFIRMATION_SHOWN = "confirmation_shown"
    DELETING = "deleting"


class ReviewState(BaseModel):
    """Mutable state shared by the import review components."""

    workspace: Workspace | None = None
    page: ReviewPage | None = None
    summary: ReviewSummary | None = None
    page_error: ProblemDetails | None = None
    upload_status: UploadStatus | None = None
    selected_files: list[StatementFile] = Field(default_factory=list)
    is_loading: bool = False
    is_uploading: bool = False
    commit_phase: CommitPhase = CommitPhase.IDLE
    discard_phase: DiscardPhase = DiscardPhase.IDLE
    closed: bool = False
    navigated_to: str | None = None

    @property
    def current_page_number(self) -> int:
        """Page number of the loaded page, or 1 when nothing is loaded."""
        return self.page.metadata.page_number if self.page else 1

    def require_workspace(self) -> Workspace:
        """Return the selected workspace or raise ``NoWorkspaceError``."""
        if self.workspace is None:
            raise NoWorkspaceError
        return self.workspace

    def require_editor(self) -> Workspace:
        """Return the selected workspace if the role is Editor or Owner."""
        workspace = self.require_workspace()
        if not workspace.can_edit:
            raise PermissionDeniedError
        return workspace

    def require_open(self) -> Workspace:
        """Return the workspace for a mutation on a still-open review session."""
        if self.closed:
            raise ReviewClosedError
        return self.require_editor()

    def clear_cache(self) -> None:
        """Forget the cached page and summary."""
        self.page = None
        self.summary = None

    def reset_session(self) -> None:
        """Start over on a fresh review session: no cache, no open confirmation, nothing closed."""
        self.clear_cache()
        self.page_error = None
        self.upload_status = None
        self.selected_files = []
        self.commit_phase = CommitPhase.IDLE
        self.discard_phase = DiscardPhase.IDLE
        self.closed = False
        self.navigated_to = None

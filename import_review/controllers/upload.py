"""Upload orchestration: sequential statement upload with a consolidated status report."""

from collections.abc import Iterable

from import_review.controllers.pagination import FIRST_PAGE, PaginationCoordinator
from import_review.controllers.state import ReviewState
from import_review.core.errors import InvalidStatementFileError, RemoteStoreError, handle_api_error
from import_review.core.models import Severity, UploadResult, UploadStatus, UploadStatusLine
from import_review.core.settings import Settings
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore
from import_review.services.statement_files import StatementFile, validate_statement_file

logger = get_logger("import-review.upload")

UPLOAD_ERROR_TITLE = "Upload Failed"


def describe_result(result: UploadResult) -> str:
    """Summarize an upload result as a status line text."""
    text = f"{result.imported_count} transactions added"
    if result.errors:
        text += f", {len(result.errors)} errors detected"
    return text


def severity_for_result(result: UploadResult) -> Severity:
    """Severity contributed by a completed upload."""
    return Severity.WARNING if result.errors else Severity.SUCCESS


class UploadOrchestrator:
    """Uploads statement files one at a time and reports per-file outcomes."""

    def __init__(
        self,
        store: ReviewStore,
        state: ReviewState,
        pagination: PaginationCoordinator,
        settings: Settings,
    ) -> None:
        """Initialize the orchestrator with the store, shared state, pagination coordinator and settings."""
        self.store = store
        self.state = state
        self.pagination = pagination
        self.settings = settings

    def choose_files(self, files: Iterable[StatementFile]) -> None:
        """Replace the list of files waiting to be uploaded."""
        self.state.selected_files = list(files)

    def dismiss_status(self) -> None:
        """Discard the status pane of the last batch."""
        self.state.upload_status = None

    async def upload_selected(self) -> UploadStatus | None:
        """Upload the chosen files, then clear the selection."""
        return await self.upload(self.state.selected_files)

    async def upload(self, files: Iterable[StatementFile]) -> UploadStatus | None:
        """Upload ``files`` in order, then reload the first page and the summary.

        Returns None when ``files`` is empty. Files are never uploaded concurrently, so status lines stay in
        upload order.
        """
        files = list(files)
        if not files:
            return None
        workspace = self.state.require_open()

        status = UploadStatus()
        self.state.upload_status = status
        self.state.page_error = None
        self.state.is_uploading = True
        logger.info(f"Uploading {len(files)} file(s) to workspace {workspace.key}")
        try:
            for file in files:
                await self._upload_one(workspace.key, file, status)
            # Upload errors stay visible through the reload.
            await self.pagination.reload(FIRST_PAGE, clear_error=False)
        finally:
            self.state.is_uploading = False
            self.state.selected_files = []
        logger.info(f"Upload batch finished with severity {status.severity.label}")
        return status

    async def _upload_one(self, workspace_key: str, file: StatementFile, status: UploadStatus) -> None:
        line = UploadStatusLine(file_name=file.name, text=f"Importing {file.name}...", pending=True)
        status.lines.append(line)
        try:
            validate_statement_file(file, self.settings)
            result = await self.store.upload_file(workspace_key, file)
        except (RemoteStoreError, InvalidStatementFileError) as exc:
            problem = handle_api_error(exc, UPLOAD_ERROR_TITLE, f"Failed to import {file.name}")
            self.state.page_error = problem
            line.text = problem.detail or f"Failed to import {file.name}"
            line.severity = Severity.DANGER
            line.pending = False
            status.escalate(Severity.DANGER)
            logger.warning(f"Upload of {file.name} failed: {line.text}")
            return
        line.text = describe_result(result)
        line.severity = severity_for_result(result)
        line.row_errors = [error.message for error in result.errors]
        line.pending = False
        status.escalate(line.severity)
        logger.info(f"{file.name}: {line.text}")

"""Tests for sequential uploads and the consolidated status report."""

from import_review.controllers.review_controller import ImportReviewController
from import_review.core.models import Severity
from import_review.services.statement_files import StatementFile
from tests.review_store_app import FakeReviewStore

HTTP_200_OK = 200
HTTP_500_INTERNAL_SERVER_ERROR = 500


def ofx(name: str) -> StatementFile:
    """Build a small statement file."""
    return StatementFile(name=name, content=b"<OFX></OFX>")


async def test_clean_upload_is_success(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test a clean upload reports success and loads the new candidates."""
    server.register_upload("jan.ofx", [{"payee": "Coffee"}, {"payee": "Rent"}])
    controller.choose_files([ofx("jan.ofx")])
    status = await controller.upload_selected()
    if status.severity is not Severity.SUCCESS or status.messages != ["2 transactions added"]:
        msg = f"Unexpected status {status}"
        raise AssertionError(msg)
    if controller.state.summary.total_count != 2 or controller.state.selected_files:
        msg = "Expected reloaded summary and cleared file selection"
        raise AssertionError(msg)
    if controller.state.is_uploading:
        msg = "Expected the uploading flag to be cleared"
        raise AssertionError(msg)


async def test_row_errors_give_warning(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test parsing errors downgrade the status to warning."""
    server.register_upload("jan.ofx", [{"payee": "Coffee"}], ["Row 3: bad date", "Row 4: bad amount"])
    status = await controller.upload([ofx("jan.ofx")])
    if status.severity is not Severity.WARNING:
        msg = f"Expected WARNING, got {status.severity.label}"
        raise AssertionError(msg)
    if status.messages != ["1 transactions added, 2 errors detected"]:
        msg = f"Unexpected messages {status.messages}"
        raise AssertionError(msg)
    if status.lines[0].row_errors != ["Row 3: bad date", "Row 4: bad amount"]:
        msg = f"Unexpected row errors {status.lines[0].row_errors}"
        raise AssertionError(msg)


async def test_mixed_batch_keeps_order_and_worst_severity(
    controller: ImportReviewController, server: FakeReviewStore
) -> None:
    """Test a failed file escalates the batch to danger while later files still upload."""
    server.register_upload("a.ofx", [{"payee": "A"}])
    server.register_upload("c.qfx", [{"payee": "C"}], ["Row 1: bad"])
    server.fail_next("upload", HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", "Parser crashed")
    server.register_upload("b.ofx", [{"payee": "B"}])

    # The injected failure applies to the first upload request.
    status = await controller.upload([ofx("b.ofx"), ofx("a.ofx"), ofx("c.qfx")])
    if [line.file_name for line in status.lines] != ["b.ofx", "a.ofx", "c.qfx"]:
        msg = f"Unexpected order {status.lines}"
        raise AssertionError(msg)
    if [line.severity for line in status.lines] != [Severity.DANGER, Severity.SUCCESS, Severity.WARNING]:
        msg = f"Unexpected line severities {status.lines}"
        raise AssertionError(msg)
    if status.severity is not Severity.DANGER or any(line.pending for line in status.lines):
        msg = f"Unexpected status {status}"
        raise AssertionError(msg)
    if server.count("upload") != 3:
        msg = "Expected every file to be attempted"
        raise AssertionError(msg)


async def test_upload_error_survives_reload(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test the upload error banner is still shown after the post-upload reload."""
    server.fail_next("upload", HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", "Parser crashed")
    await controller.upload([ofx("jan.ofx")])
    error = controller.state.page_error
    if error is None or error.title != "Server Error" or "Failed to import jan.ofx" not in error.detail:
        msg = f"Unexpected error {error}"
        raise AssertionError(msg)
    if controller.state.page is None:
        msg = "Expected the review list to be reloaded"
        raise AssertionError(msg)


async def test_invalid_file_is_not_sent(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test files failing local checks are reported without a request."""
    status = await controller.upload([ofx("notes.csv")])
    if server.count("upload"):
        msg = "Expected no upload request"
        raise AssertionError(msg)
    if status.severity is not Severity.DANGER or "notes.csv" not in status.lines[0].text:
        msg = f"Unexpected status {status}"
        raise AssertionError(msg)


async def test_empty_batch_does_nothing(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test uploading no files makes no request and keeps no status."""
    if await controller.upload_selected() is not None or server.calls:
        msg = "Expected nothing to happen"
        raise AssertionError(msg)
    if controller.state.upload_status is not None:
        msg = "Expected no status pane"
        raise AssertionError(msg)


async def test_dismiss_status(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test the status pane can be dismissed."""
    server.register_upload("jan.ofx", [{"payee": "Coffee"}])
    await controller.upload([ofx("jan.ofx")])
    controller.dismiss_upload_status()
    if controller.state.upload_status is not None:
        msg = "Expected the status pane to be hidden"
        raise AssertionError(msg)


async def test_upload_error_survives_failed_reload(controller: ImportReviewController, server: FakeReviewStore) -> None:
    """Test the upload error stays shown when the post-upload reload fails as well."""
    server.fail_next("upload", HTTP_500_INTERNAL_SERVER_ERROR, "Server Error", "Parser crashed")
    server.fail_next("review", HTTP_500_INTERNAL_SERVER_ERROR, "Server Error")
    await controller.upload([ofx("jan.ofx")])
    error = controller.state.page_error
    if error is None or "Failed to import jan.ofx" not in error.detail:
        msg = f"Expected the upload error to be kept, got {error}"
        raise AssertionError(msg)


async def test_unreadable_success_body_fails_only_that_file(
    controller: ImportReviewController, server: FakeReviewStore
) -> None:
    """Test a 200 response that is not an upload result marks the file failed and the batch carries on."""
    server.register_upload("a.ofx", [{"payee": "A"}])
    server.register_upload("b.ofx", [{"payee": "B"}])
    server.fail_next("upload", HTTP_200_OK, title=None)

    status = await controller.upload([ofx("a.ofx"), ofx("b.ofx")])
    if [line.severity for line in status.lines] != [Severity.DANGER, Severity.SUCCESS]:
        msg = f"Unexpected line severities {status.lines}"
        raise AssertionError(msg)
    if any(line.pending for line in status.lines) or status.lines[0].text != "Failed to import a.ofx":
        msg = f"Unexpected status lines {status.lines}"
        raise AssertionError(msg)
    if server.count("upload") != 2 or controller.state.summary.total_count != 1:
        msg = f"Expected the second file uploaded and the review reloaded, calls {server.calls}"
        raise AssertionError(msg)
    error = controller.state.page_error
    if error is None or error.title != "Upload Failed" or "upstream exploded" in str(error):
        msg = f"Unexpected error {error}"
        raise AssertionError(msg)

"""Tests for the HTTP review store client against the fake API."""

import httpx
import pytest

from import_review.core.errors import ApiError, ApiResponseError, ApiTransportError
from import_review.core.models import DuplicateStatus, SelectionRequest, Workspace, WorkspaceRole
from import_review.core.settings import Settings
from import_review.services.review_client import ReviewStoreClient
from import_review.services.statement_files import StatementFile
from tests.review_store_app import FakeReviewStore

HTTP_200_OK = 200
HTTP_403_FORBIDDEN = 403
HTTP_409_CONFLICT = 409
HTTP_500_INTERNAL_SERVER_ERROR = 500


async def test_list_workspaces_reads_roles(
    store: ReviewStoreClient, editor_workspace: Workspace, viewer_workspace: Workspace
) -> None:
    """Test workspaces come back with their roles."""
    roles = {workspace.key: workspace.role for workspace in await store.list_workspaces()}
    if roles != {editor_workspace.key: WorkspaceRole.EDITOR, viewer_workspace.key: WorkspaceRole.VIEWER}:
        msg = f"Unexpected roles {roles}"
        raise AssertionError(msg)


async def test_upload_and_review_page(
    store: ReviewStoreClient, server: FakeReviewStore, editor_workspace: Workspace
) -> None:
    """Test an upload result and the resulting review page parse correctly."""
    server.register_upload(
        "jan.ofx",
        [{"payee": "Coffee", "amount": -4.5}, {"payee": "Rent", "amount": -1200, "duplicateStatus": 2}],
        ["Row 7: missing amount"],
    )
    result = await store.upload_file(editor_workspace.key, StatementFile(name="jan.ofx", content=b"<OFX>"))
    if (result.imported_count, result.potential_duplicate_count) != (2, 1):
        msg = f"Unexpected counts {result}"
        raise AssertionError(msg)
    if [error.message for error in result.errors] != ["Row 7: missing amount"]:
        msg = f"Unexpected errors {result.errors}"
        raise AssertionError(msg)

    page = await store.get_pending_review(1, 10, editor_workspace.key)
    statuses = sorted(item.duplicate_status for item in page.items)
    if statuses != [DuplicateStatus.NEW, DuplicateStatus.POTENTIAL_DUPLICATE]:
        msg = f"Unexpected statuses {statuses}"
        raise AssertionError(msg)
    if page.metadata.total_count != 2 or page.metadata.has_next_page:
        msg = f"Unexpected metadata {page.metadata}"
        raise AssertionError(msg)


async def test_selection_endpoints_persist(
    store: ReviewStoreClient, server: FakeReviewStore, editor_workspace: Workspace
) -> None:
    """Test selection changes reach the server and show up in the summary."""
    keys = server.seed(editor_workspace.key, 3, selected_count=0)
    await store.set_selection(editor_workspace.key, SelectionRequest(keys=keys[:2], is_selected=True))
    summary = await store.get_review_summary(editor_workspace.key)
    if summary.selected_count != 2:
        msg = f"Expected 2 selected, got {summary.selected_count}"
        raise AssertionError(msg)
    await store.deselect_all(editor_workspace.key)
    if any(server.selected(editor_workspace.key).values()):
        msg = "Expected nothing selected after deselect all"
        raise AssertionError(msg)


async def test_complete_review_reports_counts(
    store: ReviewStoreClient, server: FakeReviewStore, editor_workspace: Workspace
) -> None:
    """Test completing a review commits the selected candidates."""
    server.seed(editor_workspace.key, 5, selected_count=3)
    result = await store.complete_review(editor_workspace.key)
    if (result.accepted_count, result.rejected_count) != (3, 2):
        msg = f"Unexpected result {result}"
        raise AssertionError(msg)
    if len(await store.list_transactions(editor_workspace.key)) != 3:
        msg = "Expected 3 committed transactions"
        raise AssertionError(msg)


async def test_error_response_carries_problem(
    store: ReviewStoreClient, server: FakeReviewStore, editor_workspace: Workspace
) -> None:
    """Test non-success responses raise ``ApiError`` with the problem payload."""
    server.fail_next("summary", HTTP_409_CONFLICT, "Conflict", "Review changed")
    with pytest.raises(ApiError) as excinfo:
        await store.get_review_summary(editor_workspace.key)
    if excinfo.value.status_code != HTTP_409_CONFLICT or excinfo.value.problem.detail != "Review changed":
        msg = f"Unexpected error {excinfo.value!r}"
        raise AssertionError(msg)


async def test_malformed_error_body(
    store: ReviewStoreClient, server: FakeReviewStore, editor_workspace: Workspace
) -> None:
    """Test a non-JSON error body still raises ``ApiError`` without a problem."""
    server.fail_next("review", HTTP_500_INTERNAL_SERVER_ERROR, title=None)
    with pytest.raises(ApiError) as excinfo:
        await store.get_pending_review(1, 10, editor_workspace.key)
    if excinfo.value.problem is not None:
        msg = f"Expected no problem payload, got {excinfo.value.problem}"
        raise AssertionError(msg)


async def test_viewer_is_forbidden(store: ReviewStoreClient, viewer_workspace: Workspace) -> None:
    """Test the server refuses review access to viewers."""
    with pytest.raises(ApiError) as excinfo:
        await store.get_pending_review(1, 10, viewer_workspace.key)
    if excinfo.value.status_code != HTTP_403_FORBIDDEN:
        msg = f"Expected 403, got {excinfo.value.status_code}"
        raise AssertionError(msg)


async def test_transport_failure(settings: Settings) -> None:
    """Test connection failures raise ``ApiTransportError``."""

    def refuse(request: httpx.Request) -> httpx.Response:
        msg = "connection refused"
        raise httpx.ConnectError(msg, request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(refuse), base_url=settings.api_base_url) as http:
        client = ReviewStoreClient(settings, http_client=http)
        with pytest.raises(ApiTransportError):
            await client.list_workspaces()


async def test_token_sent_as_bearer(settings: Settings) -> None:
    """Test the configured API token is sent on every request."""
    seen: list[str | None] = []

    def record(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers.get("Authorization"))
        return httpx.Response(200, json=[])

    settings.api_token = "abc"  # noqa: S105
    client = ReviewStoreClient(settings)
    await client.http.aclose()
    client.http = httpx.AsyncClient(
        transport=httpx.MockTransport(record), base_url=settings.api_base_url, headers=client.http.headers
    )
    async with client:
        await client.list_workspaces()
    if seen != ["Bearer abc"]:
        msg = f"Unexpected Authorization headers {seen}"
        raise AssertionError(msg)


async def test_unreadable_success_body(
    store: ReviewStoreClient, server: FakeReviewStore, editor_workspace: Workspace
) -> None:
    """Test a success status with a non-JSON body raises ``ApiResponseError``."""
    server.fail_next("summary", HTTP_200_OK, title=None)
    with pytest.raises(ApiResponseError) as excinfo:
        await store.get_review_summary(editor_workspace.key)
    if excinfo.value.status_code != HTTP_200_OK:
        msg = f"Unexpected status {excinfo.value.status_code}"
        raise AssertionError(msg)


async def test_unexpected_success_payload(settings: Settings) -> None:
    """Test well-formed JSON of the wrong shape raises ``ApiResponseError``."""

    def wrong_shape(request: httpx.Request) -> httpx.Response:
        return httpx.Response(HTTP_200_OK, json={"items": "not a list"}, request=request)

    async with httpx.AsyncClient(transport=httpx.MockTransport(wrong_shape), base_url=settings.api_base_url) as http:
        client = ReviewStoreClient(settings, http_client=http)
        with pytest.raises(ApiResponseError):
            await client.get_pending_review(1, 10, "w")

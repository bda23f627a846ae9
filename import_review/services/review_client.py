"""ReviewStoreClient: HTTP implementation of the remote review store.

This module talks to the workspace-scoped import endpoints of the finance API over ``httpx``. Every non-success
response is raised as ``ApiError`` carrying the problem-details payload when the server sent one, and every
transport failure is raised as ``ApiTransportError``. A success response whose body is not the expected payload is
raised as ``ApiResponseError``.
"""

from types import TracebackType
from typing import Any, TypeVar

import httpx
from pydantic import TypeAdapter, ValidationError

from import_review.core.errors import ApiError, ApiResponseError, ApiTransportError
from import_review.core.models import (
    CompleteReviewResult,
    ProblemDetails,
    ReviewPage,
    ReviewSummary,
    SelectionRequest,
    TransactionRecord,
    UploadResult,
    Workspace,
)
from import_review.core.settings import Settings
from import_review.core.utils import get_logger
from import_review.services.base import ReviewStore
from import_review.services.statement_files import StatementFile

logger = get_logger("import-review.client")

T = TypeVar("T")

WORKSPACES_ADAPTER = TypeAdapter(list[Workspace])
TRANSACTIONS_ADAPTER = TypeAdapter(list[TransactionRecord])
UPLOAD_ADAPTER = TypeAdapter(UploadResult)
PAGE_ADAPTER = TypeAdapter(ReviewPage)
SUMMARY_ADAPTER = TypeAdapter(ReviewSummary)
COMPLETE_ADAPTER = TypeAdapter(CompleteReviewResult)


def parse_problem(response: httpx.Response) -> ProblemDetails | None:
    """Parse a problem-details body, returning None when absent or malformed."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    try:
        return ProblemDetails.model_validate(body)
    except ValidationError:
        return None


class ReviewStoreClient(ReviewStore):
    """Review store backed by the REST API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        """Initialize the client from settings, or around an existing ``httpx.AsyncClient``."""
        self.settings = settings
        self._owns_client = http_client is None
        if http_client is None:
            headers = {"Accept": "application/json"}
            if settings.api_token:
                headers["Authorization"] = f"Bearer {settings.api_token}"
            http_client = httpx.AsyncClient(
                base_url=settings.api_base_url,
                headers=headers,
                timeout=settings.request_timeout,
            )
        self.http = http_client

    async def __aenter__(self) -> "ReviewStoreClient":
        """Enter the async context."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the underlying HTTP client if this instance created it."""
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self.http.aclose()

    @staticmethod
    def _import_path(workspace_key: str, suffix: str = "") -> str:
        return f"/api/tenant/{workspace_key}/import{suffix}"

    async def _request(self, operation: str, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, mapping failures onto the client error taxonomy."""
        logger.debug(f"{operation}: {method} {url}")
        try:
            response = await self.http.request(method, url, **kwargs)
        except httpx.TransportError as exc:
            logger.warning(f"{operation}: transport failure {exc!r}")
            raise ApiTransportError(operation, exc) from exc
        if response.is_error:
            problem = parse_problem(response)
            logger.warning(f"{operation}: HTTP {response.status_code} {problem.title if problem else ''}".rstrip())
            raise ApiError(response.status_code, problem, operation)
        logger.debug(f"{operation}: HTTP {response.status_code}")
        return response

    @staticmethod
    def _parse(operation: str, response: httpx.Response, adapter: TypeAdapter[T]) -> T:
        """Validate a success body, raising ``ApiResponseError`` when it is not the expected payload."""
        try:
            return adapter.validate_json(response.content)
        except ValidationError as exc:
            logger.warning(f"{operation}: unreadable response body ({exc.error_count()} errors)")
            raise ApiResponseError(operation, response.status_code) from exc

    async def list_workspaces(self) -> list[Workspace]:
        """List the workspaces visible to the current user, with roles."""
        response = await self._request("list_workspaces", "GET", "/api/tenant")
        return self._parse("list_workspaces", response, WORKSPACES_ADAPTER)

    async def upload_file(self, workspace_key: str, file: StatementFile) -> UploadResult:
        """Upload one statement file and stage its rows for review."""
        logger.info(f"Uploading {file.name} ({file.size} bytes) to workspace {workspace_key}")
        response = await self._request(
            "upload_file",
            "POST",
            self._import_path(workspace_key, "/upload"),
            files={"file": (file.name, file.content, file.content_type)},
        )
        result = self._parse("upload_file", response, UPLOAD_ADAPTER)
        logger.info(f"Uploaded {file.name}: {result.imported_count} imported, {len(result.errors)} errors")
        return result

    async def get_pending_review(self, page_number: int, page_size: int, workspace_key: str) -> ReviewPage:
        """Fetch one page of pending candidates."""
        response = await self._request(
            "get_pending_review",
            "GET",
            self._import_path(workspace_key, "/review"),
            params={"pageNumber": page_number, "pageSize": page_size},
        )
        return self._parse("get_pending_review", response, PAGE_ADAPTER)

    async def get_review_summary(self, workspace_key: str) -> ReviewSummary:
        """Fetch workspace-wide review counts."""
        response = await self._request("get_review_summary", "GET", self._import_path(workspace_key, "/review/summary"))
        return self._parse("get_review_summary", response, SUMMARY_ADAPTER)

    async def set_selection(self, workspace_key: str, request: SelectionRequest) -> None:
        """Set the selection flag of the given candidates."""
        await self._request(
            "set_selection",
            "POST",
            self._import_path(workspace_key, "/review/set-selection"),
            json=request.to_wire(),
        )

    async def select_all(self, workspace_key: str) -> None:
        """Select every pending candidate."""
        await self._request("select_all", "POST", self._import_path(workspace_key, "/review/select-all"))

    async def deselect_all(self, workspace_key: str) -> None:
        """Deselect every pending candidate."""
        await self._request("deselect_all", "POST", self._import_path(workspace_key, "/review/deselect-all"))

    async def complete_review(self, workspace_key: str) -> CompleteReviewResult:
        """Commit the selected candidates and discard the rest."""
        response = await self._request("complete_review", "POST", self._import_path(workspace_key, "/review/complete"))
        result = self._parse("complete_review", response, COMPLETE_ADAPTER)
        logger.info(f"Review completed: {result.accepted_count} accepted, {result.rejected_count} rejected")
        return result

    async def delete_all_pending_review(self, workspace_key: str) -> None:
        """Discard every pending candidate without importing."""
        await self._request("delete_all_pending_review", "DELETE", self._import_path(workspace_key, "/review"))

    async def list_transactions(self, workspace_key: str) -> list[TransactionRecord]:
        """List committed transactions of the workspace."""
        response = await self._request("list_transactions", "GET", f"/api/tenant/{workspace_key}/transactions")
        return self._parse("list_transactions", response, TRANSACTIONS_ADAPTER)

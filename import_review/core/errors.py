"""Error taxonomy for the import review client and conversion to displayed error records.

Failures reaching the controllers are either precondition errors detected locally (never sent to the server) or
``RemoteStoreError``: ``ApiError`` for requests the server rejected, ``ApiTransportError`` when no response arrived,
and ``ApiResponseError`` when a success response could not be read.
``handle_api_error`` turns any of them into the single ``ProblemDetails`` record shown to the user.
"""

from import_review.core.models import ProblemDetails
from import_review.core.utils import get_logger

logger = get_logger("import-review.errors")

UNEXPECTED_ERROR_TITLE = "Unexpected Error"
UNEXPECTED_ERROR_DETAIL = "An unexpected error occurred while performing the operation"
GENERIC_STATUS_MESSAGE = "An error occurred while processing your request."

FRIENDLY_STATUS_MESSAGES = {
    400: "Please check the information you provided and try again.",
    401: "You need to be logged in to access this resource.",
    403: "You do not have permission to access this resource.",
    404: "The requested resource could not be found.",
    409: "This operation conflicts with the current state of the resource.",
    500: "An internal server error occurred. Please try again later.",
    502: "The server received an invalid response from an upstream server.",
    503: "The service is temporarily unavailable. Please try again later.",
}


class ImportReviewError(Exception):
    """Base class for every error raised by the import review client."""

    title = "Import Review Error"

    def __init__(self, detail: str) -> None:
        """Initialize the error with a user-facing detail message."""
        super().__init__(detail)
        self.detail = detail

    def to_problem(self) -> ProblemDetails:
        """Render the error as a displayable problem record."""
        return ProblemDetails(title=self.title, detail=self.detail)


class PreconditionError(ImportReviewError):
    """A local check failed; no request was sent."""

    title = "Action Not Available"


class NoWorkspaceError(PreconditionError):
    """No workspace is selected."""

    title = "No Workspace Selected"

    def __init__(self, detail: str = "Please select a workspace to import transactions.") -> None:
        """Initialize with the default no-workspace message."""
        super().__init__(detail)


class PermissionDeniedError(PreconditionError):
    """The current role is below Editor."""

    title = "Permission Denied"

    def __init__(self, detail: str = "You need Editor or Owner permission to import transactions.") -> None:
        """Initialize with the default permission message."""
        super().__init__(detail)


class ReviewClosedError(PreconditionError):
    """The review session was already committed."""

    title = "Review Completed"

    def __init__(self, detail: str = "This import review has already been completed.") -> None:
        """Initialize with the default closed-session message."""
        super().__init__(detail)


class CandidateNotLoadedError(PreconditionError):
    """The candidate key is not part of the loaded page."""

    title = "Transaction Not Found"

    def __init__(self, key: str) -> None:
        """Initialize with the missing candidate key."""
        super().__init__(f"Transaction {key} is not on the current page.")
        self.key = key


class InvalidStatementFileError(PreconditionError):
    """A statement file failed the local extension, size or emptiness checks."""

    title = "Invalid File"


class RemoteStoreError(ImportReviewError):
    """A request to the remote review store did not produce a usable result."""

    title = "Request Failed"


class ApiError(RemoteStoreError):
    """The server rejected a request with a non-success status."""

    title = "Request Failed"

    def __init__(self, status_code: int, problem: ProblemDetails | None = None, operation: str = "") -> None:
        """Initialize with the HTTP status and the parsed problem payload, if any."""
        detail = (problem.detail if problem else None) or f"HTTP {status_code}"
        super().__init__(f"{operation} failed: {detail}" if operation else detail)
        self.status_code = status_code
        self.problem = problem
        self.operation = operation


class ApiTransportError(RemoteStoreError):
    """The request never produced an HTTP response."""

    title = "Connection Failed"

    def __init__(self, operation: str, cause: Exception) -> None:
        """Initialize with the failed operation and the underlying transport error."""
        super().__init__(f"{operation} failed: {cause.__class__.__name__}")
        self.operation = operation
        self.cause = cause


class ApiResponseError(RemoteStoreError):
    """The server answered with a success status but a body that is not the expected payload."""

    title = "Unexpected Response"

    def __init__(self, operation: str, status_code: int) -> None:
        """Initialize with the failed operation and the HTTP status of the unreadable response."""
        super().__init__(f"{operation} failed: unreadable response (HTTP {status_code})")
        self.operation = operation
        self.status_code = status_code


def friendly_message_for_status(status: int | None) -> str | None:
    """Return a user-friendly message for an HTTP status code."""
    if not status:
        return None
    return FRIENDLY_STATUS_MESSAGES.get(status, GENERIC_STATUS_MESSAGE)


def combine_details(fallback_detail: str | None, api_detail: str | None, status: int | None) -> str:
    """Combine a context message with the server detail or a friendly status message."""
    if api_detail:
        return f"{fallback_detail}. {api_detail}" if fallback_detail else api_detail
    friendly = friendly_message_for_status(status)
    if fallback_detail and friendly:
        return f"{fallback_detail}. {friendly}"
    return fallback_detail or friendly or UNEXPECTED_ERROR_DETAIL


def handle_api_error(
    err: BaseException,
    fallback_title: str = UNEXPECTED_ERROR_TITLE,
    fallback_detail: str | None = None,
) -> ProblemDetails:
    """Convert any error caught around a remote call into a displayable problem record."""
    if isinstance(err, ApiError):
        logger.warning(f"API error ({err.status_code}): {err}")
        problem = err.problem or ProblemDetails()
        data = problem.model_dump(exclude_none=True)
        data["title"] = problem.title or fallback_title
        data["detail"] = combine_details(fallback_detail, problem.detail, problem.status or err.status_code)
        data["status"] = problem.status or err.status_code
        return ProblemDetails(**data)
    if isinstance(err, PreconditionError):
        logger.info(f"Precondition failed: {err.detail}")
        return err.to_problem()
    logger.error(f"Unexpected error: {err!r}")
    return ProblemDetails(title=fallback_title, detail=fallback_detail or UNEXPECTED_ERROR_DETAIL)

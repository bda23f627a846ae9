"""Core package: provides models, error taxonomy, settings, and shared utilities."""

from .errors import ApiError, ImportReviewError, PreconditionError, RemoteStoreError, handle_api_error  # noqa: F401
from .models import ImportCandidateTransaction, ReviewPage, ReviewSummary, Severity  # noqa: F401
from .settings import Settings  # noqa: F401
from .utils import get_logger  # noqa: F401

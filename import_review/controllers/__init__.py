"""Controllers package: review state and the components that keep it in sync with the remote review store."""

from .commit import CommitController  # noqa: F401
from .discard import DiscardController  # noqa: F401
from .pagination import PaginationCoordinator  # noqa: F401
from .review_controller import ImportReviewController  # noqa: F401
from .selection import SelectionSynchronizer  # noqa: F401
from .state import CommitPhase, DiscardPhase, ReviewState  # noqa: F401
from .upload import UploadOrchestrator  # noqa: F401

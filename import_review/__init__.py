"""Import review client: upload bank statements, review candidates, and commit them to a workspace."""

from .controllers.review_controller import ImportReviewController  # noqa: F401
from .services.review_client import ReviewStoreClient  # noqa: F401

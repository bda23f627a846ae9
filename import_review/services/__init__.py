"""Services package: provides the remote review store interface, its HTTP client, and statement file helpers."""

from .base import ReviewStore  # noqa: F401
from .review_client import ReviewStoreClient  # noqa: F401
from .statement_files import StatementFile, validate_statement_file  # noqa: F401

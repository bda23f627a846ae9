"""Pydantic models for the import review workflow.

This module defines the wire models exchanged with the remote review store (candidate transactions, review pages,
summaries, upload results, workspaces) and the client-side records the controllers keep: upload status lines, the
severity lattice used to aggregate them, and the confirmation statistics shown before a commit.
"""

import datetime as dt
from decimal import Decimal
from enum import IntEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Base model for payloads using camelCase names on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Serialize the model to a JSON-compatible dict with wire names."""
        return self.model_dump(mode="json", by_alias=True)


class DuplicateStatus(IntEnum):
    """Classification of a candidate against existing and pending transactions."""

    NEW = 0
    EXACT_DUPLICATE = 1
    POTENTIAL_DUPLICATE = 2


class WorkspaceRole(IntEnum):
    """Role of the current user within a workspace."""

    VIEWER = 1
    EDITOR = 2
    OWNER = 3


class Workspace(WireModel):
    """A workspace (tenant) together with the current user's role in it."""

    key: str
    name: str
    description: str = ""
    role: WorkspaceRole
    created_at: dt.datetime | None = None

    @property
    def can_edit(self) -> bool:
        """Whether the role allows changing import review state."""
        return self.role >= WorkspaceRole.EDITOR


class ImportCandidateTransaction(WireModel):
    """A parsed bank-statement row awaiting import confirmation."""

    key: str
    date: dt.date
    payee: str
    category: str = ""
    amount: Decimal
    duplicate_status: DuplicateStatus = DuplicateStatus.NEW
    duplicate_of_key: str | None = None
    is_selected: bool = False


class PaginationMetadata(WireModel):
    """Pagination metadata for one page of a larger collection."""

    page_number: int = 1
    page_size: int = 50
    total_count: int = 0
    total_pages: int = 0
    has_previous_page: bool = False
    has_next_page: bool = False
    first_item: int = 0
    last_item: int = 0


class ReviewPage(WireModel):
    """A snapshot of one page of pending import candidates."""

    items: list[ImportCandidateTransaction] = Field(default_factory=list)
    metadata: PaginationMetadata = Field(default_factory=PaginationMetadata)

    def find(self, key: str) -> ImportCandidateTransaction | None:
        """Return the candidate with the given key, if it is on this page."""
        return next((item for item in self.items if item.key == key), None)


class ReviewSummary(WireModel):
    """Workspace-wide counts across every page of the review session."""

    total_count: int = 0
    selected_count: int = 0
    new_count: int = 0
    exact_duplicate_count: int = 0
    potential_duplicate_count: int = 0

    def adjust_selected(self, delta: int) -> None:
        """Shift the selected count, keeping it within ``0..total_count``."""
        self.selected_count = min(max(self.selected_count + delta, 0), self.total_count)


class ParsingError(WireModel):
    """Row-level or structural error reported while parsing an uploaded file."""

    message: str
    code: str | None = None


class UploadResult(WireModel):
    """Outcome of uploading one statement file."""

    imported_count: int = 0
    new_count: int = 0
    exact_duplicate_count: int = 0
    potential_duplicate_count: int = 0
    errors: list[ParsingError] = Field(default_factory=list)


class SelectionRequest(WireModel):
    """Command setting the selection flag of a set of candidates."""

    keys: list[str]
    is_selected: bool


class CompleteReviewResult(WireModel):
    """Counts reported by the server after committing a review session."""

    accepted_count: int = 0
    rejected_count: int = 0


class TransactionRecord(WireModel):
    """A committed transaction as listed on the transactions view."""

    key: str
    date: dt.date
    amount: Decimal
    payee: str
    memo: str | None = None
    category: str = ""


class ProblemDetails(BaseModel):
    """Structured error payload, also used as the displayed error record."""

    model_config = ConfigDict(extra="allow")

    type: str | None = None
    title: str | None = None
    status: int | None = None
    detail: str | None = None
    instance: str | None = None

    def __str__(self) -> str:
        """Render as ``title: detail``."""
        if self.title and self.detail:
            return f"{self.title}: {self.detail}"
        return self.title or self.detail or ""


class Severity(IntEnum):
    """Aggregate upload severity, ordered info < success < warning < danger."""

    INFO = 0
    SUCCESS = 1
    WARNING = 2
    DANGER = 3

    @property
    def label(self) -> str:
        """Lower-case name as shown in the status pane."""
        return self.name.lower()


def combine_severity(*levels: Severity) -> Severity:
    """Return the most severe of the given levels (``INFO`` when none)."""
    return max(levels, default=Severity.INFO)


class UploadStatusLine(BaseModel):
    """One per-file line in the upload status pane."""

    file_name: str
    text: str
    severity: Severity = Severity.INFO
    pending: bool = False
    row_errors: list[str] = Field(default_factory=list)

    def __str__(self) -> str:
        """Render as ``file: text``."""
        return f"{self.file_name}: {self.text}"


class UploadStatus(BaseModel):
    """Ordered per-file status lines plus the aggregate severity of a batch."""

    lines: list[UploadStatusLine] = Field(default_factory=list)
    severity: Severity = Severity.INFO

    def escalate(self, level: Severity) -> None:
        """Raise the aggregate severity; it never goes down."""
        self.severity = combine_severity(self.severity, level)

    @property
    def messages(self) -> list[str]:
        """Line texts in upload order."""
        return [line.text for line in self.lines]


class ImportConfirmation(BaseModel):
    """Statistics shown in the confirmation step before committing."""

    selected_count: int
    discarded_count: int
    potential_duplicate_count: int

    @classmethod
    def from_summary(cls, summary: ReviewSummary) -> "ImportConfirmation":
        """Build the confirmation statistics from a review summary."""
        return cls(
            selected_count=summary.selected_count,
            discarded_count=max(summary.total_count - summary.selected_count, 0),
            potential_duplicate_count=summary.potential_duplicate_count,
        )

"""Bank statement file handling: loading from disk and local pre-upload checks."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict

from import_review.core.errors import InvalidStatementFileError
from import_review.core.settings import Settings

BYTES_PER_MB = 1024 * 1024


class StatementFile(BaseModel):
    """An OFX/QFX statement chosen for upload."""

    model_config = ConfigDict(frozen=True)

    name: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> "StatementFile":
        """Read a statement file from disk."""
        path = Path(path)
        return cls(name=path.name, content=path.read_bytes())

    @property
    def extension(self) -> str:
        """Lower-cased file extension including the dot."""
        return Path(self.name).suffix.lower()

    @property
    def size(self) -> int:
        """Size of the file in bytes."""
        return len(self.content)


def validate_statement_file(file: StatementFile, settings: Settings) -> None:
    """Reject files the server would refuse, without a network round-trip."""
    allowed = [ext.lower() for ext in settings.allowed_extensions]
    if file.extension not in allowed:
        msg = f"{file.name}: only {', '.join(allowed)} files are allowed."
        raise InvalidStatementFileError(msg)
    if file.size == 0:
        msg = f"{file.name}: file is empty."
        raise InvalidStatementFileError(msg)
    if file.size > settings.max_upload_bytes:
        msg = f"{file.name}: file size must not exceed {settings.max_upload_bytes // BYTES_PER_MB} MB."
        raise InvalidStatementFileError(msg)

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar


@dataclass(frozen=True)
class CodeBatcherError(Exception):
    """Base exception for errors in the code_batcher package."""

    category: ClassVar[str] = "code_batcher_error"
    message: str = "Unexpected code_batcher error."

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Serialize the error for machine consumption.

        Returns:
            dict[str, Any]: the stable ``category``, the ``message`` and any extra fields.
        """
        return {"category": self.category, **asdict(self)}


@dataclass(frozen=True)
class InputError(CodeBatcherError):
    """Raised when a request is missing data or carries invalid values."""

    category: ClassVar[str] = "input_error"
    message: str = "Invalid input."


@dataclass(frozen=True)
class ScanError(CodeBatcherError):
    """Raised when a directory cannot be listed during a scan."""

    category: ClassVar[str] = "scan_error"
    message: str = "Failed to scan project directory."
    path: str = ""


@dataclass(frozen=True)
class FileReadError(CodeBatcherError):
    """Raised when a selected file cannot be read as UTF-8 text."""

    category: ClassVar[str] = "file_read_error"
    message: str = "Error reading file."
    path: str = ""


@dataclass(frozen=True)
class ArchiveError(CodeBatcherError):
    """Raised when writing the batch archive fails."""

    category: ClassVar[str] = "archive_error"
    message: str = "Failed to generate batch ZIP."
    destination: str = ""

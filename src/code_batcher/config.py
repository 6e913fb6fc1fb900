from __future__ import annotations

from enum import StrEnum, auto
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class NodeType(StrEnum):
    """Kind of an entry in a scan or selection tree."""

    FILE = auto()
    FOLDER = auto()


EXCLUDED_FILES: frozenset[str] = frozenset(
    {
        ".gitignore",
        ".prettierrc",
        ".prettierrc.json",
        ".prettierrc.js",
        ".eslintrc",
        ".eslintrc.json",
        ".editorconfig",
        ".npmrc",
        ".env",
        ".env.example",
        "package-lock.json",
        "yarn.lock",
        "pnpm-lock.yaml",
        "tsconfig.build.json",
        "eslint.config.js",
    },
)

HIDDEN_PREFIX = "."
GITIGNORE_FILENAME = ".gitignore"

DEFAULT_LINES_PER_BATCH = 3000

EMPTY_FILE_PLACEHOLDER = "Empty File/No content"
READ_ERROR_PLACEHOLDER = "Error reading file"
END_OF_FILE_MARKER = "----------- End of File -----------"

TEXT_DOWNLOAD_NAME = "code-batcher.txt"
BATCHES_ZIP_NAME = "code-batcher-batches.zip"
AGGREGATE_ZIP_NAME = "code-batcher-aggregate.zip"
BATCH_ENTRY_PREFIX = "code-batcher-part-"
AGGREGATE_ENTRY_PREFIX = "batch-"
ZIP_COMPRESSLEVEL = 9


class Node(BaseModel):
    """One file or folder of a scan tree, or of a caller-annotated selection tree.

    Attributes:
        name: Base name of the entry.
        path: Filesystem path, reused as-is to read the file later.
        type: Whether the entry is a file or a folder.
        children: Ordered children, only for folders.
        selected: Selection flag set by the caller before batching.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(..., min_length=1, description="Entry base name")
    path: str = Field(..., min_length=1, description="Filesystem path of the entry")
    type: NodeType = Field(..., description="file or folder")
    children: list[Node] | None = Field(default=None, description="Children of a folder")
    selected: bool = Field(default=False, description="Selection flag")

    @model_validator(mode="after")
    def _files_have_no_children(self) -> Node:
        if self.type is NodeType.FILE and self.children:
            msg = f"file node {self.path!r} cannot have children"
            raise ValueError(msg)
        return self

    @property
    def is_file(self) -> bool:
        return self.type is NodeType.FILE

    @property
    def is_folder(self) -> bool:
        return self.type is NodeType.FOLDER


class ScanOptions(BaseModel):
    """Inputs of a directory scan."""

    model_config = ConfigDict(frozen=True)

    root_path: Path = Field(..., description="Directory to scan")
    exclude_names: frozenset[str] = Field(
        default=EXCLUDED_FILES,
        description="Entry names always skipped, independent of .gitignore",
    )


class Batch(BaseModel):
    """A contiguous slice of the combined document, by line count."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    batch_number: int = Field(..., ge=1, description="1-based batch number")
    line_count: int = Field(..., ge=0, description="Number of lines in this batch")
    content: str = Field(..., description="Lines joined with a newline")


class BatchSummary(BaseModel):
    """JSON answer of a batch request."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    total_files: int = Field(..., ge=0)
    total_batches: int = Field(..., ge=0)
    batches: list[Batch] = Field(default_factory=list)

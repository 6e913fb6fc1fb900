"""Request-level operations: validate inputs, then run scan, combine, split and archive.

Each function is stateless: the filesystem is read at call time and nothing
is kept between calls.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from code_batcher.archive import write_batches_zip
from code_batcher.config import (
    AGGREGATE_ENTRY_PREFIX,
    BATCH_ENTRY_PREFIX,
    DEFAULT_LINES_PER_BATCH,
    EXCLUDED_FILES,
    BatchSummary,
    Node,
)
from code_batcher.exceptions import InputError
from code_batcher.file_manipulation import count_nodes, scan_project
from code_batcher.logging import logger
from code_batcher.output_construction import combine_files_content, iter_batches, split_content_into_batches
from code_batcher.selection import collect_selected_files, select_all

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_NODE_LIST = TypeAdapter(list[Node])
SELECTION_KEYS = ("selectedTree", "tree")


def format_validation_error(err: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(p) for p in e['loc'])} - {e['msg']}" for e in err.errors())


def validate_project_path(project_path: str | Path | None) -> Path:
    """Check that the project path is given and is an existing directory.

    Raises:
        InputError: if the path is missing, blank or not a directory

    Returns:
        Path: the project path
    """
    if project_path is None or not str(project_path).strip():
        raise InputError(message="projectPath is required")
    path = Path(project_path)
    if not path.is_dir():
        raise InputError(message=f"projectPath is not a directory: {project_path}")
    return path


def resolve_lines_per_batch(value: int | None) -> int:
    """Turn the optional batch size of a request into a usable one.

    Args:
        value (int | None): the requested number of lines per batch

    Raises:
        InputError: if a value is given but is not a positive integer

    Returns:
        int: ``value``, or the default when it was omitted
    """
    if value is None:
        return DEFAULT_LINES_PER_BATCH
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InputError(message=f"linesPerBatch must be a positive integer, got {value!r}")
    return value


def parse_selection_tree(data: Any) -> list[Node]:  # noqa: ANN401
    """Validate a selection tree received as plain data.

    Args:
        data: a list of nodes, or a mapping holding it under ``selectedTree`` or ``tree``

    Raises:
        InputError: if the tree is missing, empty or malformed

    Returns:
        list[Node]: the validated tree
    """
    if isinstance(data, dict):
        data = next((data[k] for k in SELECTION_KEYS if k in data), None)
    if not isinstance(data, list):
        raise InputError(message="selectedTree must be a list of nodes")
    if not data:
        raise InputError(message="selectedTree cannot be empty")
    try:
        return _NODE_LIST.validate_python(data)
    except ValidationError as e:
        raise InputError(message=f"selectedTree is malformed: {format_validation_error(e)}") from e


def load_selection_file(path: str | Path) -> list[Node]:
    """Read and validate a JSON selection tree file.

    Raises:
        InputError: if the file cannot be read or does not hold a valid tree

    Returns:
        list[Node]: the validated tree
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except OSError as e:
        raise InputError(message=f"Cannot read selection file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InputError(message=f"Selection file {path} is not valid JSON: {e}") from e
    return parse_selection_tree(data)


def scan_project_tree(project_path: str | Path | None, exclude_names: Iterable[str] | None = None) -> list[Node]:
    root = validate_project_path(project_path)
    names = EXCLUDED_FILES | frozenset(exclude_names or ())
    logger.info("scan_started", project_path=str(root))
    tree = scan_project(root, names)
    files, folders = count_nodes(tree)
    logger.info("scan_complete", project_path=str(root), top_level=len(tree), files=files, folders=folders)
    return tree


def _combined_selection(selected_tree: Sequence[Node], project_path: str | Path | None) -> tuple[list[Node], str]:
    root = validate_project_path(project_path)
    if not selected_tree:
        raise InputError(message="selectedTree cannot be empty")
    files = collect_selected_files(selected_tree)
    return files, combine_files_content(files, root)


def batch_files(
    selected_tree: Sequence[Node],
    project_path: str | Path | None,
    lines_per_batch: int | None = None,
) -> BatchSummary:
    """Combine the selected files and split them into batches.

    Returns:
        BatchSummary: file and batch counts plus the batches themselves
    """
    size = resolve_lines_per_batch(lines_per_batch)
    logger.info("batch_started", project_path=str(project_path), lines_per_batch=size)
    files, combined = _combined_selection(selected_tree, project_path)
    batches = split_content_into_batches(combined, size)
    logger.info("batch_complete", files=len(files), batches=len(batches))
    return BatchSummary(total_files=len(files), total_batches=len(batches), batches=batches)


def download_batch(selected_tree: Sequence[Node], project_path: str | Path | None) -> str:
    """Build the single combined document for the selected files."""
    logger.info("download_started", project_path=str(project_path))
    files, combined = _combined_selection(selected_tree, project_path)
    logger.info("download_prepared", files=len(files))
    return combined


def download_batches(
    selected_tree: Sequence[Node],
    project_path: str | Path | None,
    destination: str | Path,
    lines_per_batch: int | None = None,
) -> int:
    """Write the batches of the selected files as a zip archive.

    Returns:
        int: the number of batches written
    """
    size = resolve_lines_per_batch(lines_per_batch)
    logger.info("zip_started", project_path=str(project_path), lines_per_batch=size)
    files, combined = _combined_selection(selected_tree, project_path)
    count = write_batches_zip(iter_batches(combined, size), destination, entry_prefix=BATCH_ENTRY_PREFIX)
    logger.info("zip_complete", files=len(files), batches=count)
    return count


def aggregate_project(
    project_path: str | Path | None,
    destination: str | Path,
    lines_per_batch: int | None = None,
    exclude_names: Iterable[str] | None = None,
) -> int:
    """Scan the whole project, select everything and write the batches as a zip.

    Returns:
        int: the number of batches written
    """
    size = resolve_lines_per_batch(lines_per_batch)
    tree = select_all(scan_project_tree(project_path, exclude_names))
    files = collect_selected_files(tree)
    logger.info("aggregate_files_collected", total_files=len(files))
    combined = combine_files_content(files, Path(project_path))
    count = write_batches_zip(iter_batches(combined, size), destination, entry_prefix=AGGREGATE_ENTRY_PREFIX)
    logger.info("aggregate_complete", total_batches=count, lines_per_batch=size)
    return count

from __future__ import annotations

import io
import re
from typing import TYPE_CHECKING

from code_batcher.config import (
    DEFAULT_LINES_PER_BATCH,
    EMPTY_FILE_PLACEHOLDER,
    END_OF_FILE_MARKER,
    READ_ERROR_PLACEHOLDER,
    Batch,
)
from code_batcher.exceptions import FileReadError
from code_batcher.file_manipulation import read_file_content, relpath
from code_batcher.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence
    from pathlib import Path

    from code_batcher.config import Node

_LINE_BREAK = re.compile(r"\r?\n")


def render_file_frame(name: str, relative_path: str, content: str) -> str:
    """Wrap one file's content in the combined-document frame.

    Args:
        name (str): the file base name
        relative_path (str): the file path relative to the project root
        content (str): the file content, or a placeholder

    Returns:
        str: the framed block, ending with a blank line
    """
    return f"*** {name} ***\n*** {relative_path} ***\n{content}\n\n{END_OF_FILE_MARKER}\n\n"


def file_content_or_placeholder(path: str | Path) -> str:
    """Read a file for the combined document, substituting placeholders.

    Returns:
        str: the content, ``READ_ERROR_PLACEHOLDER`` when the file cannot be read
            as text, or ``EMPTY_FILE_PLACEHOLDER`` when it is blank
    """
    try:
        content = read_file_content(path)
    except FileReadError as e:
        logger.warning("file_read_failed", path=e.path, error=e.message)
        return READ_ERROR_PLACEHOLDER
    if not content.strip():
        return EMPTY_FILE_PLACEHOLDER
    return content


def combine_files_content(files: Sequence[Node], root_path: str | Path) -> str:
    """Concatenate the selected files into one framed document.

    Files are emitted in the given order. An unreadable file is replaced by a
    placeholder and never fails the whole document.

    Args:
        files (Sequence[Node]): the selected file nodes, in output order
        root_path (str | Path): the project root, for the relative path header

    Returns:
        str: the combined document
    """
    out = io.StringIO()
    for node in files:
        content = file_content_or_placeholder(node.path)
        out.write(render_file_frame(node.name, relpath(node.path, root_path), content))
    return out.getvalue()


def normalize_lines_per_batch(lines_per_batch: int | None) -> int:
    """Fall back to the default batch size for missing or non-positive values."""
    if lines_per_batch is None or lines_per_batch <= 0:
        return DEFAULT_LINES_PER_BATCH
    return lines_per_batch


def iter_batches(content: str, lines_per_batch: int | None = DEFAULT_LINES_PER_BATCH) -> Iterator[Batch]:
    """Lazily split a document into batches of at most ``lines_per_batch`` lines.

    Lines are split on ``\\n`` or ``\\r\\n`` and rejoined with ``\\n``. Empty
    lines count as lines, so an empty document still gives one batch holding
    a single empty line.

    Args:
        content (str): the combined document
        lines_per_batch (int | None): batch size; missing or non-positive means the default

    Yields:
        Iterator[Batch]: the batches, numbered from 1
    """
    size = normalize_lines_per_batch(lines_per_batch)
    lines = _LINE_BREAK.split(content)
    for number, start in enumerate(range(0, len(lines), size), start=1):
        chunk = lines[start : start + size]
        yield Batch(batch_number=number, line_count=len(chunk), content="\n".join(chunk))


def split_content_into_batches(content: str, lines_per_batch: int | None = DEFAULT_LINES_PER_BATCH) -> list[Batch]:
    return list(iter_batches(content, lines_per_batch))

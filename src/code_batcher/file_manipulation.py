from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from code_batcher.config import EXCLUDED_FILES, HIDDEN_PREFIX, Node, NodeType, ScanOptions
from code_batcher.exceptions import FileReadError, ScanError
from code_batcher.ignore import IgnoreMatcher

if TYPE_CHECKING:
    from collections.abc import Collection


def relpath(path: str | Path, root: str | Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (str | Path): the path to "relativise"
        root (str | Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            Paths outside root climb with ``..``. If no relative path exists
            (different drives), returns the original path as a string.
    """
    try:
        return os.path.relpath(path, root).replace("\\", "/")
    except ValueError:
        return str(path)


def should_exclude_entry(name: str, exclude_names: Collection[str] = EXCLUDED_FILES) -> bool:
    """Apply the static exclusion rules to an entry name.

    Dotfiles and dot-folders are always skipped, as are known config and
    metadata files. Both rules run before any ``.gitignore`` pattern.

    Args:
        name (str): the entry base name
        exclude_names (Collection[str]): names always skipped

    Returns:
        bool: True if the entry must not appear in a scan
    """
    return name.startswith(HIDDEN_PREFIX) or name in exclude_names


def scan_directory(
    dir_path: str | Path,
    project_root: str | Path,
    matcher: IgnoreMatcher,
    exclude_names: Collection[str] = EXCLUDED_FILES,
) -> list[Node]:
    """Recursively scan a directory into a tree of nodes.

    Entries are visited sorted by name. Symbolic links are followed; broken
    links and special files are skipped. Folders that end up with no child
    after filtering are pruned.

    Args:
        dir_path (str | Path): the directory to list
        project_root (str | Path): the scan root, used for ``.gitignore`` matching
        matcher (IgnoreMatcher): the project's ignore rules
        exclude_names (Collection[str]): names always skipped

    Raises:
        ScanError: if a directory cannot be listed

    Returns:
        list[Node]: the ordered children of ``dir_path``
    """
    try:
        with os.scandir(dir_path) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        raise ScanError(message=f"Cannot read directory {dir_path}: {e.strerror or e}", path=str(dir_path)) from e

    nodes: list[Node] = []
    for entry in entries:
        if should_exclude_entry(entry.name, exclude_names):
            continue

        full_path = os.path.join(dir_path, entry.name)
        try:
            is_dir = entry.is_dir()
            is_file = not is_dir and entry.is_file()
        except OSError as e:
            raise ScanError(message=f"Cannot stat {full_path}: {e.strerror or e}", path=full_path) from e

        if matcher.is_ignored(relpath(full_path, project_root), is_dir=is_dir):
            continue

        if is_dir:
            children = scan_directory(full_path, project_root, matcher, exclude_names)
            if not children:
                continue
            nodes.append(Node(name=entry.name, path=full_path, type=NodeType.FOLDER, children=children))
        elif is_file:
            nodes.append(Node(name=entry.name, path=full_path, type=NodeType.FILE))

    return nodes


def scan(options: ScanOptions) -> list[Node]:
    """Scan ``options.root_path`` honoring its ``.gitignore`` and the static exclusions.

    Args:
        options (ScanOptions): the scan root and the names always skipped

    Returns:
        list[Node]: the top-level nodes of the project
    """
    root = os.path.abspath(options.root_path)
    matcher = IgnoreMatcher.from_root(root)
    return scan_directory(root, root, matcher, options.exclude_names)


def scan_project(root_path: str | Path, exclude_names: Collection[str] = EXCLUDED_FILES) -> list[Node]:
    return scan(ScanOptions(root_path=Path(root_path), exclude_names=frozenset(exclude_names)))


def count_nodes(nodes: list[Node]) -> tuple[int, int]:
    """Count (files, folders) in a tree."""
    files = folders = 0
    for node in nodes:
        if node.is_folder:
            folders += 1
            sub_files, sub_folders = count_nodes(node.children or [])
            files += sub_files
            folders += sub_folders
        else:
            files += 1
    return files, folders


def read_file_content(path: str | Path) -> str:
    """Read a whole file as UTF-8 text, keeping its line endings.

    Args:
        path (str | Path): the file to read

    Raises:
        FileReadError: if the file is gone, unreadable or not valid UTF-8

    Returns:
        str: the file content
    """
    try:
        data = Path(path).read_bytes()
        return data.decode("utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise FileReadError(message=f"Error reading file {path}: {e}", path=str(path)) from e

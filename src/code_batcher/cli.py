"""
code_batcher: Scan a project, select files and export them as line batches.

Overview
--------
1) ``scan`` prints the filtered file/folder tree of a project as JSON. Dotfiles,
   known metadata files (lockfiles, linter configs, env files) and anything
   matched by the project's ``.gitignore`` are left out, as are folders that
   end up empty.

2) Edit the tree, setting ``"selected": true`` on files or folders. A selected
   folder selects everything beneath it.

3) Feed the tree back:
   - ``batch`` prints ``{totalFiles, totalBatches, batches}`` as JSON,
   - ``download`` writes the combined document as one text file,
   - ``download-batches`` writes one zip entry per batch.

``aggregate`` does all of it in one go for the whole project.

Usage
-----
    code-batcher scan ./my-project --output tree.json
    code-batcher batch ./my-project --selection tree.json --lines-per-batch 2000
    code-batcher download-batches ./my-project --selection tree.json --output parts.zip
    code-batcher aggregate ./my-project --log-file batcher.log
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from code_batcher import __version__
from code_batcher.config import AGGREGATE_ZIP_NAME, BATCHES_ZIP_NAME, TEXT_DOWNLOAD_NAME
from code_batcher.exceptions import CodeBatcherError, InputError
from code_batcher.logging import logger, setup_logging
from code_batcher.service import (
    aggregate_project,
    batch_files,
    download_batch,
    download_batches,
    format_validation_error,
    load_selection_file,
    scan_project_tree,
)
from code_batcher.settings import Settings

if TYPE_CHECKING:
    from collections.abc import Sequence


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="code-batcher",
        description="Scan a project and export selected files as line batches.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--log-file", type=str, default=None, help="Log file path.")

    sub = p.add_subparsers(dest="command", required=True)

    def add_project(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument("project_path", type=Path, help="Project root.")

    def add_selection(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument(
            "--selection",
            type=Path,
            required=True,
            help="JSON selection tree (a list of nodes, or {'tree': [...]}).",
        )

    def add_lines(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument(
            "--lines-per-batch",
            type=int,
            default=None,
            help="Lines per batch (default 3000).",
        )

    def add_excludes(cmd: argparse.ArgumentParser) -> None:
        cmd.add_argument(
            "--exclude-name",
            action="append",
            default=[],
            help="Extra entry name to skip (repeatable).",
        )

    scan = sub.add_parser("scan", help="Print the filtered project tree as JSON.")
    add_project(scan)
    add_excludes(scan)
    scan.add_argument("--output", type=Path, default=None, help="Output file (stdout if unset).")

    batch = sub.add_parser("batch", help="Print the batches of the selected files as JSON.")
    add_project(batch)
    add_selection(batch)
    add_lines(batch)
    batch.add_argument("--output", type=Path, default=None, help="Output file (stdout if unset).")

    download = sub.add_parser("download", help="Write the selected files as one text file.")
    add_project(download)
    add_selection(download)
    download.add_argument("--output", type=Path, default=Path(TEXT_DOWNLOAD_NAME), help="Output text file.")

    download_zip = sub.add_parser("download-batches", help="Write the batches as a zip archive.")
    add_project(download_zip)
    add_selection(download_zip)
    add_lines(download_zip)
    download_zip.add_argument("--output", type=Path, default=Path(BATCHES_ZIP_NAME), help="Output zip file.")

    aggregate = sub.add_parser("aggregate", help="Batch every file of the project into a zip archive.")
    add_project(aggregate)
    add_lines(aggregate)
    add_excludes(aggregate)
    aggregate.add_argument("--output", type=Path, default=Path(AGGREGATE_ZIP_NAME), help="Output zip file.")
    return p


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse the command line into ``Settings``.

    Raises:
        InputError: if a value, from the command line or the environment, is invalid
    """
    args = build_parser().parse_args(argv)
    try:
        return Settings(**{k: v for k, v in vars(args).items() if v is not None})
    except ValidationError as e:
        raise InputError(message=f"Invalid settings: {format_validation_error(e)}") from e


def emit_json(payload: Any, output: Path | None) -> None:  # noqa: ANN401
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    if output is None:
        print(text)
    else:
        output.write_text(text + "\n", encoding="utf-8")


def run(settings: Settings) -> str:
    """Dispatch the sub-command.

    Returns:
        str: a one-line report for the terminal, empty when JSON went to stdout
    """
    command = settings.command
    if command == "scan":
        tree = scan_project_tree(settings.project_path, settings.exclude_name)
        emit_json({"tree": [n.model_dump(mode="json", exclude_none=True) for n in tree]}, settings.output)
        return f"Wrote {settings.output} nodes={len(tree)}" if settings.output else ""

    if command == "aggregate":
        out = settings.output or Path(AGGREGATE_ZIP_NAME)
        count = aggregate_project(settings.project_path, out, settings.lines_per_batch, settings.exclude_name)
        return f"Wrote {out} batches={count}"

    tree = load_selection_file(settings.selection)

    if command == "batch":
        summary = batch_files(tree, settings.project_path, settings.lines_per_batch)
        emit_json(summary.model_dump(mode="json", by_alias=True), settings.output)
        return f"Wrote {settings.output} batches={summary.total_batches}" if settings.output else ""

    if command == "download":
        out = settings.output or Path(TEXT_DOWNLOAD_NAME)
        out.write_text(download_batch(tree, settings.project_path), encoding="utf-8", newline="")
        return f"Wrote {out}"

    if command == "download-batches":
        out = settings.output or Path(BATCHES_ZIP_NAME)
        count = download_batches(tree, settings.project_path, out, settings.lines_per_batch)
        return f"Wrote {out} batches={count}"

    msg = f"Unknown command: {command}"
    raise ValueError(msg)


def report_error(err: CodeBatcherError, command: str | None) -> int:
    logger.error("command_failed", command=command, **err.to_dict())
    print(json.dumps({"error": err.to_dict()}, ensure_ascii=False), file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    try:
        settings = parse_args(argv)
    except CodeBatcherError as e:
        return report_error(e, None)
    if settings.log_file:
        setup_logging(settings.log_file)

    try:
        report = run(settings)
    except CodeBatcherError as e:
        return report_error(e, settings.command)

    if report:
        print(report, file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

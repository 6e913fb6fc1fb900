from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from code_batcher import ignore
from code_batcher.ignore import IgnoreMatcher, valid_patterns

if TYPE_CHECKING:
    from pathlib import Path

    from pytest_mock import MockerFixture


@pytest.mark.unit
def test_missing_gitignore_matches_nothing(tmp_path: Path) -> None:
    matcher = IgnoreMatcher.from_root(tmp_path)

    assert matcher.is_ignored("node_modules", is_dir=True) is False
    assert matcher.is_ignored("src/app.py") is False


@pytest.mark.unit
def test_directory_only_pattern_applies_to_dirs_and_their_content(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_text("node_modules/\n", encoding="utf-8")
    matcher = IgnoreMatcher.from_root(tmp_path)

    assert matcher.is_ignored("node_modules", is_dir=True)
    assert matcher.is_ignored("node_modules/pkg/index.js")
    assert matcher.is_ignored("web/node_modules", is_dir=True)
    assert not matcher.is_ignored("node_modules")


@pytest.mark.unit
def test_negation_and_globs() -> None:
    matcher = IgnoreMatcher.from_lines(["# logs", "*.log", "!keep.log", ""])

    assert matcher.is_ignored("debug.log")
    assert matcher.is_ignored("deep/nested/trace.log")
    assert not matcher.is_ignored("keep.log")
    assert not matcher.is_ignored("src/app.py")


@pytest.mark.unit
def test_anchored_pattern_only_matches_at_root() -> None:
    matcher = IgnoreMatcher.from_lines(["/build"])

    assert matcher.is_ignored("build", is_dir=True)
    assert not matcher.is_ignored("src/build", is_dir=True)


@pytest.mark.unit
def test_backslash_paths_are_normalized() -> None:
    matcher = IgnoreMatcher.from_lines(["dist/"])

    assert matcher.is_ignored("dist\\bundle.js")


@pytest.mark.unit
def test_malformed_pattern_line_is_dropped_and_logged(mocker: MockerFixture) -> None:
    real_from_lines = ignore.GitIgnoreSpec.from_lines

    def from_lines(lines):
        if "bad" in lines:
            raise ValueError("unparsable pattern")
        return real_from_lines(lines)

    mocker.patch.object(ignore.GitIgnoreSpec, "from_lines", side_effect=from_lines)
    log = mocker.patch.object(ignore, "logger")

    matcher = IgnoreMatcher.from_lines(["*.log", "bad", "!keep.log"], source="proj/.gitignore")

    assert matcher.patterns == ["*.log", "!keep.log"]
    log.warning.assert_called_once_with(
        "skipping_ignore_pattern", source="proj/.gitignore", line=2, pattern="bad", error="unparsable pattern"
    )
    assert matcher.is_ignored("server.log")
    assert not matcher.is_ignored("keep.log")


@pytest.mark.unit
def test_valid_patterns_keeps_good_lines_in_order() -> None:
    assert valid_patterns(["*.log\r\n", "# c", "", "dist/"]) == ["*.log", "# c", "", "dist/"]


@pytest.mark.unit
def test_contents_pattern_keeps_directory_for_negated_children() -> None:
    matcher = IgnoreMatcher.from_lines(["vendor/**", "!vendor/keep.txt"])

    assert not matcher.is_ignored("vendor", is_dir=True)
    assert matcher.is_ignored("vendor/sub", is_dir=True)
    assert matcher.is_ignored("vendor/a.txt")
    assert not matcher.is_ignored("vendor/keep.txt")


@pytest.mark.unit
def test_negated_directory_pattern_restores_directory() -> None:
    matcher = IgnoreMatcher.from_lines(["build/", "!build/"])

    assert not matcher.is_ignored("build", is_dir=True)


@pytest.mark.unit
def test_crlf_gitignore_is_understood(tmp_path: Path) -> None:
    (tmp_path / ".gitignore").write_bytes(b"*.tmp\r\ncache/\r\n")
    matcher = IgnoreMatcher.from_root(tmp_path)

    assert matcher.is_ignored("a.tmp")
    assert matcher.is_ignored("cache", is_dir=True)

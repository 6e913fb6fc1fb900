from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from pathspec import GitIgnoreSpec

from code_batcher.config import GITIGNORE_FILENAME
from code_batcher.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterable

CONTENTS_SUFFIX = "/**"


def valid_patterns(lines: Iterable[str], *, source: str = "<patterns>") -> list[str]:
    """Keep the gitignore lines that parse, in order.

    Each line is checked on its own so a single malformed pattern only drops
    that line instead of the whole set.

    Args:
        lines (Iterable[str]): raw gitignore lines
        source (str): label used in warnings

    Returns:
        list[str]: the lines pathspec accepts
    """
    valid: list[str] = []
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        try:
            GitIgnoreSpec.from_lines([line])
        except ValueError as e:
            logger.warning("skipping_ignore_pattern", source=source, line=lineno, pattern=line, error=str(e))
            continue
        valid.append(line)
    return valid


class DirectoryRule(NamedTuple):
    """One pattern as applied to directories."""

    negated: bool
    contents_only: bool
    spec: GitIgnoreSpec

    @classmethod
    def from_pattern(cls, pattern: str) -> DirectoryRule | None:
        body = pattern.strip()
        if not body or body.startswith("#"):
            return None
        negated = body.startswith("!")
        if negated:
            body = body[1:]
        return cls(negated, body.endswith(CONTENTS_SUFFIX), GitIgnoreSpec.from_lines([body]))

    def matches(self, rel: str) -> bool:
        # `dir/**` matches what is inside dir, never dir itself
        return self.spec.match_file(rel if self.contents_only else rel + "/")


class IgnoreMatcher:
    """Answer whether a root-relative path is excluded by the project's ``.gitignore``."""

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        self.patterns = list(patterns)
        self._spec = GitIgnoreSpec.from_lines(self.patterns)
        self._dir_rules = [r for r in map(DirectoryRule.from_pattern, self.patterns) if r is not None]

    @classmethod
    def from_lines(cls, lines: Iterable[str], *, source: str = "<patterns>") -> IgnoreMatcher:
        return cls(valid_patterns(lines, source=source))

    @classmethod
    def from_root(cls, root: str | Path) -> IgnoreMatcher:
        """Load ``<root>/.gitignore``.

        A missing file yields a matcher that ignores nothing. An unreadable
        one is logged and treated the same way.

        Args:
            root (str | Path): the project root

        Returns:
            IgnoreMatcher: the matcher for this root
        """
        gitignore = Path(root) / GITIGNORE_FILENAME
        if not gitignore.is_file():
            return cls()
        try:
            text = gitignore.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("gitignore_unreadable", path=str(gitignore), error=str(e))
            return cls()
        return cls.from_lines(text.splitlines(), source=str(gitignore))

    def _directory_ignored(self, rel: str) -> bool:
        ignored = False
        for rule in self._dir_rules:
            if rule.matches(rel):
                ignored = not rule.negated
        return ignored

    def is_ignored(self, relative_path: str, *, is_dir: bool = False) -> bool:
        """Check a path against the loaded patterns.

        The last matching pattern wins. For directories, ``name/`` patterns
        apply to the directory itself while ``name/**`` only covers its
        content, so ``vendor/**`` followed by ``!vendor/keep.txt`` still
        descends into ``vendor``.

        Args:
            relative_path (str): path relative to the scanned root, forward slashes
            is_dir (bool): whether the path is a directory

        Returns:
            bool: True if the path is excluded
        """
        rel = relative_path.replace("\\", "/").strip("/")
        if not rel:
            return False
        if is_dir:
            return self._directory_ignored(rel)
        return self._spec.match_file(rel)

"""
Ignore rules for repo-dump.

Reads .aiignore and .gitignore files and answers whether a repository-relative path
is excluded. Rules from a nested .gitignore are scoped to the directory declaring
them. Supported syntax is deliberately small: trailing-slash patterns are directory
prefixes, everything else is a shell-style wildcard matched against the path relative
to the declaring directory. There is no negation.
"""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from .config import AI_IGNORE_FILE, VCS_IGNORE_FILE, VCS_METADATA_DIR


class IgnoreFileError(Exception):
    """Error reading an ignore file that exists."""

    def __init__(self, path: Path, message: str):
        super().__init__(message)
        self.path = path


@dataclass(frozen=True)
class IgnoreRule:
    """A single ignore pattern.

    Attributes:
        pattern: Pattern as written in the ignore file, relative to `scope`.
        scope: Relative directory that declared the rule; empty for root rules.
    """

    pattern: str
    scope: str = ""

    def applies_to(self, rel_path: str) -> bool:
        """Return whether `rel_path` lies beneath this rule's scope."""
        if not self.scope:
            return True
        return rel_path.startswith(self.scope + "/")

    def matches(self, rel_path: str) -> bool:
        """Return whether this rule excludes `rel_path`."""
        if not self.applies_to(rel_path):
            return False
        # The scope is compared literally; only the remainder goes through the glob
        if self.scope:
            rel_path = rel_path[len(self.scope) + 1:]
        return match_pattern(self.pattern, rel_path)


def match_pattern(pattern: str, rel_path: str) -> bool:
    """
    Match one pattern against a relative path.

    Args:
        pattern: Directory prefix (ending in "/") or shell-style wildcard
        rel_path: Path relative to the dump root, using forward slashes

    Returns:
        True if the pattern matches. Patterns the wildcard engine rejects never match.
    """
    if pattern.endswith("/"):
        return rel_path.startswith(pattern)

    try:
        return fnmatch.fnmatchcase(rel_path, pattern)
    except re.error:
        return False


def should_ignore(rel_path: str, patterns: Iterable[str]) -> bool:
    """Check a relative path against a plain list of unscoped patterns."""
    return any(match_pattern(pattern, rel_path) for pattern in patterns)


def scope_pattern(scope: str, pattern: str) -> str:
    """Prefix `pattern` with the directory `scope`, keeping any trailing slash.

    A leading slash anchors the pattern to the scope (the root when `scope` is empty).
    """
    pattern = pattern.lstrip("/")
    if not scope:
        return pattern
    return f"{scope.rstrip('/')}/{pattern.lstrip('/')}"


def read_ignore_file(file_path: Path, scope: str = "") -> list[str]:
    """
    Read patterns from an ignore file.

    Args:
        file_path: Path to the ignore file
        scope: Relative directory to prefix each pattern with (empty for none)

    Returns:
        Patterns in file order. A missing file yields an empty list.

    Raises:
        IgnoreFileError: If the file exists but cannot be read
    """
    try:
        with open(file_path, "r", encoding="utf-8", errors="replace") as f:
            lines = f.read().splitlines()
    except FileNotFoundError:
        return []
    except OSError as e:
        raise IgnoreFileError(file_path, f"failed to read {file_path}: {e}") from e

    patterns = []
    for line in lines:
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        patterns.append(scope_pattern(scope, line))
    return patterns


class IgnoreResolver:
    """
    Accumulates ignore rules for a single dump.

    Seeded from the root .aiignore and .gitignore files; nested .gitignore files
    are added with `register` as the walk reaches their directories, so they only
    affect paths not yet visited.
    """

    def __init__(self, root_path: Path, extra_patterns: Optional[Iterable[str]] = None):
        """
        Initialize the resolver.

        Args:
            root_path: Root directory of the dump
            extra_patterns: Additional unscoped patterns (from config or CLI)

        Raises:
            IgnoreFileError: If a root ignore file exists but cannot be read
        """
        self.root_path = root_path
        self._rules: list[IgnoreRule] = [IgnoreRule(VCS_METADATA_DIR)]
        self._registered: set[str] = set()
        self.ignore_files: list[Path] = []

        for name in (AI_IGNORE_FILE, VCS_IGNORE_FILE):
            self._load(root_path / name, "")

        for pattern in extra_patterns or ():
            pattern = scope_pattern("", pattern.strip())
            if pattern:
                self._rules.append(IgnoreRule(pattern))

    def _load(self, file_path: Path, scope: str) -> None:
        # Patterns stay relative to their scope
        patterns = read_ignore_file(file_path)
        if patterns:
            self.ignore_files.append(file_path)
        self._rules.extend(IgnoreRule(pattern, scope) for pattern in patterns)

    @property
    def rules(self) -> tuple[IgnoreRule, ...]:
        """All rules collected so far, in insertion order."""
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def register(self, directory: Path, rel_scope: str) -> None:
        """
        Add rules from the .gitignore directly inside `directory`.

        Args:
            directory: Absolute path of a directory reached by the walk
            rel_scope: The directory's path relative to the root

        Raises:
            IgnoreFileError: If the .gitignore exists but cannot be read
        """
        # The root .gitignore is loaded at construction
        if not rel_scope or rel_scope in self._registered:
            return
        self._registered.add(rel_scope)
        self._load(directory / VCS_IGNORE_FILE, rel_scope)

    def matches(self, rel_path: str) -> bool:
        """
        Check if a relative path is excluded by any rule.

        Args:
            rel_path: Path relative to the root, using forward slashes

        Returns:
            True if the path should be ignored
        """
        return any(rule.matches(rel_path) for rule in self._rules)

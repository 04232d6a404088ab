"""
Constants and data models for repo-dump.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

# Ignore files looked up during a dump
AI_IGNORE_FILE = ".aiignore"
VCS_IGNORE_FILE = ".gitignore"

# Version-control metadata directory, always ignored
VCS_METADATA_DIR = ".git/"

# Output framing
SECTION_DELIMITER = "----"

# Number of leading bytes sampled for binary detection
BINARY_SAMPLE_SIZE = 512

# Read size used when streaming file bodies to the output
COPY_CHUNK_SIZE = 64 * 1024


@dataclass
class DumpEntry:
    """A single filesystem node visited during a dump.

    Attributes:
        path: Absolute path on disk.
        relative_path: Path relative to the dump root, using forward slashes.
        is_dir: Whether the node is a directory.
        is_symlink: Whether the node is a symbolic link (never followed).
        is_binary: Whether the file was classified as binary.
        ignored: Whether an ignore rule excluded the node.
        content_type: Sniffed MIME type of a regular file, None if unreadable or
            not a file.
    """

    path: Path
    relative_path: str
    is_dir: bool = False
    is_symlink: bool = False
    is_binary: bool = False
    ignored: bool = False
    content_type: Optional[str] = None

    @property
    def included(self) -> bool:
        """Return whether this entry is written to the dump."""
        return not (self.is_dir or self.is_symlink or self.is_binary or self.ignored)

    @property
    def skip_reason(self) -> str | None:
        """Return a short label describing why the entry is not dumped."""
        if self.is_symlink:
            return "symlink"
        if self.ignored:
            return "ignored"
        if self.is_dir:
            return None
        if self.is_binary:
            return "binary"
        return None


@dataclass
class DumpStats:
    """Statistics collected while dumping a repository.

    Attributes:
        entries_visited: Filesystem nodes visited (files, directories, links).
        files_dumped: Files written to the output.
        files_skipped_ignored: Files excluded by an ignore rule.
        dirs_skipped_ignored: Directories pruned by an ignore rule.
        files_skipped_binary: Files skipped by binary detection.
        symlinks_skipped: Symbolic links skipped.
        ignore_files_loaded: Ignore files that contributed rules.
        ignore_rules: Size of the final rule set.
        bytes_written: Total bytes written, including header and footer.
        processing_time_seconds: Wall-clock time of the dump.
    """

    entries_visited: int = 0
    files_dumped: int = 0
    files_skipped_ignored: int = 0
    dirs_skipped_ignored: int = 0
    files_skipped_binary: int = 0
    symlinks_skipped: int = 0
    ignore_files_loaded: int = 0
    ignore_rules: int = 0
    bytes_written: int = 0
    processing_time_seconds: float = 0.0

    def record(self, entry: DumpEntry) -> None:
        """Update counters for one visited entry."""
        self.entries_visited += 1
        if entry.is_symlink:
            self.symlinks_skipped += 1
        elif entry.ignored:
            if entry.is_dir:
                self.dirs_skipped_ignored += 1
            else:
                self.files_skipped_ignored += 1
        elif entry.is_binary:
            self.files_skipped_binary += 1

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary with deterministic key order."""
        return {
            "bytes_written": self.bytes_written,
            "entries_visited": self.entries_visited,
            "files_dumped": self.files_dumped,
            "ignore_files_loaded": self.ignore_files_loaded,
            "ignore_rules": self.ignore_rules,
            "processing_time_seconds": round(self.processing_time_seconds, 3),
            "skipped": {
                "binary": self.files_skipped_binary,
                "ignored_dirs": self.dirs_skipped_ignored,
                "ignored_files": self.files_skipped_ignored,
                "symlinks": self.symlinks_skipped,
            },
        }

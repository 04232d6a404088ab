"""
Repository dumper for repo-dump.

Walks a repository depth-first, applies ignore rules and binary detection, and
streams every remaining file into a single delimited text stream.
"""

from __future__ import annotations

import os
import time
from pathlib import Path
from typing import BinaryIO, Generator, Iterable, Optional

from .config import COPY_CHUNK_SIZE, DumpEntry, DumpStats
from .formatter import render_footer, render_header, render_section_header
from .ignore import IgnoreFileError, IgnoreResolver
from .utils import is_binary_content_type, sniff_file


class DumpError(Exception):
    """Error while dumping a repository."""

    pass


def validate_root(path: Path) -> Path:
    """Validate and resolve a dump root.

    Args:
        path: Directory to dump.

    Returns:
        Resolved absolute path to a readable directory.

    Raises:
        DumpError: If the path does not exist, is not a directory, or is not readable.
    """
    resolved = path.resolve()

    if not resolved.exists():
        raise DumpError(f"Path does not exist: {resolved}")

    if not resolved.is_dir():
        raise DumpError(f"Path is not a directory: {resolved}")

    if not os.access(resolved, os.R_OK):
        raise DumpError(f"Path is not readable: {resolved}")

    return resolved


def _encode(text: str) -> bytes:
    # Undecodable file names round-trip to their original bytes
    return text.encode("utf-8", "surrogateescape")


class RepoDumper:
    """
    Dumps a repository as a flat text stream.

    Each call to `iter_entries` or `dump` starts from a fresh set of ignore rules,
    so one instance can be reused.
    """

    def __init__(self, root_path: Path, extra_ignore: Optional[Iterable[str]] = None):
        """
        Initialize the dumper.

        Args:
            root_path: Directory to dump
            extra_ignore: Additional unscoped ignore patterns

        Raises:
            DumpError: If `root_path` is not a readable directory
        """
        self.root_path = validate_root(Path(root_path))
        self.extra_ignore = [p for p in (extra_ignore or ()) if p.strip()]
        self.resolver: Optional[IgnoreResolver] = None
        self.stats = DumpStats()

    def _new_resolver(self) -> IgnoreResolver:
        try:
            return IgnoreResolver(self.root_path, self.extra_ignore)
        except IgnoreFileError as e:
            raise DumpError(f"failed to read ignore file {e.path}: {e.__cause__}") from e

    def iter_entries(self) -> Generator[DumpEntry, None, None]:
        """
        Walk the repository and yield every visited entry.

        Directories excluded by an ignore rule are yielded but not entered.

        Yields:
            DumpEntry objects in pre-order, siblings sorted by name

        Raises:
            DumpError: On the first filesystem error
        """
        self.resolver = self._new_resolver()
        yield from self._walk(self.root_path, "", self.resolver)

    def _walk(
        self, directory: Path, rel_dir: str, resolver: IgnoreResolver
    ) -> Generator[DumpEntry, None, None]:
        try:
            with os.scandir(directory) as entries:
                entries_list = sorted(entries, key=lambda e: e.name)
        except OSError as e:
            raise DumpError(f"failed to read directory {directory}: {e}") from e

        for entry in entries_list:
            entry_path = Path(entry.path)
            rel_path = f"{rel_dir}/{entry.name}" if rel_dir else entry.name

            try:
                is_symlink = entry.is_symlink()
                is_dir = not is_symlink and entry.is_dir(follow_symlinks=False)
                is_file = not is_symlink and entry.is_file(follow_symlinks=False)
            except OSError as e:
                raise DumpError(f"failed to stat {entry_path}: {e}") from e

            if is_symlink:
                yield DumpEntry(path=entry_path, relative_path=rel_path, is_symlink=True)
                continue

            ignored = resolver.matches(rel_path) or (
                is_dir and resolver.matches(rel_path + "/")
            )
            if ignored:
                yield DumpEntry(
                    path=entry_path, relative_path=rel_path, is_dir=is_dir, ignored=True
                )
                continue

            if is_dir:
                try:
                    resolver.register(entry_path, rel_path)
                except IgnoreFileError as e:
                    raise DumpError(
                        f"failed to read ignore file {e.path}: {e.__cause__}"
                    ) from e
                yield DumpEntry(path=entry_path, relative_path=rel_path, is_dir=True)
                yield from self._walk(entry_path, rel_path, resolver)
                continue

            # Sockets, FIFOs and device nodes
            if not is_file:
                continue

            content_type = sniff_file(entry_path)
            yield DumpEntry(
                path=entry_path,
                relative_path=rel_path,
                is_binary=is_binary_content_type(content_type),
                content_type=content_type,
            )

    def dump(self, out: BinaryIO, description: Optional[str] = None) -> DumpStats:
        """
        Write the repository to `out`.

        Args:
            out: Writable binary stream
            description: Optional description placed in the header

        Returns:
            Statistics for this run

        Raises:
            DumpError: On any read or write failure; output written so far is incomplete
        """
        start_time = time.time()
        self.stats = stats = DumpStats()

        self._write(out, _encode(render_header(description)), "header")

        for entry in self.iter_entries():
            stats.record(entry)
            if not entry.included:
                continue
            self._write_section(out, entry)
            stats.files_dumped += 1

        self._write(out, _encode(render_footer()), "footer")

        if self.resolver is not None:
            stats.ignore_rules = len(self.resolver)
            stats.ignore_files_loaded = len(self.resolver.ignore_files)
        stats.processing_time_seconds = time.time() - start_time
        return stats

    def _write(self, out: BinaryIO, data: bytes, what: str) -> None:
        try:
            out.write(data)
        except OSError as e:
            raise DumpError(f"failed to write {what}: {e}") from e
        self.stats.bytes_written += len(data)

    def _write_section(self, out: BinaryIO, entry: DumpEntry) -> None:
        """Stream one file as delimiter, path, raw content and a trailing newline."""
        try:
            f = open(entry.path, "rb")
        except OSError as e:
            raise DumpError(f"failed to open file {entry.path}: {e}") from e

        with f:
            self._write(
                out,
                _encode(render_section_header(entry.relative_path)),
                f"section header for {entry.relative_path}",
            )
            while True:
                try:
                    chunk = f.read(COPY_CHUNK_SIZE)
                except OSError as e:
                    raise DumpError(f"failed to read file {entry.path}: {e}") from e
                if not chunk:
                    break
                self._write(out, chunk, f"content of {entry.relative_path}")

        self._write(out, b"\n", f"newline after {entry.relative_path}")


def dump_repository(
    root_path: Path,
    out: BinaryIO,
    description: Optional[str] = None,
    extra_ignore: Optional[Iterable[str]] = None,
) -> DumpStats:
    """
    Convenience function to dump a repository.

    Returns:
        DumpStats for the run
    """
    dumper = RepoDumper(root_path, extra_ignore=extra_ignore)
    return dumper.dump(out, description=description)

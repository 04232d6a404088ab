"""
Utility functions for repo-dump.

Includes binary detection helpers.
"""

from __future__ import annotations

from pathlib import Path

from .config import BINARY_SAMPLE_SIZE
from .sniff import detect_content_type, is_text_content_type


def sniff_file(file_path: Path, sample_size: int = BINARY_SAMPLE_SIZE) -> str | None:
    """Sniff the content type of a file from its leading bytes.

    Args:
        file_path: Path to the file to inspect.
        sample_size: Number of bytes to sample from the start of the file.

    Returns:
        The detected MIME type, or None if the file could not be read.
    """
    try:
        with open(file_path, "rb") as f:
            sample = f.read(sample_size)
    except OSError:
        return None
    return detect_content_type(sample)


def is_binary_content_type(content_type: str | None) -> bool:
    """Return whether a sniffed content type marks a file binary.

    None (the file could not be read) counts as text.
    """
    if content_type is None:
        return False
    return not is_text_content_type(content_type)


def is_binary_file(file_path: Path, sample_size: int = BINARY_SAMPLE_SIZE) -> bool:
    """Heuristically determine whether a file is binary.

    The first `sample_size` bytes are sniffed; any non-`text/*` result marks the file
    binary. Empty files are text. Unreadable files are reported as text so that an
    I/O problem never hides content: the dump itself will surface the error when it
    opens the file.

    Args:
        file_path: Path to the file to test.
        sample_size: Number of bytes to sample from the file start.

    Returns:
        True if the file is likely binary, otherwise False.
    """
    return is_binary_content_type(sniff_file(file_path, sample_size))

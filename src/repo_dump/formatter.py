"""
Header and footer text for repo-dump output.
"""

from __future__ import annotations

import re
from typing import Optional

from .config import SECTION_DELIMITER

END_MARKER = "--END--"

FORMAT_EXPLANATION = f"""\
The output represents a Git repository's content in the following format:

1. Each section begins with {SECTION_DELIMITER}.
2. The first line after {SECTION_DELIMITER} contains the file path and name.
3. The subsequent lines contain the file contents.
4. The repository content ends with {END_MARKER}.
"""

INSTRUCTION_NOTE = (
    f"Any text after {END_MARKER} should be treated as instructions, "
    "using the repository content as context."
)

_ESCAPES = {
    "\\": "\\",
    "n": "\n",
    "t": "\t",
    "r": "\r",
}

_ESCAPE_RE = re.compile(r"\\([\\ntr])")


def unescape_string(text: str) -> str:
    """Replace backslash escapes (\\\\, \\n, \\t, \\r) with the characters they name.

    The input is scanned once from left to right, so `\\\\n` becomes a backslash
    followed by `n` rather than a newline.
    """
    return _ESCAPE_RE.sub(lambda m: _ESCAPES[m.group(1)], text)


def render_header(description: Optional[str] = None) -> str:
    """
    Build the preamble written before the first file section.

    Args:
        description: Optional free-text description; escape sequences are expanded

    Returns:
        Header text ending in a newline
    """
    header = FORMAT_EXPLANATION
    if description:
        header += "\n" + unescape_string(description) + "\n"
    header += "\n" + INSTRUCTION_NOTE + "\n"
    return header


def render_section_header(rel_path: str) -> str:
    """Delimiter and path lines that open a file section."""
    return f"{SECTION_DELIMITER}\n{rel_path}\n"


def render_footer() -> str:
    """Terminator line written after the last file section."""
    return END_MARKER + "\n"

"""
Content-type sniffing for repo-dump.

Classifies a byte sample by magic numbers and markup signatures, falling back to a
control-byte check that separates plain text from opaque binary data. Only the
leading bytes of a file are inspected, so the answer is a heuristic.
"""

from __future__ import annotations

import chardet

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN_UTF8 = "text/plain; charset=utf-8"

# Only this many leading bytes are considered
MAX_SNIFF_BYTES = 512

# Bytes that never appear in text content (C0 controls other than TAB, LF, FF, CR, ESC)
_BINARY_BYTES = frozenset(
    list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20))
)

_WHITESPACE = b"\t\n\x0c\r "

# Markup that identifies HTML when followed by a space or '>'
_HTML_TAGS = [
    b"<!DOCTYPE HTML",
    b"<HTML",
    b"<HEAD",
    b"<SCRIPT",
    b"<IFRAME",
    b"<H1",
    b"<DIV",
    b"<FONT",
    b"<TABLE",
    b"<A",
    b"<STYLE",
    b"<TITLE",
    b"<B",
    b"<BODY",
    b"<BR",
    b"<P",
    b"<!--",
]

# (prefix, content type); checked in order
_EXACT_SIGNATURES: list[tuple[bytes, str]] = [
    # Text with byte order marks
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_PLAIN_UTF8),
    # Documents
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    # Images
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    # Audio and video
    (b"ID3", "audio/mpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    # Fonts
    (b"\x00\x01\x00\x00", "font/ttf"),
    (b"OTTO", "font/otf"),
    (b"ttcf", "font/collection"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    # Archives
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
    # Executables
    (b"\x7fELF", OCTET_STREAM),
]

# RIFF and FORM containers: (container tag, form type at offset 8, content type)
_CONTAINER_SIGNATURES: list[tuple[bytes, bytes, str]] = [
    (b"RIFF", b"WEBPVP", "image/webp"),
    (b"RIFF", b"AVI ", "video/avi"),
    (b"RIFF", b"WAVE", "audio/wave"),
    (b"FORM", b"AIFF", "audio/aiff"),
]


def _match_html(data: bytes) -> bool:
    """Check for a leading HTML tag (case-insensitive, whitespace skipped)."""
    stripped = data.lstrip(_WHITESPACE)
    upper = stripped.upper()
    for tag in _HTML_TAGS:
        if not upper.startswith(tag):
            continue
        terminator = stripped[len(tag):len(tag) + 1]
        if terminator in (b" ", b">"):
            return True
    return False


def _match_xml(data: bytes) -> bool:
    return data.lstrip(_WHITESPACE).startswith(b"<?xml")


def _match_mp4(data: bytes) -> bool:
    """Check for an ISO base media file whose brand list mentions mp4."""
    if len(data) < 12 or data[4:8] != b"ftyp":
        return False
    box_size = int.from_bytes(data[:4], "big")
    if box_size % 4 != 0 or len(data) < box_size:
        return False
    for offset in range(8, box_size, 4):
        if offset == 12:
            # Minor version, not a brand
            continue
        if data[offset:offset + 3] == b"mp4":
            return True
    return False


def _is_utf8(sample: bytes) -> bool:
    """Return whether `sample` is UTF-8, allowing a sequence cut off at the end."""
    try:
        sample.decode("utf-8")
        return True
    except UnicodeDecodeError as e:
        # A multi-byte character split by the sampling window is still UTF-8
        return e.reason == "unexpected end of data" and e.start >= len(sample) - 3


def detect_charset(sample: bytes) -> str:
    """Detect a charset label for a text sample.

    UTF-8 is preferred; `chardet` is consulted only when strict UTF-8 decoding fails,
    which keeps plain ASCII and UTF-8 sources from being reported as Latin-1.
    The label is informational only: files are always copied as raw bytes. It is
    carried on each `DumpEntry` and shown by `repo-dump files --all`.

    Args:
        sample: Leading bytes of a text file.

    Returns:
        A lowercase charset name (e.g., `"utf-8"`, `"windows-1252"`).
    """
    if not sample or _is_utf8(sample):
        return "utf-8"

    result = chardet.detect(sample)
    encoding = result.get("encoding")
    if not isinstance(encoding, str) or not encoding:
        return "utf-8"

    encoding = encoding.lower()
    if encoding in ("ascii", "utf8"):
        return "utf-8"
    return encoding


def detect_content_type(data: bytes) -> str:
    """Determine the MIME type of a byte sample.

    Signatures are checked in a fixed order: markup, byte order marks and magic
    numbers first, then a scan for control bytes that do not occur in text. Empty
    input is plain text.

    Args:
        data: Leading bytes of a file; anything past 512 bytes is ignored.

    Returns:
        A MIME type string such as `"text/plain; charset=utf-8"` or `"image/png"`.
        Unrecognised non-text data yields `"application/octet-stream"`.
    """
    data = data[:MAX_SNIFF_BYTES]

    if _match_html(data):
        return "text/html; charset=utf-8"
    if _match_xml(data):
        return "text/xml; charset=utf-8"

    for prefix, content_type in _EXACT_SIGNATURES:
        if data.startswith(prefix):
            return content_type

    for container, form, content_type in _CONTAINER_SIGNATURES:
        if data[:4] == container and data[8:8 + len(form)] == form:
            return content_type

    if _match_mp4(data):
        return "video/mp4"

    if any(b in _BINARY_BYTES for b in data):
        return OCTET_STREAM

    charset = detect_charset(data)
    return f"text/plain; charset={charset}"


def is_text_content_type(content_type: str) -> bool:
    """Return whether a MIME type denotes text."""
    return content_type.startswith("text/")

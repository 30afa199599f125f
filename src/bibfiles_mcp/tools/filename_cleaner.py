"""
Removes characters that cannot appear in file names on common filesystems.
"""

# control characters plus the characters reserved on Windows
ILLEGAL_CHARS = frozenset(chr(c) for c in range(32)) | frozenset('"*/:<>?\\|')


def is_char_legal(ch: str) -> bool:
    """Whether a single character may appear in a file name."""
    return ch not in ILLEGAL_CHARS


def clean_file_name(name: str) -> str:
    """Replace illegal characters with ``_`` and trim surrounding whitespace."""
    cleaned = ''.join(ch if is_char_legal(ch) else '_' for ch in name)
    return cleaned.strip()

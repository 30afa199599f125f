"""
Document types that can be linked from entries.

Extension checks are case-insensitive, so ``paper.PDF`` counts as a PDF.
"""

import logging
import os
from pathlib import Path


logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = ('.pdf', '.epub', '.djvu', '.ps')

# Only PDFs carry an XMP packet we can read
XMP_EXTENSIONS = ('.pdf',)


def is_supported_document(path: Path) -> bool:
    return path.suffix.lower() in SUPPORTED_EXTENSIONS


def find_document_files(directory: Path, recursive: bool = False) -> list[Path]:
    """
    List the supported documents in a directory.

    Args:
        directory: Directory to scan
        recursive: Also scan nested directories

    Returns:
        Documents sorted by name within each directory; a directory's own
        files come before those of its subdirectories, which are visited in
        name order
    """
    def _on_error(error: OSError) -> None:
        logger.warning(f"Skipping unreadable directory while listing documents: {error}")

    documents: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            path = Path(dirpath) / filename
            if is_supported_document(path) and path.is_file():
                documents.append(path)
        if not recursive:
            break
    return documents


def document_filename(name: str, source_path: Path) -> str:
    """Target file name for a document; supported extensions are lowercased.

    >>> document_filename("smith2023", Path("paper.EPUB"))
    'smith2023.epub'
    """
    suffix = source_path.suffix
    if suffix.lower() in SUPPORTED_EXTENSIONS:
        suffix = suffix.lower()
    return f"{name}{suffix}"

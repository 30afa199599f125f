"""
Importers that turn files into parser results.

Only path-based importing is supported; the XMP importer refuses text
streams because PDF metadata cannot be read from decoded text.
"""

from pathlib import Path
from typing import IO, Protocol, runtime_checkable

from bibfiles_mcp.config import XmpPreferences
from bibfiles_mcp.parser_result import ParserResult
from bibfiles_mcp.tools.formats import XMP_EXTENSIONS
from bibfiles_mcp.tools.xmp_utils import has_metadata, read_xmp


class UnsupportedImportError(NotImplementedError):
    """Raised when an importer is called through an overload it does not support."""
    pass


@runtime_checkable
class Importer(Protocol):
    """Protocol shared by importer implementations."""

    id: str
    name: str
    description: str
    extensions: tuple[str, ...]

    def import_database(self, file_path: Path, encoding: str = "utf-8") -> ParserResult:
        ...

    def is_recognized_format(self, file_path: Path, encoding: str = "utf-8") -> bool:
        ...


def _require(value, name: str) -> None:
    if value is None:
        raise TypeError(f"{name} must not be None")


class XmpImporter:
    """Wraps the XMP utility functions to be used as an importer."""

    id = "xmp"
    name = "XMP-annotated PDF"
    description = "Wraps the XMP utility functions to be used as an importer."
    extensions = XMP_EXTENSIONS

    def __init__(self, preferences: XmpPreferences):
        self.preferences = preferences

    def import_database_from_reader(self, reader: IO[str]) -> ParserResult:
        _require(reader, "reader")
        raise UnsupportedImportError(
            "XmpImporter does not support import_database_from_reader(reader). "
            "Instead use import_database(file_path, encoding)."
        )

    def import_database(self, file_path: Path, encoding: str = "utf-8") -> ParserResult:
        """Read entries from the PDF's XMP metadata; I/O errors become an invalid result."""
        _require(file_path, "file_path")
        try:
            entries = read_xmp(Path(file_path), self.preferences)
        except OSError as e:
            return ParserResult.from_error(e)
        return ParserResult(entries=entries, file_path=Path(file_path))

    def is_recognized_format_from_reader(self, reader: IO[str]) -> bool:
        _require(reader, "reader")
        raise UnsupportedImportError(
            "XmpImporter does not support is_recognized_format_from_reader(reader). "
            "Instead use is_recognized_format(file_path, encoding)."
        )

    def is_recognized_format(self, file_path: Path, encoding: str = "utf-8") -> bool:
        """
        Whether the file is a PDF whose metadata contains at least one entry.

        Raises:
            FileNotFoundError: if the file does not exist
        """
        _require(file_path, "file_path")
        return has_metadata(Path(file_path), self.preferences)

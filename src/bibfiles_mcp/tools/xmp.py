"""
XMP import tools for bibfiles-mcp.

Implements tools for reading entries from XMP-annotated PDFs:
- import_xmp: Import the entries embedded in a PDF
- check_xmp: Whether a PDF carries importable metadata
"""

from pathlib import Path
from typing import Any

from bibfiles_mcp.config import config_manager
from bibfiles_mcp.tools.importer import XmpImporter


def _importer() -> XmpImporter:
    return XmpImporter(config_manager.load().xmp)


async def import_xmp(file_path: str) -> dict[str, Any]:
    """
    Import the bibliography entries stored in a PDF's metadata.

    Args:
        file_path: Path to the PDF

    Returns:
        Dictionary with the imported entries and any warnings
    """
    try:
        result = _importer().import_database(Path(file_path).expanduser())
        if result.is_invalid:
            return {
                'success': False,
                'error': {
                    'code': 'XMP_IMPORT_FAILED',
                    'message': result.error_message,
                }
            }
        return {
            'success': True,
            'count': len(result.entries),
            'entries': [entry.model_dump() for entry in result.entries],
            'warnings': result.warnings,
        }
    except Exception as e:
        return {
            'success': False,
            'error': {
                'code': 'XMP_IMPORT_ERROR',
                'message': str(e),
            }
        }


async def check_xmp(file_path: str) -> dict[str, Any]:
    """Report whether a PDF carries metadata the XMP importer can use."""
    try:
        path = Path(file_path).expanduser()
        return {
            'success': True,
            'path': str(path),
            'recognized': _importer().is_recognized_format(path),
        }
    except FileNotFoundError as e:
        return {
            'success': False,
            'error': {
                'code': 'FILE_NOT_FOUND',
                'message': str(e),
            }
        }
    except Exception as e:
        return {
            'success': False,
            'error': {
                'code': 'XMP_CHECK_ERROR',
                'message': str(e),
            }
        }

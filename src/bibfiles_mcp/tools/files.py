"""
Linked-file tools for bibfiles-mcp.

Implements tools for working with the documents linked from entries:
- disambiguate_paths: Short display labels for a list of paths
- list_linked_documents: Documents in the file directories, with labels
- find_linked_file: Locate a file by name in the file directories
- suggest_file_name: File name for an entry from the naming pattern
- rename_linked_file: Rename a document after its entry
- copy_linked_file: Copy a document into a file directory
"""

from pathlib import Path
from typing import Any, Optional

from bibfiles_mcp.config import config_manager
from bibfiles_mcp.model import BibEntry
from bibfiles_mcp.tools.file_util import (
    copy_file,
    create_file_name_from_pattern,
    find_in_directories,
    rename_file,
    shorten_file_name,
)
from bibfiles_mcp.tools.formats import document_filename, find_document_files
from bibfiles_mcp.tools.paths import unique_path_substrings


def _error(code: str, message: str) -> dict[str, Any]:
    return {
        'success': False,
        'error': {
            'code': code,
            'message': message,
        }
    }


def _directories(directories: Optional[list[str]]) -> list[Path]:
    if directories:
        return [Path(d).expanduser() for d in directories]
    return config_manager.load().files.directories


async def disambiguate_paths(paths: list[str], separator: Optional[str] = None) -> dict[str, Any]:
    """
    Compute the shortest distinguishing suffix of each path.

    Args:
        paths: Path strings
        separator: Segment separator (defaults to the platform separator)

    Returns:
        Dictionary with one label per path, in input order
    """
    try:
        if separator:
            labels = unique_path_substrings(paths, separator)
        else:
            labels = unique_path_substrings(paths)
        return {
            'success': True,
            'count': len(labels),
            'labels': [{'path': p, 'label': l} for p, l in zip(paths, labels)],
        }
    except Exception as e:
        return _error('DISAMBIGUATE_ERROR', str(e))


async def list_linked_documents(directories: Optional[list[str]] = None) -> dict[str, Any]:
    """
    List the supported documents in the file directories and their subdirectories.

    Each document gets the shortest label that tells it apart from the others.
    """
    try:
        dirs = _directories(directories)
        if not dirs:
            return _error('NO_FILE_DIRECTORIES', 'No file directories configured or given')

        documents: list[Path] = []
        for directory in dirs:
            if directory.is_dir():
                documents.extend(find_document_files(directory, recursive=True))

        labels = unique_path_substrings([str(d) for d in documents])
        return {
            'success': True,
            'count': len(documents),
            'documents': [
                {'path': str(doc), 'label': label}
                for doc, label in zip(documents, labels)
            ],
        }
    except Exception as e:
        return _error('LIST_ERROR', str(e))


async def find_linked_file(filename: str, directories: Optional[list[str]] = None) -> dict[str, Any]:
    """
    Search the file directories (recursively) for a file name.

    Returns:
        Dictionary with every hit, at most one per directory
    """
    try:
        dirs = _directories(directories)
        found = find_in_directories(filename, dirs)
        return {
            'success': True,
            'filename': filename,
            'found': bool(found),
            'paths': [str(p) for p in found],
        }
    except Exception as e:
        return _error('FIND_ERROR', str(e))


async def suggest_file_name(entry: dict[str, Any], pattern: Optional[str] = None) -> dict[str, Any]:
    """
    Suggest a file name (without extension) for an entry.

    Args:
        entry: Entry as a dictionary (entry_type, citation_key, fields, files)
        pattern: Naming pattern; defaults to the configured one
    """
    try:
        bib_entry = BibEntry(**entry)
        pattern = pattern or config_manager.load().files.file_name_pattern
        return {
            'success': True,
            'pattern': pattern,
            'file_name': create_file_name_from_pattern(None, bib_entry, pattern),
        }
    except Exception as e:
        return _error('SUGGEST_ERROR', str(e))


async def rename_linked_file(
    file_path: str,
    entry: dict[str, Any],
    pattern: Optional[str] = None,
    replace_existing: Optional[bool] = None,
) -> dict[str, Any]:
    """
    Rename a linked document after its entry, keeping the extension.

    Returns:
        Dictionary with the new path and its form relative to the file directories
    """
    try:
        preferences = config_manager.load().files
        source = Path(file_path).expanduser()
        if not source.exists():
            return _error('FILE_NOT_FOUND', f'File does not exist: {source}')

        bib_entry = BibEntry(**entry)
        name = create_file_name_from_pattern(None, bib_entry, pattern or preferences.file_name_pattern)
        new_name = document_filename(name, source)
        if replace_existing is None:
            replace_existing = preferences.replace_existing

        if new_name == source.name:
            return {
                'success': True,
                'renamed': False,
                'path': str(source),
                'message': 'File already has the suggested name',
            }

        if not rename_file(source, Path(new_name), replace_existing):
            return _error('RENAME_FAILED', f'Could not rename {source.name} to {new_name}')

        new_path = source.parent / new_name
        return {
            'success': True,
            'renamed': True,
            'path': str(new_path),
            'link': str(shorten_file_name(new_path.resolve(), [d.resolve() for d in preferences.directories])),
        }
    except Exception as e:
        return _error('RENAME_ERROR', str(e))


async def copy_linked_file(
    file_path: str,
    destination_dir: Optional[str] = None,
    replace_existing: Optional[bool] = None,
) -> dict[str, Any]:
    """
    Copy a document into a file directory (the first configured one by default).
    """
    try:
        preferences = config_manager.load().files
        source = Path(file_path).expanduser()
        if not source.is_file():
            return _error('FILE_NOT_FOUND', f'File does not exist: {source}')

        if destination_dir:
            target_dir = Path(destination_dir).expanduser()
        elif preferences.directories:
            target_dir = preferences.directories[0]
        else:
            return _error('NO_FILE_DIRECTORIES', 'No destination given and no file directories configured')

        if replace_existing is None:
            replace_existing = preferences.replace_existing

        target_dir.mkdir(parents=True, exist_ok=True)
        destination = target_dir / source.name
        if not copy_file(source, destination, replace_existing):
            return _error('COPY_FAILED', f'Could not copy {source} to {destination}')

        return {
            'success': True,
            'path': str(destination),
            'link': str(shorten_file_name(destination.resolve(), [d.resolve() for d in preferences.directories])),
        }
    except Exception as e:
        return _error('COPY_ERROR', str(e))

"""
Filesystem helpers for linked documents.

File names and extensions, copy and rename, shortening against the library's
file directories, recursive search, and name suggestions from a pattern.
Failures are logged and reported through the return value.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from bibfiles_mcp.model import BibDatabase, BibEntry
from bibfiles_mcp.tools.filename_cleaner import clean_file_name
from bibfiles_mcp.tools.layout import LayoutError, render

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "default"


def get_file_name(file_name_with_extension: str) -> str:
    """Name part of a file name, i.e. everything in front of the last ``.``."""
    dot = file_name_with_extension.rfind('.')
    if dot >= 0:
        return file_name_with_extension[:dot]
    return file_name_with_extension


def add_extension(path: Path, extension: str) -> Path:
    """
    Add an extension to a path without replacing the existing one.

    >>> add_extension(Path("demo.bib"), ".sav")
    PosixPath('demo.bib.sav')
    """
    path = Path(path)
    return path.with_name(path.name + extension)


def copy_file(source: Path, destination: Path, replace_existing: bool) -> bool:
    """
    Copy a file.

    Args:
        source: File to copy
        destination: Target path
        replace_existing: Whether an existing destination may be overwritten

    Returns:
        True if the copy succeeded, False if it failed or was refused
    """
    source = Path(source)
    destination = Path(destination)

    if not source.exists():
        logger.error(f"Source file does not exist: {source}")
        return False
    if destination.exists() and not replace_existing:
        logger.error(f"Destination already exists and may not be replaced: {destination}")
        return False

    try:
        shutil.copy2(source, destination)
        return True
    except OSError as e:
        logger.error(f"Copying {source} to {destination} failed: {e}")
        return False


def rename_file(from_file: Path, to_file: Path, replace_existing: bool = False) -> bool:
    """
    Rename a file.

    ``to_file`` is resolved against the directory of ``from_file``, so a bare
    file name renames in place while an absolute path moves the file.

    Returns:
        True if the rename succeeded, False otherwise
    """
    from_file = Path(from_file)
    target = from_file.parent / to_file

    try:
        if not from_file.exists():
            raise FileNotFoundError(f"Source file does not exist: {from_file}")
        if target.exists() and not replace_existing:
            raise FileExistsError(f"Target already exists: {target}")
        shutil.move(str(from_file), str(target))
        return True
    except OSError as e:
        logger.error(f"Renaming {from_file} to {target} failed: {e}")
        return False


def shorten_file_name(file: Path, dirs: list[Path]) -> Path:
    """
    Convert an absolute file to one relative to the containing directory.

    Directories are tried deepest first, so ``/home/user/lit/important`` wins
    over ``/home/user/lit`` regardless of the order given. The file is
    returned unchanged if it is relative or lies in none of the directories.
    """
    file = Path(file)
    if not file.is_absolute():
        return file

    for directory in sorted((Path(d) for d in dirs), key=lambda d: len(d.parts), reverse=True):
        try:
            return file.relative_to(directory)
        except ValueError:
            continue
    return file


def get_list_of_linked_files(entries: list[BibEntry], file_dirs: list[Path]) -> list[Path]:
    """
    Absolute paths of all linked files that can be found.

    Args:
        entries: Entries whose linked files are collected
        file_dirs: Directories to try for expanding relative links

    Returns:
        Found files in entry order; may be empty
    """
    if not isinstance(entries, list) or not isinstance(file_dirs, list):
        raise TypeError("entries and file_dirs must be lists")

    found = []
    for entry in entries:
        for linked in entry.files:
            path = linked.find_in(file_dirs)
            if path is not None:
                found.append(path)
    return found


def create_file_name_from_pattern(
    database: Optional[BibDatabase],
    entry: BibEntry,
    file_name_pattern: str,
) -> str:
    """
    Suggest a file name for an entry's linked document.

    Falls back to the citation key, then to ``default``, when the pattern
    is malformed or renders empty. Illegal characters are replaced.
    """
    target_name = None
    try:
        target_name = render(file_name_pattern, entry, database)
    except LayoutError as e:
        logger.info(f"Wrong format {e}")

    if not target_name:
        target_name = entry.citation_key or DEFAULT_FILE_NAME

    return clean_file_name(target_name)


def find_file(filename: str, root_directory: Path) -> Optional[Path]:
    """
    Find a file inside a directory tree.

    Nested directories are searched too; entries are visited in sorted order.

    Returns:
        The first regular file named exactly ``filename``, or None
    """
    root_directory = Path(root_directory)
    if not root_directory.is_dir():
        logger.error(f"Error trying to locate the file {filename} inside the directory {root_directory}")
        return None

    def _on_error(error: OSError) -> None:
        logger.error(f"Error trying to locate the file {filename} inside the directory {root_directory}: {error}")

    for dirpath, dirnames, filenames in os.walk(root_directory, onerror=_on_error):
        dirnames.sort()
        if filename in filenames:
            candidate = Path(dirpath) / filename
            if candidate.is_file():
                return candidate
    return None


def find_in_directories(filename: str, directories: list[Path]) -> list[Path]:
    """
    Find a file inside several directory trees.

    Returns:
        One hit per directory that contains the file, in directory order
    """
    files = []
    for directory in directories:
        found = find_file(filename, directory)
        if found is not None:
            files.append(found)
    return files

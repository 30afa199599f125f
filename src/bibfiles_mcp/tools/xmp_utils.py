"""
XMP utility functions for bibfiles-mcp.

Reads Dublin Core metadata from a PDF's XMP packet with PyPDF2 and maps it
onto bibliography entries. PDFs without usable XMP fall back to the document
information dictionary.
"""

import logging
from datetime import date, datetime
from pathlib import Path
from typing import Any, Optional
from xml.parsers.expat import ExpatError

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from bibfiles_mcp.config import XmpPreferences
from bibfiles_mcp.model import BibEntry

logger = logging.getLogger(__name__)

BIBTEX_INFO_PREFIX = "/bibtex/"
RELATION_KEY_PREFIX = "bibtexkey/"


class XmpReadError(OSError):
    """Raised when a PDF cannot be parsed."""
    pass


def _lang_alt(value: Optional[dict[str, str]]) -> Optional[str]:
    """Pick the default-language text of an ``rdf:Alt`` value."""
    if not value:
        return None
    text = value.get('x-default') or next(iter(value.values()), None)
    return text.strip() if text else None


def _bag(value: Optional[list[Any]]) -> list[str]:
    if not value:
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _first_date(xmp: Any) -> Optional[date]:
    """First ``dc:date`` value; PyPDF2 rejects dates that are not ISO 8601."""
    try:
        dates = xmp.dc_date or []
    except ValueError as e:
        logger.warning(f"Ignoring unparseable dc:date: {e}")
        return None
    for value in dates:
        if isinstance(value, (datetime, date)):
            return value
    return None


def dublin_core_to_entry(xmp: Any) -> Optional[BibEntry]:
    """
    Map the Dublin Core schema of an ``XmpInformation`` onto an entry.

    Returns None if the packet carries none of the mapped properties.
    """
    entry = BibEntry()

    creators = _bag(xmp.dc_creator)
    if creators:
        entry.set_field('author', ' and '.join(creators))

    contributors = _bag(xmp.dc_contributor)
    if contributors:
        entry.set_field('editor', ' and '.join(contributors))

    # PyPDF2 widens year-only dates to January 1st
    issued = _first_date(xmp)
    if issued is not None:
        entry.set_field('year', str(issued.year))
        entry.set_field('month', str(issued.month))

    abstract = _lang_alt(xmp.dc_description)
    if abstract:
        entry.set_field('abstract', abstract)

    if xmp.dc_identifier:
        entry.set_field('doi', str(xmp.dc_identifier).strip())

    publishers = _bag(xmp.dc_publisher)
    if publishers:
        entry.set_field('publisher', ' and '.join(publishers))

    subjects = _bag(xmp.dc_subject)
    if subjects:
        entry.set_field('keywords', ', '.join(subjects))

    title = _lang_alt(xmp.dc_title)
    if title:
        entry.set_field('title', title)

    rights = _lang_alt(xmp.dc_rights)
    if rights:
        entry.set_field('rights', rights)

    languages = _bag(xmp.dc_language)
    if languages:
        entry.set_field('language', languages[0])

    for relation in _bag(xmp.dc_relation):
        if relation.startswith(RELATION_KEY_PREFIX):
            entry.citation_key = relation[len(RELATION_KEY_PREFIX):]

    types = _bag(xmp.dc_type)
    if types:
        entry.entry_type = types[0].lower()

    if not entry.fields and entry.citation_key is None:
        return None
    return entry


def document_info_to_entry(info: Any) -> Optional[BibEntry]:
    """
    Map a PDF document information dictionary onto an entry.

    Besides the standard keys, ``/bibtex/<field>`` keys written by
    bibliography tools are read back verbatim.
    """
    if not info:
        return None

    entry = BibEntry()
    standard = {
        '/Author': 'author',
        '/Title': 'title',
        '/Subject': 'abstract',
        '/Keywords': 'keywords',
    }
    for key, field in standard.items():
        value = info.get(key)
        if value and str(value).strip():
            entry.set_field(field, str(value).strip())

    for key, value in info.items():
        if not key.startswith(BIBTEX_INFO_PREFIX) or value is None:
            continue
        field = key[len(BIBTEX_INFO_PREFIX):]
        if field == 'entrytype':
            entry.entry_type = str(value).strip().lower()
        elif field in ('bibtexkey', 'citationkey'):
            entry.citation_key = str(value).strip()
        elif field:
            entry.set_field(field, str(value).strip())

    if not entry.fields and entry.citation_key is None:
        return None
    return entry


def apply_privacy_filter(entry: BibEntry, preferences: XmpPreferences) -> BibEntry:
    """Drop the filtered fields when the privacy filter is on."""
    if preferences.use_privacy_filter:
        for field in preferences.privacy_filter:
            entry.fields.pop(field.lower(), None)
    return entry


def _open(filepath: Path) -> PdfReader:
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"File does not exist: {filepath}")
    try:
        return PdfReader(str(filepath))
    except PdfReadError as e:
        raise XmpReadError(f"Could not read PDF {filepath}: {e}") from e


def read_xmp(filepath: Path, preferences: XmpPreferences) -> list[BibEntry]:
    """
    Read bibliography entries from a PDF's metadata.

    Args:
        filepath: Path to the PDF file
        preferences: XMP preferences (privacy filter)

    Returns:
        The entries found; empty if the PDF carries no usable metadata

    Raises:
        FileNotFoundError: if the file does not exist
        XmpReadError: if the file is not a readable PDF
    """
    reader = _open(filepath)
    entries: list[BibEntry] = []

    try:
        xmp = reader.xmp_metadata
    except (PdfReadError, ExpatError, ValueError) as e:
        logger.warning(f"Ignoring malformed XMP packet in {filepath}: {e}")
        xmp = None

    if xmp is not None:
        try:
            entry = dublin_core_to_entry(xmp)
        except (PdfReadError, ExpatError, ValueError) as e:
            logger.warning(f"Ignoring unreadable Dublin Core schema in {filepath}: {e}")
            entry = None
        if entry is not None:
            entries.append(entry)

    if not entries:
        try:
            info = reader.metadata
        except PdfReadError as e:
            raise XmpReadError(f"Could not read document information of {filepath}: {e}") from e
        entry = document_info_to_entry(info)
        if entry is not None:
            entries.append(entry)

    return [apply_privacy_filter(e, preferences) for e in entries]


def has_metadata(filepath: Path, preferences: XmpPreferences) -> bool:
    """
    Whether a PDF carries metadata that maps onto at least one entry.

    Raises:
        FileNotFoundError: if the file does not exist
    """
    try:
        return bool(read_xmp(filepath, preferences))
    except XmpReadError as e:
        logger.debug(f"No metadata: {e}")
        return False

"""
Renders bracket patterns such as ``[bibtexkey] - [title]`` against an entry.

A pattern is literal text mixed with ``[field]`` or ``[field:modifier]``
placeholders. Modifiers chain left to right: ``[auth:lower:truncate8]``.

Special fields:
- bibtexkey / citationkey: the entry's citation key
- auth: last name of the first author
- authors: all author last names joined by ``_``
- entrytype: the entry type

Any other name reads the entry field (following crossref through the
database). Missing fields render as an empty string.
"""

import re
from typing import Optional

from bibfiles_mcp.model import BibDatabase, BibEntry


class LayoutError(ValueError):
    """Raised for malformed patterns."""
    pass


_TRUNCATE = re.compile(r'^truncate(\d+)$')


def parse_pattern(pattern: str) -> list[tuple[str, str]]:
    """
    Split a pattern into ``('text', value)`` and ``('field', spec)`` tokens.

    Raises:
        LayoutError: on unbalanced brackets or empty placeholders
    """
    tokens: list[tuple[str, str]] = []
    text: list[str] = []
    i = 0
    while i < len(pattern):
        ch = pattern[i]
        if ch == ']':
            raise LayoutError(f"Unexpected ']' at position {i} in pattern {pattern!r}")
        if ch != '[':
            text.append(ch)
            i += 1
            continue

        end = pattern.find(']', i + 1)
        if end == -1:
            raise LayoutError(f"Unclosed '[' at position {i} in pattern {pattern!r}")
        spec = pattern[i + 1:end]
        if '[' in spec:
            raise LayoutError(f"Nested '[' in pattern {pattern!r}")
        if not spec.strip():
            raise LayoutError(f"Empty placeholder at position {i} in pattern {pattern!r}")

        if text:
            tokens.append(('text', ''.join(text)))
            text = []
        tokens.append(('field', spec.strip()))
        i = end + 1

    if text:
        tokens.append(('text', ''.join(text)))
    return tokens


def split_authors(authors: str) -> list[str]:
    """Split a BibTeX author list on ``and``."""
    return [a.strip() for a in re.split(r'\s+and\s+', authors) if a.strip()]


def last_name(author: str) -> str:
    """Last name from ``Last, First`` or ``First Last``."""
    author = author.strip().strip('{}')
    if ',' in author:
        return author.split(',')[0].strip()
    words = author.split()
    return words[-1] if words else ''


def _field_value(name: str, entry: BibEntry, database: Optional[BibDatabase]) -> str:
    key = name.lower()
    if key in ('bibtexkey', 'citationkey'):
        return entry.citation_key or ''
    if key == 'entrytype':
        return entry.entry_type

    if key in ('auth', 'authors'):
        authors = _resolve(entry, 'author', database)
        if not authors:
            return ''
        names = [last_name(a) for a in split_authors(authors)]
        if key == 'auth':
            return names[0] if names else ''
        return '_'.join(n for n in names if n)

    return _resolve(entry, key, database) or ''


def _resolve(entry: BibEntry, name: str, database: Optional[BibDatabase]) -> Optional[str]:
    if database is None:
        return entry.get_field(name)
    return database.resolve_field(entry, name)


def _apply_modifier(value: str, modifier: str) -> str:
    modifier = modifier.strip().lower()
    if modifier == 'lower':
        return value.lower()
    if modifier == 'upper':
        return value.upper()
    if modifier == 'title':
        return value.title()
    if modifier == 'removebraces':
        return value.replace('{', '').replace('}', '')

    match = _TRUNCATE.match(modifier)
    if match:
        return value[:int(match.group(1))].rstrip()

    raise LayoutError(f"Unknown modifier: {modifier}")


def render(pattern: str, entry: BibEntry, database: Optional[BibDatabase] = None) -> str:
    """
    Render a pattern for an entry.

    Raises:
        LayoutError: if the pattern is malformed or uses an unknown modifier
    """
    parts = []
    for kind, value in parse_pattern(pattern):
        if kind == 'text':
            parts.append(value)
            continue

        name, *modifiers = value.split(':')
        rendered = _field_value(name.strip(), entry, database)
        for modifier in modifiers:
            rendered = _apply_modifier(rendered, modifier)
        parts.append(rendered)

    return re.sub(r'\s+', ' ', ''.join(parts)).strip()

"""
Bibliography data model: entries, their linked files, and databases.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field


class LinkedFile(BaseModel):
    """A document linked from a bibliography entry."""
    link: str
    file_type: str = ""
    description: str = ""

    def find_in(self, directories: list[Path]) -> Optional[Path]:
        """
        Locate the linked file on disk.

        An absolute link is returned as-is when it exists. A relative link is
        tried against each directory in order.
        """
        path = Path(self.link).expanduser()
        if path.is_absolute():
            return path if path.exists() else None

        for directory in directories:
            candidate = Path(directory) / path
            if candidate.exists():
                return candidate.resolve()
        return None


class BibEntry(BaseModel):
    """A single bibliography entry."""
    entry_type: str = "misc"
    citation_key: Optional[str] = None
    fields: dict[str, str] = Field(default_factory=dict)
    files: list[LinkedFile] = Field(default_factory=list)

    def get_field(self, name: str) -> Optional[str]:
        return self.fields.get(name.lower())

    def set_field(self, name: str, value: str) -> None:
        self.fields[name.lower()] = value

    def has_field(self, name: str) -> bool:
        return name.lower() in self.fields


class BibDatabase(BaseModel):
    """An ordered collection of entries."""
    entries: list[BibEntry] = Field(default_factory=list)

    def insert_entry(self, entry: BibEntry) -> None:
        self.entries.append(entry)

    def get_entry_by_key(self, citation_key: str) -> Optional[BibEntry]:
        for entry in self.entries:
            if entry.citation_key == citation_key:
                return entry
        return None

    def resolve_field(self, entry: BibEntry, name: str) -> Optional[str]:
        """Read a field, following the entry's crossref when it is missing."""
        value = entry.get_field(name)
        if value is not None:
            return value

        crossref = entry.get_field("crossref")
        if crossref:
            parent = self.get_entry_by_key(crossref)
            if parent is not None and parent is not entry:
                return parent.get_field(name)
        return None

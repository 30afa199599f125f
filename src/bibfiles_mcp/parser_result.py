"""
Generic result container returned by importers.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from bibfiles_mcp.model import BibDatabase, BibEntry


class ParserResult(BaseModel):
    """Entries parsed from a source plus any warnings raised on the way."""
    entries: list[BibEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    file_path: Optional[Path] = None
    invalid: bool = False

    @classmethod
    def from_error(cls, error: Exception) -> "ParserResult":
        """Build an invalid result carrying the exception's message."""
        message = str(error) or type(error).__name__
        return cls(warnings=[message], invalid=True)

    def add_warning(self, message: str) -> None:
        if message not in self.warnings:
            self.warnings.append(message)

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    @property
    def is_invalid(self) -> bool:
        return self.invalid

    @property
    def error_message(self) -> str:
        return "\n".join(self.warnings)

    @property
    def database(self) -> BibDatabase:
        return BibDatabase(entries=list(self.entries))

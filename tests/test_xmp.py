"""
Tests for XMP import.

PyPDF2's PdfReader is mocked so the mapping from XMP/document information
onto entries can be checked without real PDF fixtures. Date handling is
checked against XmpInformation parsing real packets.
"""

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import MagicMock, PropertyMock, patch

import pytest
from PyPDF2.errors import PdfReadError
from PyPDF2.xmp import XmpInformation

from bibfiles_mcp.config import XmpPreferences
from bibfiles_mcp.parser_result import ParserResult
from bibfiles_mcp.tools.importer import Importer, UnsupportedImportError, XmpImporter
from bibfiles_mcp.tools.xmp_utils import (
    XmpReadError,
    document_info_to_entry,
    dublin_core_to_entry,
    has_metadata,
    read_xmp,
)


DC_PROPERTIES = (
    "dc_contributor", "dc_creator", "dc_date", "dc_description", "dc_identifier",
    "dc_language", "dc_publisher", "dc_relation", "dc_rights", "dc_subject",
    "dc_title", "dc_type",
)


def make_xmp(**values) -> SimpleNamespace:
    """An XmpInformation stand-in with every Dublin Core property unset."""
    props = {name: None for name in DC_PROPERTIES}
    props.update(values)
    return SimpleNamespace(**props)


def mock_reader(xmp=None, info=None) -> MagicMock:
    reader = MagicMock()
    reader.xmp_metadata = xmp
    reader.metadata = info
    return reader


def packet(title=None, creators=(), date=None) -> XmpInformation:
    """Parse an XMP packet with PyPDF2, as reader.xmp_metadata would."""
    body = ""
    if title is not None:
        body += (
            "<dc:title><rdf:Alt>"
            f'<rdf:li xml:lang="x-default">{title}</rdf:li>'
            "</rdf:Alt></dc:title>"
        )
    if creators:
        items = "".join(f"<rdf:li>{c}</rdf:li>" for c in creators)
        body += f"<dc:creator><rdf:Seq>{items}</rdf:Seq></dc:creator>"
    if date is not None:
        body += f"<dc:date><rdf:Seq><rdf:li>{date}</rdf:li></rdf:Seq></dc:date>"

    xml = (
        '<x:xmpmeta xmlns:x="adobe:ns:meta/">'
        '<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#">'
        '<rdf:Description rdf:about="" xmlns:dc="http://purl.org/dc/elements/1.1/">'
        f"{body}"
        "</rdf:Description>"
        "</rdf:RDF>"
        "</x:xmpmeta>"
    )
    stream = MagicMock()
    stream.get_data.return_value = xml.encode("utf-8")
    return XmpInformation(stream)


@pytest.fixture
def pdf_file(tmp_path: Path) -> Path:
    path = tmp_path / "paper.pdf"
    path.write_bytes(b"%PDF-1.4 fake")
    return path


@pytest.fixture
def prefs() -> XmpPreferences:
    return XmpPreferences()


FULL_XMP = dict(
    dc_title={"x-default": "Measurement Error Models"},
    dc_creator=["Smith, John", "Doe, Jane"],
    dc_contributor=["Editor, Ed"],
    dc_date=[datetime(2020, 5, 1)],
    dc_description={"x-default": "An abstract."},
    dc_identifier="10.1000/xyz123",
    dc_publisher=["Springer"],
    dc_subject=["statistics", "measurement"],
    dc_rights={"x-default": "CC-BY"},
    dc_language=["en"],
    dc_relation=["bibtexkey/smith2020"],
    dc_type=["Article"],
)


class TestDublinCore:
    """Tests for mapping Dublin Core onto entries."""

    def test_full_mapping(self):
        entry = dublin_core_to_entry(make_xmp(**FULL_XMP))

        assert entry.entry_type == "article"
        assert entry.citation_key == "smith2020"
        assert entry.fields == {
            "author": "Smith, John and Doe, Jane",
            "editor": "Editor, Ed",
            "year": "2020",
            "month": "5",
            "abstract": "An abstract.",
            "doi": "10.1000/xyz123",
            "publisher": "Springer",
            "keywords": "statistics, measurement",
            "title": "Measurement Error Models",
            "rights": "CC-BY",
            "language": "en",
        }

    def test_title_without_default_language(self):
        entry = dublin_core_to_entry(make_xmp(dc_title={"de": "Titel"}))
        assert entry.get_field("title") == "Titel"

    def test_empty_packet(self):
        assert dublin_core_to_entry(make_xmp()) is None


class TestXmpPacket:
    """Tests against PyPDF2's own XmpInformation parsing a real packet."""

    def test_iso_date(self):
        entry = dublin_core_to_entry(packet(title="Paper", date="2019-11-03"))
        assert entry.get_field("year") == "2019"
        assert entry.get_field("month") == "11"

    def test_year_month_date(self):
        entry = dublin_core_to_entry(packet(title="Paper", date="2018-07"))
        assert entry.get_field("year") == "2018"
        assert entry.get_field("month") == "7"

    def test_year_only_date_is_january(self):
        entry = dublin_core_to_entry(packet(title="Paper", date="2018"))
        assert entry.get_field("year") == "2018"
        assert entry.get_field("month") == "1"

    def test_non_iso_date_skipped(self):
        entry = dublin_core_to_entry(
            packet(title="Measurement Error Models", creators=["Smith, John"], date="May 2020")
        )
        assert entry.get_field("title") == "Measurement Error Models"
        assert entry.get_field("author") == "Smith, John"
        assert not entry.has_field("year")
        assert not entry.has_field("month")

    def test_import_with_non_iso_date(self, pdf_file, prefs):
        xmp = packet(title="Measurement Error Models", creators=["Smith, John"], date="May 2020")
        reader = mock_reader(xmp=xmp, info={"/Title": "Info Title"})
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            result = XmpImporter(prefs).import_database(pdf_file)
            recognized = XmpImporter(prefs).is_recognized_format(pdf_file)

        assert not result.is_invalid
        assert [e.get_field("title") for e in result.entries] == ["Measurement Error Models"]
        assert not result.entries[0].has_field("year")
        assert recognized is True

    def test_only_bad_date_falls_back_to_document_info(self, pdf_file, prefs):
        reader = mock_reader(xmp=packet(date="May 2020"), info={"/Title": "Info Title"})
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entries = read_xmp(pdf_file, prefs)

        assert [e.get_field("title") for e in entries] == ["Info Title"]

    def test_only_bad_date_without_document_info(self, pdf_file, prefs):
        reader = mock_reader(xmp=packet(date="May 2020"), info=None)
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            assert has_metadata(pdf_file, prefs) is False


class TestDocumentInfo:
    """Tests for the document information fallback."""

    def test_standard_keys(self):
        entry = document_info_to_entry({
            "/Title": "A Title",
            "/Author": "Smith, John",
            "/Subject": "Abstract text",
            "/Keywords": "a, b",
            "/Producer": "ignored",
        })
        assert entry.fields == {
            "title": "A Title",
            "author": "Smith, John",
            "abstract": "Abstract text",
            "keywords": "a, b",
        }

    def test_bibtex_keys(self):
        entry = document_info_to_entry({
            "/bibtex/entrytype": "Book",
            "/bibtex/bibtexkey": "doe2019",
            "/bibtex/isbn": "978-3-16-148410-0",
        })
        assert entry.entry_type == "book"
        assert entry.citation_key == "doe2019"
        assert entry.get_field("isbn") == "978-3-16-148410-0"

    def test_empty(self):
        assert document_info_to_entry(None) is None
        assert document_info_to_entry({"/Producer": "LaTeX"}) is None


class TestReadXmp:
    """Tests for read_xmp and has_metadata."""

    def test_reads_xmp(self, pdf_file, prefs):
        reader = mock_reader(xmp=make_xmp(**FULL_XMP), info={"/Title": "Info Title"})
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entries = read_xmp(pdf_file, prefs)

        assert len(entries) == 1
        assert entries[0].get_field("title") == "Measurement Error Models"

    def test_falls_back_to_document_info(self, pdf_file, prefs):
        reader = mock_reader(xmp=None, info={"/Title": "Info Title"})
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entries = read_xmp(pdf_file, prefs)

        assert [e.get_field("title") for e in entries] == ["Info Title"]

    def test_falls_back_when_xmp_empty(self, pdf_file, prefs):
        reader = mock_reader(xmp=make_xmp(), info={"/Author": "Doe"})
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entries = read_xmp(pdf_file, prefs)

        assert [e.get_field("author") for e in entries] == ["Doe"]

    def test_no_metadata(self, pdf_file, prefs):
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=mock_reader()):
            assert read_xmp(pdf_file, prefs) == []
            assert has_metadata(pdf_file, prefs) is False

    def test_privacy_filter(self, pdf_file):
        prefs = XmpPreferences(use_privacy_filter=True, privacy_filter=["abstract", "Rights"])
        reader = mock_reader(xmp=make_xmp(**FULL_XMP))
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entry = read_xmp(pdf_file, prefs)[0]

        assert not entry.has_field("abstract")
        assert not entry.has_field("rights")
        assert entry.has_field("title")

    def test_privacy_filter_off(self, pdf_file):
        prefs = XmpPreferences(use_privacy_filter=False, privacy_filter=["abstract"])
        reader = mock_reader(xmp=make_xmp(**FULL_XMP))
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entry = read_xmp(pdf_file, prefs)[0]

        assert entry.has_field("abstract")

    def test_missing_file(self, tmp_path, prefs):
        with pytest.raises(FileNotFoundError):
            read_xmp(tmp_path / "missing.pdf", prefs)
        with pytest.raises(FileNotFoundError):
            has_metadata(tmp_path / "missing.pdf", prefs)

    def test_unreadable_pdf(self, pdf_file, prefs):
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", side_effect=PdfReadError("EOF marker not found")):
            with pytest.raises(XmpReadError):
                read_xmp(pdf_file, prefs)
            assert has_metadata(pdf_file, prefs) is False

    def test_malformed_xmp_packet_ignored(self, pdf_file, prefs):
        reader = MagicMock()
        type(reader).xmp_metadata = PropertyMock(side_effect=PdfReadError("bad xmp"))
        reader.metadata = {"/Title": "Info Title"}
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entries = read_xmp(pdf_file, prefs)

        assert [e.get_field("title") for e in entries] == ["Info Title"]

    def test_unreadable_dublin_core_ignored(self, pdf_file, prefs):
        xmp = MagicMock()
        type(xmp).dc_creator = PropertyMock(side_effect=ValueError("bad creator"))
        reader = mock_reader(xmp=xmp, info={"/Title": "Info Title"})
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            entries = read_xmp(pdf_file, prefs)

        assert [e.get_field("title") for e in entries] == ["Info Title"]


class TestXmpImporter:
    """Tests for the XMP importer."""

    def test_metadata(self, prefs):
        importer = XmpImporter(prefs)
        assert importer.id == "xmp"
        assert importer.name == "XMP-annotated PDF"
        assert importer.extensions == (".pdf",)
        assert isinstance(importer, Importer)

    def test_import_database(self, pdf_file, prefs):
        reader = mock_reader(xmp=make_xmp(**FULL_XMP))
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=reader):
            result = XmpImporter(prefs).import_database(pdf_file)

        assert isinstance(result, ParserResult)
        assert not result.is_invalid
        assert result.file_path == pdf_file
        assert [e.citation_key for e in result.entries] == ["smith2020"]
        assert result.database.get_entry_by_key("smith2020") is not None

    def test_import_database_wraps_read_errors(self, pdf_file, prefs):
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", side_effect=PdfReadError("broken")):
            result = XmpImporter(prefs).import_database(pdf_file)

        assert result.is_invalid
        assert result.entries == []
        assert "broken" in result.error_message

    def test_import_database_missing_file(self, tmp_path, prefs):
        result = XmpImporter(prefs).import_database(tmp_path / "missing.pdf")
        assert result.is_invalid
        assert "does not exist" in result.error_message

    def test_reader_overloads_unsupported(self, prefs):
        importer = XmpImporter(prefs)
        with pytest.raises(UnsupportedImportError, match="import_database"):
            importer.import_database_from_reader(MagicMock())
        with pytest.raises(NotImplementedError):
            importer.is_recognized_format_from_reader(MagicMock())

    def test_none_arguments(self, prefs):
        importer = XmpImporter(prefs)
        with pytest.raises(TypeError):
            importer.import_database(None)
        with pytest.raises(TypeError):
            importer.is_recognized_format(None)
        with pytest.raises(TypeError):
            importer.import_database_from_reader(None)

    def test_is_recognized_format(self, pdf_file, prefs):
        importer = XmpImporter(prefs)
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=mock_reader(xmp=make_xmp(**FULL_XMP))):
            assert importer.is_recognized_format(pdf_file) is True
        with patch("bibfiles_mcp.tools.xmp_utils.PdfReader", return_value=mock_reader()):
            assert importer.is_recognized_format(pdf_file) is False

    def test_is_recognized_format_missing_file(self, tmp_path, prefs):
        with pytest.raises(FileNotFoundError):
            XmpImporter(prefs).is_recognized_format(tmp_path / "missing.pdf")


class TestParserResult:
    def test_from_error(self):
        result = ParserResult.from_error(OSError("disk on fire"))
        assert result.is_invalid
        assert result.has_warnings
        assert result.error_message == "disk on fire"

    def test_from_error_without_message(self):
        assert ParserResult.from_error(OSError()).error_message == "OSError"

    def test_add_warning_deduplicates(self):
        result = ParserResult()
        result.add_warning("a")
        result.add_warning("a")
        assert result.warnings == ["a"]
        assert not result.is_invalid

"""Tests for file discovery, metadata extraction and analysis loading."""

from __future__ import annotations

import json
import zipfile
from datetime import datetime
from pathlib import Path

import pymupdf
import pytest
from PIL import ExifTags, Image

from tidyname.classification import AnalysisLoadError, load_analysis_results
from tidyname.ingestion import DirectoryScanner, FileInfo, MetadataExtractor


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "inbox"
    (root / "sub").mkdir(parents=True)
    (root / "a.txt").write_text("a")
    (root / "b.jpg").write_bytes(b"jpg")
    (root / ".hidden").write_text("h")
    (root / "sub" / "c.txt").write_text("c")
    return root


def _names(files) -> list[str]:
    return [file.relative_path for file in files]


def test_scanner_filters(tree: Path) -> None:
    assert _names(DirectoryScanner().scan(tree)) == ["a.txt", "b.jpg"]
    assert _names(DirectoryScanner(recursive=True).scan(tree)) == ["a.txt", "b.jpg", "sub/c.txt"]
    assert _names(DirectoryScanner(extensions=[".JPG"]).scan(tree)) == ["b.jpg"]
    assert ".hidden" in _names(DirectoryScanner(include_hidden=True).scan(tree))
    assert list(DirectoryScanner().scan(tree / "missing")) == []


def test_file_info_from_path(tree: Path) -> None:
    info = FileInfo.from_path(tree / "a.txt", root=tree)

    assert info.name == "a"
    assert info.extension == "txt"
    assert info.full_name == "a.txt"
    assert info.size == 1
    assert info.path == str((tree / "a.txt").resolve())


def test_extracts_exif_from_jpeg(tmp_path: Path) -> None:
    path = tmp_path / "photo.jpg"
    exif = Image.Exif()
    exif[ExifTags.Base.Make] = "Canon"
    exif[ExifTags.Base.Model] = "EOS R5"
    exif[ExifTags.Base.DateTime] = "2024:03:15 10:30:00"
    Image.new("RGB", (4, 3), "red").save(path, exif=exif)

    metadata = MetadataExtractor().extract(FileInfo.from_path(path))

    assert metadata.extraction_status == "success"
    assert metadata.image is not None
    assert metadata.image.camera_make == "Canon"
    assert metadata.image.camera_model == "EOS R5"
    assert metadata.image.date_taken == datetime(2024, 3, 15, 10, 30)
    assert (metadata.image.width, metadata.image.height) == (4, 3)


def test_unreadable_image_reports_failure(tree: Path) -> None:
    metadata = MetadataExtractor().extract(FileInfo.from_path(tree / "b.jpg"))

    assert metadata.extraction_status == "failed"
    assert metadata.image is None
    assert metadata.extraction_error


def test_unsupported_file_has_no_metadata(tree: Path) -> None:
    files = list(DirectoryScanner().scan(tree))

    extracted = MetadataExtractor().extract_many(files)

    text = extracted[str((tree / "a.txt").resolve())]
    assert text.extraction_status == "unsupported"
    assert not text.has_content()


def test_extracts_office_core_properties(tmp_path: Path) -> None:
    path = tmp_path / "report.docx"
    core = (
        '<cp:coreProperties xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
        'xmlns:dc="http://purl.org/dc/elements/1.1/" xmlns:dcterms="http://purl.org/dc/terms/">'
        "<dc:title>Quarterly Report</dc:title><dc:creator>Ada</dc:creator>"
        "<dcterms:created>2024-01-31T09:00:00Z</dcterms:created>"
        "</cp:coreProperties>"
    )
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("docProps/core.xml", core)

    metadata = MetadataExtractor().extract(FileInfo.from_path(path))

    assert metadata.office is not None
    assert metadata.office.title == "Quarterly Report"
    assert metadata.office.creator == "Ada"
    assert metadata.office.created is not None
    assert metadata.office.created.year == 2024


def test_extracts_pdf_document_info(tmp_path: Path) -> None:
    path = tmp_path / "invoice.pdf"
    doc = pymupdf.open()
    doc.new_page()
    doc.new_page()
    doc.set_metadata(
        {
            "title": "Invoice 42",
            "author": "Ada Lovelace",
            "keywords": "billing",
            "creationDate": "D:20240315103000+01'00'",
        }
    )
    doc.save(path)
    doc.close()

    metadata = MetadataExtractor().extract(FileInfo.from_path(path))

    assert metadata.extraction_status == "success"
    assert metadata.pdf is not None
    assert metadata.pdf.title == "Invoice 42"
    assert metadata.pdf.author == "Ada Lovelace"
    assert metadata.pdf.keywords == "billing"
    assert metadata.pdf.page_count == 2
    assert metadata.pdf.creation_date == datetime(2024, 3, 15, 10, 30)


def test_unreadable_pdf_reports_failure(tmp_path: Path) -> None:
    path = tmp_path / "empty.pdf"
    path.write_bytes(b"")

    metadata = MetadataExtractor().extract(FileInfo.from_path(path))

    assert metadata.extraction_status == "failed"
    assert metadata.pdf is None
    assert metadata.extraction_error


def test_load_analysis_results_accepts_list_and_mapping(tmp_path: Path) -> None:
    listed = tmp_path / "list.json"
    listed.write_text(
        json.dumps(
            [{"filePath": "/photos/a.jpg", "suggestion": {"suggestedName": "beach", "confidence": 0.9}}]
        )
    )
    mapped = tmp_path / "map.json"
    mapped.write_text(
        json.dumps({"/photos/b.jpg": {"suggestion": {"suggestedName": "dunes", "confidence": 0.4}}})
    )

    from_list = load_analysis_results(listed)
    from_map = load_analysis_results(mapped)

    assert from_list["/photos/a.jpg"].suggestion.suggested_name == "beach"
    assert from_map["/photos/b.jpg"].suggestion.confidence == pytest.approx(0.4)


def test_load_analysis_results_rejects_invalid_documents(tmp_path: Path) -> None:
    broken = tmp_path / "broken.json"
    broken.write_text("{nope")
    invalid = tmp_path / "invalid.json"
    invalid.write_text(json.dumps([{"filePath": "/a", "suggestion": {"confidence": 2}}]))

    with pytest.raises(AnalysisLoadError):
        load_analysis_results(broken)
    with pytest.raises(AnalysisLoadError):
        load_analysis_results(invalid)
    with pytest.raises(AnalysisLoadError):
        load_analysis_results(tmp_path / "missing.json")

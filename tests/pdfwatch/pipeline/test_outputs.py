"""Tests for output naming and archiving."""

from __future__ import annotations

from pathlib import Path

import pytest

from pdfwatch.kernel.domain.folders import OutputMode
from pdfwatch.pipeline.outputs import archive_original, compute_output_path, output_filename


class TestComputeOutputPath:
    def test_pdf_to_word_in_subfolder(self) -> None:
        path = compute_output_path(Path("/in/report.pdf"), "pdf-to-word", OutputMode.subfolder())
        assert path == Path("/in/Processed/report_pdf-to-word.docx")

    def test_same_folder(self) -> None:
        path = compute_output_path(Path("/in/report.pdf"), "compress", OutputMode.same_folder())
        assert path == Path("/in/report_compress.pdf")

    def test_custom_folder(self) -> None:
        path = compute_output_path(
            Path("/in/report.pdf"), "pdf-to-jpg", OutputMode.custom("/srv/out")
        )
        assert path == Path("/srv/out/report_pdf-to-jpg.zip")

    @pytest.mark.parametrize(
        ("tool_id", "name"),
        [
            ("pdf-to-excel", "scan_pdf-to-excel.xlsx"),
            ("ocr", "scan_ocr.pdf"),
            ("something-new", "scan_something-new.pdf"),
        ],
    )
    def test_filenames(self, tool_id: str, name: str) -> None:
        assert output_filename(Path("/x/scan.PDF"), tool_id) == name


class TestArchiveOriginal:
    def test_moves_into_originals(self, tmp_path: Path) -> None:
        source = tmp_path / "report.pdf"
        source.write_bytes(b"original")

        destination = archive_original(source)

        assert destination == tmp_path / "Originals" / "report.pdf"
        assert destination.read_bytes() == b"original"
        assert not source.exists()

    def test_collision_gets_timestamp_suffix(self, tmp_path: Path) -> None:
        (tmp_path / "Originals").mkdir()
        (tmp_path / "Originals" / "report.pdf").write_bytes(b"older")
        source = tmp_path / "report.pdf"
        source.write_bytes(b"newer")

        destination = archive_original(source, now=1700000000)

        assert destination == tmp_path / "Originals" / "report_1700000000.pdf"
        assert destination.read_bytes() == b"newer"
        assert (tmp_path / "Originals" / "report.pdf").read_bytes() == b"older"

    def test_missing_source_raises(self, tmp_path: Path) -> None:
        with pytest.raises(OSError):
            archive_original(tmp_path / "gone.pdf")

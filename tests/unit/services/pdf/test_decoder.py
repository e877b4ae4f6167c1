"""Tests for the PyMuPDF decoding boundary, using PDFs generated in memory."""

import pytest

from app.exceptions import ExtractionError
from app.services.pdf import DecoderConfig, PDFExtractor, PyMuPDFDecoder


class TestPyMuPDFDecoder:
    """Tests for PyMuPDFDecoder against real PDF bytes."""

    def test_decodes_runs_in_pdf_space(self, pdf_builder):
        """Baseline positions come back with a bottom-up y."""
        content = pdf_builder([[("Hello", 72, 72)]])

        with PyMuPDFDecoder().open(content) as document:
            page = document.decode_page(1)

        assert document.page_count == 1
        assert page.viewport_width == pytest.approx(612)
        assert page.viewport_height == pytest.approx(792)
        assert len(page.runs) == 1
        run = page.runs[0]
        assert run.text.strip() == "Hello"
        assert run.origin_x == pytest.approx(72, abs=0.5)
        assert run.origin_y == pytest.approx(792 - 72, abs=0.5)
        assert run.width > 0
        assert run.height > 0

    def test_scale_applies_to_geometry(self, pdf_builder):
        content = pdf_builder([[("Scaled", 100, 100)]])

        with PyMuPDFDecoder(DecoderConfig(scale=2.0)).open(content) as document:
            page = document.decode_page(1)

        assert page.viewport_width == pytest.approx(1224)
        assert page.runs[0].origin_x == pytest.approx(200, abs=1)

    def test_rejects_unreadable_bytes(self):
        with pytest.raises(Exception):
            PyMuPDFDecoder().open(b"this is not a pdf")


class TestExtractRealPDF:
    """End-to-end extraction over generated PDFs."""

    def test_extracts_text_and_fragments(self, sample_pdf):
        result = PDFExtractor().extract(sample_pdf)

        assert result.page_count == 2
        assert result.pages[0].startswith("Introduction to physics")
        assert "\n" in result.pages[0]
        assert "gravity" in result.pages[1]
        assert result.text.full_text.index("Forces") < result.text.full_text.index("Newton")
        assert {f.page_number for f in result.fragments} == {1, 2}

    def test_normalized_position_matches_baseline(self, pdf_builder):
        content = pdf_builder([[("Hello", 61.2, 79.2)]])

        result = PDFExtractor().extract(content)

        fragment = result.fragments[0]
        assert fragment.x == pytest.approx(0.1, abs=0.002)
        assert fragment.y == pytest.approx(0.1, abs=0.002)
        assert 0 < fragment.height < 0.05

    def test_blank_page_counts(self, pdf_builder):
        content = pdf_builder([[("Cover", 72, 72)], []])

        result = PDFExtractor().extract(content)

        assert result.page_count == 2
        assert result.pages[1] == ""
        assert result.text.full_text == "Cover"

    def test_repeated_extraction_is_identical(self, sample_pdf):
        first = PDFExtractor().extract(sample_pdf)
        second = PDFExtractor().extract(sample_pdf)

        assert first.text.full_text == second.text.full_text
        assert first.fragments == second.fragments

    def test_corrupt_pdf_raises_extraction_error(self):
        with pytest.raises(ExtractionError):
            PDFExtractor().extract(b"%PDF-1.7 truncated garbage")

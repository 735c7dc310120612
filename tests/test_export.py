"""Tests for PDF/DOCX export."""

import io
from pathlib import Path
from unittest.mock import patch

import pytest

from gap_tailor.errors import RenderError
from gap_tailor.export import download_filename, render_docx, render_html_preview, render_pdf
from gap_tailor.export.pdf_fallback import sections_to_pdf_fpdf2
from gap_tailor.models.tailoring import Section


class TestHtmlPreview:
    def test_contains_header_and_bullets(self, sample_tailored):
        html = render_html_preview(sample_tailored.sections, title="My Resume", byline="By me")
        assert "My Resume" in html
        assert "By me" in html
        assert "Experience" in html
        assert "Cut warehouse costs by 30%" in html
        assert "Helped reduce warehouse costs" not in html

    def test_escapes_markup(self):
        html = render_html_preview([Section(title="S", tailored_bullets=["<script>x</script>"])])
        assert "<script>x</script>" not in html
        assert "&lt;script&gt;" in html

    def test_empty_sections_header_only(self):
        html = render_html_preview([])
        assert "Tailored Resume" in html
        assert "<h2" not in html


class TestRenderPdf:
    def test_pdf_bytes(self, sample_tailored):
        assert render_pdf(sample_tailored.sections).startswith(b"%PDF")

    def test_empty_sections_still_valid(self):
        assert render_pdf([]).startswith(b"%PDF")

    def test_unicode_bullets(self):
        section = Section(title="Skills", tailored_bullets=["Résumé • naïve café – 1M rows"])
        assert render_pdf([section]).startswith(b"%PDF")

    def test_failure_is_render_error(self):
        with patch(
            "gap_tailor.export.pdf_renderer._html_to_pdf", side_effect=ValueError("broken")
        ):
            with pytest.raises(RenderError, match="Failed to generate PDF"):
                render_pdf([])

    def test_template_failure_is_render_error(self):
        from jinja2 import TemplateNotFound

        with patch(
            "gap_tailor.export.pdf_renderer.BASE_TEMPLATE_DIR", Path("/nonexistent-templates")
        ):
            with pytest.raises(RenderError, match="Failed to generate PDF") as exc_info:
                render_pdf([])
        assert isinstance(exc_info.value.__cause__, TemplateNotFound)


class TestFpdfFallback:
    def test_fallback_renders(self, sample_tailored):
        pdf = sections_to_pdf_fpdf2(sample_tailored.sections)
        assert pdf.startswith(b"%PDF")

    def test_fallback_empty(self):
        assert sections_to_pdf_fpdf2([]).startswith(b"%PDF")

    def test_fallback_without_unicode_font(self):
        with patch("gap_tailor.export.pdf_fallback._find_unicode_font", return_value=None):
            pdf = sections_to_pdf_fpdf2(
                [Section(title="Skills", tailored_bullets=["Résumé • 日本語"])]
            )
        assert pdf.startswith(b"%PDF")

    def test_used_when_weasyprint_unavailable(self, sample_tailored):
        with patch.dict("sys.modules", {"weasyprint": None}):
            pdf = render_pdf(sample_tailored.sections)
        assert pdf.startswith(b"%PDF")


class TestRenderDocx:
    def test_reopens(self, sample_tailored):
        from docx import Document

        data = render_docx(sample_tailored.sections, title="My Resume", byline="By me")
        doc = Document(io.BytesIO(data))
        texts = [p.text for p in doc.paragraphs if p.text]
        assert texts[0] == "My Resume"
        assert "By me" in texts
        assert "EXPERIENCE" in texts
        assert "Cut warehouse costs by 30% by rewriting nightly jobs" in texts

    def test_empty_sections(self):
        from docx import Document

        doc = Document(io.BytesIO(render_docx([])))
        assert [p.text for p in doc.paragraphs if p.text] == [
            "Tailored Resume",
            "Generated with Resume Tailor",
        ]


class TestDownloadFilename:
    @pytest.mark.parametrize(
        "company, expected",
        [
            ("Globex", "tailored-resume-globex.pdf"),
            ("Acme & Sons, Inc.", "tailored-resume-acme-sons-inc.pdf"),
            ("", "tailored-resume-custom.pdf"),
            (None, "tailored-resume-custom.pdf"),
            ("???", "tailored-resume-custom.pdf"),
        ],
    )
    def test_slug(self, company, expected):
        assert download_filename(company) == expected

    def test_docx_extension(self):
        assert download_filename("Globex", "docx") == "tailored-resume-globex.docx"

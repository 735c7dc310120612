from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from jinja2 import Environment, FileSystemLoader

from gap_tailor.errors import RenderError
from gap_tailor.models.tailoring import BULLET, Section

logger = logging.getLogger(__name__)

BASE_TEMPLATE_DIR = Path(__file__).parent

DEFAULT_TITLE = "Tailored Resume"
DEFAULT_BYLINE = "Generated with Resume Tailor"


def render_pdf(
    sections: Sequence[Section],
    title: str = DEFAULT_TITLE,
    byline: str = DEFAULT_BYLINE,
) -> bytes:
    """Render tailored sections to PDF bytes.

    Only ``tailored_bullets`` are rendered. An empty ``sections`` gives a
    document with just the header.
    """
    try:
        html = render_html_preview(sections, title=title, byline=byline)
        return _html_to_pdf(html, sections, title, byline)
    except RenderError:
        raise
    except Exception as exc:
        logger.exception("PDF rendering failed")
        raise RenderError(f"Failed to generate PDF: {exc}") from exc


def render_html_preview(
    sections: Sequence[Section],
    title: str = DEFAULT_TITLE,
    byline: str = DEFAULT_BYLINE,
) -> str:
    """Render tailored sections to a standalone HTML page."""
    env = Environment(
        loader=FileSystemLoader(str(BASE_TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template("resume.html")
    return template.render(
        title=title,
        byline=byline,
        sections=list(sections),
        bullet_glyph=BULLET,
    )


def _html_to_pdf(html: str, sections: Sequence[Section], title: str, byline: str) -> bytes:
    """Convert HTML to PDF bytes using WeasyPrint, with fpdf2 fallback."""
    try:
        from weasyprint import HTML
        return HTML(string=html).write_pdf()
    except (ImportError, OSError):
        logger.warning("WeasyPrint not available, using fpdf2 fallback")
        from gap_tailor.export.pdf_fallback import sections_to_pdf_fpdf2
        return sections_to_pdf_fpdf2(sections, title=title, byline=byline)

"""PDF rendering for a generated reading, built in memory with reportlab."""

from __future__ import annotations

import io
import logging
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from core.errors import RenderFailed
from core.models import ReadingRequest
from prompts.templates import DISCLAIMER, DOCUMENT_TITLE

logger = logging.getLogger(__name__)

PAGE_MARGIN = 50  # points
MUTED = colors.HexColor("#667085")


def _styles():
    styles = getSampleStyleSheet()

    def add(style):
        if style.name in styles.byName:
            return
        styles.add(style)

    add(
        ParagraphStyle(
            name="R_Brand",
            parent=styles["BodyText"],
            fontName="Helvetica-Bold",
            fontSize=11,
            leading=14,
            alignment=TA_CENTER,
            textColor=MUTED,
            spaceAfter=4,
        )
    )
    add(
        ParagraphStyle(
            name="R_Title",
            parent=styles["Heading1"],
            fontName="Helvetica-Bold",
            fontSize=20,
            leading=24,
            alignment=TA_CENTER,
            spaceAfter=14,
        )
    )
    add(
        ParagraphStyle(
            name="R_Heading",
            parent=styles["Heading2"],
            fontName="Helvetica-Bold",
            fontSize=14,
            leading=18,
            spaceBefore=12,
            spaceAfter=6,
        )
    )
    add(
        ParagraphStyle(
            name="R_Field",
            parent=styles["BodyText"],
            fontName="Helvetica",
            fontSize=12,
            leading=15,
            spaceAfter=2,
        )
    )
    add(
        ParagraphStyle(
            name="R_Body",
            parent=styles["BodyText"],
            fontName="Helvetica",
            fontSize=11,
            leading=15,
            spaceAfter=8,
        )
    )
    add(
        ParagraphStyle(
            name="R_Disclaimer",
            parent=styles["BodyText"],
            fontName="Helvetica-Oblique",
            fontSize=8.5,
            leading=11,
            textColor=MUTED,
            spaceBefore=12,
        )
    )
    return styles


def _footer(canvas, doc, brand_name: str) -> None:  # noqa: ANN001
    canvas.saveState()
    canvas.setFont("Helvetica", 8)
    canvas.setFillColor(MUTED)
    canvas.drawString(PAGE_MARGIN, PAGE_MARGIN / 2, brand_name)
    canvas.drawRightString(A4[0] - PAGE_MARGIN, PAGE_MARGIN / 2, str(doc.page))
    canvas.restoreState()


def _paragraphs(text: str) -> list[str]:
    """Split text on blank lines, keeping single line breaks inside a paragraph."""
    blocks = [b.strip() for b in text.replace("\r\n", "\n").split("\n\n")]
    return [escape(b).replace("\n", "<br/>") for b in blocks if b]


def _field(label: str, value: str, styles) -> Paragraph:
    return Paragraph(f"<b>{label}:</b> {escape(value)}", styles["R_Field"])


def render_reading_pdf(
    req: ReadingRequest,
    reading_text: str,
    brand_name: str = "Your Brand",
) -> bytes:
    """Render the reading into a PDF and return the complete document bytes."""
    styles = _styles()
    buf = io.BytesIO()

    doc = SimpleDocTemplate(
        buf,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN,
        title=DOCUMENT_TITLE,
        author=brand_name,
        subject=req.question,
        pageCompression=0,
    )

    story: list[Any] = []
    story.append(Paragraph(escape(brand_name), styles["R_Brand"]))
    story.append(Paragraph(DOCUMENT_TITLE, styles["R_Title"]))

    story.append(_field("Question", req.question, styles))
    story.append(_field("Name", req.full_name, styles))
    story.append(_field("Date of birth", req.dob, styles))
    story.append(_field("Time of birth", req.tob, styles))
    story.append(_field("Birthplace", req.birthplace, styles))
    if req.tz:
        story.append(_field("Timezone", req.tz, styles))
    if req.notes:
        story.append(_field("Notes", req.notes, styles))

    story.append(Spacer(1, 10))
    story.append(HRFlowable(width="100%", thickness=0.5, color=MUTED))
    story.append(Paragraph("Your Reading", styles["R_Heading"]))
    for para in _paragraphs(reading_text):
        story.append(Paragraph(para, styles["R_Body"]))

    story.append(Paragraph(DISCLAIMER, styles["R_Disclaimer"]))

    def on_page(canvas, d):  # noqa: ANN001
        _footer(canvas, d, brand_name)

    try:
        doc.build(story, onFirstPage=on_page, onLaterPages=on_page)
    except Exception as exc:
        logger.exception("PDF build failed")
        raise RenderFailed() from exc

    pdf = buf.getvalue()
    logger.info("Rendered reading PDF (%d bytes)", len(pdf))
    return pdf

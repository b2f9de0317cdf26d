"""
Certificate Renderer

Renders the two-page volunteer certificate PDF with reportlab.

Page 1: certificate title block, narrative sentence, custom (or default)
logo, the European flag brand mark, today's date and a footer rule.
Page 2: the volunteer's self-evaluation table followed by the team leader's
evaluation table, each with its overall rating label.

Layout values are expressed as distances from the top of the page (the way
the certificate was originally designed) and converted to reportlab's
bottom-up coordinates when drawing. The canvas is created in invariant mode,
so identical input and an identical clock produce identical bytes.
"""

import base64
import binascii
import json
import logging
import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO
from pathlib import Path
from typing import Any

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.pdfgen import canvas

from volugram.core.config import settings
from volugram.core.errors import RenderError, VolugramError
from volugram.core.languages import Language, resolve_language
from volugram.modules.certificates.content import CertificateContent, get_content
from volugram.modules.certificates.scoring import (
    ReviewCategory,
    average_rating,
    describe,
    to_categories,
)

logger = logging.getLogger(__name__)

ASSETS_DIR = Path(__file__).parent / "assets"
DEFAULT_LOGO_PATH = ASSETS_DIR / "default_logo.png"

REQUIRED_NARRATIVE_FIELDS = (
    "position",
    "hours",
    "minutes",
    "eventTitle",
    "location",
    "startDate",
    "endDate",
)

ASCENT = 0.75  # baseline offset as a fraction of the font size
LINE_GAP = 1.2  # line height as a multiple of the font size

PAGE_MARGIN = 72
FOOTER_OFFSET = 45
DATE_OFFSET = 90  # from the bottom edge

# Page 1
TITLE_TOP = 220
LOGO_SIZE = 100
LOGO_MARGIN = 50
NARRATIVE_LEADING = 1.5

# Page 2
TABLE_WIDTH = 400
RATING_COLUMN_OFFSET = 325
ROW_PITCH = 25
ROW_HEIGHT = 20
TABLE_FONT_SIZE = 20
SECTION_TITLE_SIZE = 32
SECOND_TABLE_OFFSET = 325
SELF_REVIEW_FILL = colors.HexColor("#E0F7E0")
TEAM_LEADER_FILL = colors.HexColor("#F7EBE0")

EU_BLUE = colors.HexColor("#003399")
EU_GOLD = colors.HexColor("#FFCC00")


@dataclass(frozen=True)
class CertificateFonts:
    """Registered reportlab font names used for regular and bold text."""

    regular: str = "Helvetica"
    bold: str = "Helvetica-Bold"


def load_ttf_fonts(regular_path: str | Path, bold_path: str | Path | None = None) -> CertificateFonts:
    """
    Register TrueType fonts with reportlab for certificate text.

    The glyphs are embedded in the PDF, so names outside cp1252 (Polish,
    Cyrillic, ...) print correctly when the font covers them.

    Args:
        regular_path: TTF file for regular text
        bold_path: TTF file for headings (defaults to regular_path)

    Raises:
        RenderError: If a font file cannot be loaded
    """
    names = []
    for path in (regular_path, bold_path or regular_path):
        name = f"Certificate-{Path(path).stem}"
        try:
            pdfmetrics.registerFont(TTFont(name, str(path)))
        except Exception as e:
            raise RenderError(f"cannot load font {path}: {e}") from e
        names.append(name)
    return CertificateFonts(regular=names[0], bold=names[1])


def fonts_from_settings() -> CertificateFonts:
    """Fonts named by the configuration, Helvetica when none is set."""
    if not settings.certificate_font_path:
        return CertificateFonts()
    fonts = load_ttf_fonts(settings.certificate_font_path, settings.certificate_font_bold_path)
    logger.info(f"Certificate fonts loaded: {fonts.regular}, {fonts.bold}")
    return fonts


@dataclass(frozen=True)
class CertificateData:
    """Validated certificate inputs extracted from a submission payload."""

    full_name: str
    position: str
    hours: str
    minutes: str
    event_title: str
    location: str
    start_date: str
    end_date: str
    volunteer_review: list[ReviewCategory]
    logo: bytes | None = None


def format_date(value: str) -> str:
    """
    Reformat a YYYY-MM-DD date as DD-MM-YYYY.

    Raises:
        RenderError: If the value is not a valid ISO calendar date
    """
    try:
        parsed = datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as e:
        raise RenderError(f"invalid date {value!r}, expected YYYY-MM-DD") from e
    return parsed.strftime("%d-%m-%Y")


def format_rating(rating: float) -> str:
    """Print ratings without a trailing .0 (4 -> '4', 4.3 -> '4.3')."""
    return f"{rating:g}"


def _decode_logo(value: str) -> bytes:
    """Decode a base64 logo, optionally wrapped in a data URL."""
    encoded = value.split(",", 1)[1] if value.startswith("data:") else value
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RenderError("certificate logo is not valid base64 image data") from e


def parse_submission_payload(full_name: str, payload: str | bytes | Mapping[str, Any]) -> CertificateData:
    """
    Validate a submission payload and extract the certificate fields.

    Args:
        full_name: Volunteer's full name
        payload: The submission's structured answers (JSON text or mapping)

    Returns:
        CertificateData ready for drawing

    Raises:
        RenderError: If the payload is unparsable or missing required fields
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise RenderError("submission data is not valid JSON") from e

    if not isinstance(payload, Mapping):
        raise RenderError("submission data must be a JSON object")

    if not full_name or not str(full_name).strip():
        raise RenderError("missing full name")

    missing = [
        field
        for field in REQUIRED_NARRATIVE_FIELDS
        if payload.get(field) is None or str(payload.get(field)).strip() == ""
    ]
    if missing:
        raise RenderError(f"missing required fields: {', '.join(missing)}")

    raw_review = payload.get("volunteerReview")
    if not isinstance(raw_review, list) or not raw_review:
        raise RenderError("volunteerReview must be a non-empty list")
    try:
        volunteer_review = to_categories(raw_review)
    except ValueError as e:
        raise RenderError(str(e)) from e

    logo_value = payload.get("certificateLogo")
    logo = _decode_logo(logo_value) if isinstance(logo_value, str) and logo_value else None

    return CertificateData(
        full_name=str(full_name),
        position=str(payload["position"]),
        hours=str(payload["hours"]),
        minutes=str(payload["minutes"]),
        event_title=str(payload["eventTitle"]),
        location=str(payload["location"]),
        start_date=format_date(payload["startDate"]),
        end_date=format_date(payload["endDate"]),
        volunteer_review=volunteer_review,
        logo=logo,
    )


class CertificateRenderer:
    """
    Renders certificates; the clock supplies the printed "today" date.

    Usage:
        renderer = CertificateRenderer()
        pdf_bytes = renderer.render("John Doe", payload, "en", reviewer_categories)
    """

    def __init__(
        self,
        clock: Callable[[], date] = date.today,
        default_logo_path: Path = DEFAULT_LOGO_PATH,
        fonts: CertificateFonts | None = None,
    ):
        self._clock = clock
        self._default_logo_path = default_logo_path
        self._fonts = fonts or fonts_from_settings()

    def render(
        self,
        full_name: str,
        payload: str | bytes | Mapping[str, Any],
        language: Language | str,
        reviewer_categories: Sequence[ReviewCategory | Mapping[str, Any]],
    ) -> bytes:
        """
        Render a certificate.

        Args:
            full_name: Volunteer's full name
            payload: Submission answers including volunteerReview
            language: One of en, de, et, no
            reviewer_categories: The reviewer's rated categories

        Returns:
            PDF document bytes

        Raises:
            UnsupportedLocaleError: If the language is not supported
            RenderError: If the payload is malformed or drawing fails
            InvalidInputError: If reviewer_categories is empty
        """
        lang = resolve_language(language)
        content = get_content(lang)
        data = parse_submission_payload(full_name, payload)

        try:
            team_leader_review = to_categories(reviewer_categories)
        except ValueError as e:
            raise RenderError(str(e)) from e
        team_leader_score = average_rating(team_leader_review)
        volunteer_score = average_rating(data.volunteer_review)

        buffer = BytesIO()
        try:
            pdf = canvas.Canvas(buffer, pagesize=A4, invariant=1, pageCompression=1)
            pdf.setTitle(content.certificate_title)
            pdf.setAuthor("Volugram")

            self._draw_summary_page(pdf, content, data)
            pdf.showPage()
            self._draw_evaluation_page(
                pdf,
                content,
                lang,
                data.volunteer_review,
                volunteer_score,
                team_leader_review,
                team_leader_score,
            )
            pdf.showPage()
            pdf.save()
        except VolugramError:
            raise
        except Exception as e:
            logger.error(f"Certificate drawing failed: {e}", exc_info=True)
            raise RenderError(str(e)) from e

        return buffer.getvalue()

    # ============================================
    # Page 1
    # ============================================

    def _draw_summary_page(
        self,
        pdf: canvas.Canvas,
        content: CertificateContent,
        data: CertificateData,
    ) -> None:
        width, height = A4
        fonts = self._fonts
        top = TITLE_TOP

        top = _draw_centered(pdf, content.certificate_text, fonts.bold, 72, top)
        top = _draw_centered(pdf, content.certificate_title, fonts.bold, 18, top)
        top += 0.5 * 18 * LINE_GAP
        top = _draw_centered(pdf, data.full_name, fonts.regular, 18, top)
        top += 0.5 * 18 * LINE_GAP

        narrative = content.narrative(
            full_name=data.full_name,
            position=data.position,
            hours=data.hours,
            minutes=data.minutes,
            event_title=data.event_title,
            location=data.location,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        font_size = 14
        leading = font_size * NARRATIVE_LEADING
        for line in simpleSplit(narrative, fonts.regular, font_size, width - 2 * PAGE_MARGIN):
            pdf.setFont(fonts.regular, font_size)
            pdf.drawCentredString(width / 2, height - top - font_size * ASCENT, line)
            top += leading

        logo = ImageReader(BytesIO(data.logo)) if data.logo else ImageReader(str(self._default_logo_path))
        pdf.drawImage(
            logo,
            width - LOGO_SIZE - LOGO_MARGIN,
            height - LOGO_MARGIN - LOGO_SIZE,
            width=LOGO_SIZE,
            height=LOGO_SIZE,
            preserveAspectRatio=True,
            anchor="nw",
            mask="auto",
        )

        _draw_european_flag(pdf, LOGO_MARGIN, LOGO_MARGIN, LOGO_SIZE)

        pdf.setFont(fonts.regular, font_size)
        pdf.setFillColor(colors.black)
        pdf.drawString(
            LOGO_MARGIN,
            DATE_OFFSET - font_size * ASCENT,
            self._clock().strftime("%d/%m/%Y"),
        )

        _draw_footer_rule(pdf)

    # ============================================
    # Page 2
    # ============================================

    def _draw_evaluation_page(
        self,
        pdf: canvas.Canvas,
        content: CertificateContent,
        language: Language,
        volunteer_review: list[ReviewCategory],
        volunteer_score: float,
        team_leader_review: list[ReviewCategory],
        team_leader_score: float,
    ) -> None:
        top = _draw_centered(
            pdf, content.user_evaluation_title, self._fonts.bold, SECTION_TITLE_SIZE, PAGE_MARGIN
        )
        top += 0.5 * SECTION_TITLE_SIZE * LINE_GAP
        first_table_top = top

        top = _draw_table(
            pdf,
            content,
            volunteer_review,
            describe(volunteer_score, language),
            first_table_top,
            SELF_REVIEW_FILL,
            self._fonts.regular,
        )

        top += 3.5 * TABLE_FONT_SIZE * LINE_GAP
        top = _ensure_room(pdf, top, SECTION_TITLE_SIZE * LINE_GAP * 2 + ROW_PITCH * 2)
        top = _draw_centered(
            pdf, content.team_leader_evaluation_title, self._fonts.bold, SECTION_TITLE_SIZE, top
        )
        top += 0.5 * SECTION_TITLE_SIZE * LINE_GAP

        # The reviewer table keeps its fixed offset unless the first table pushed past it
        second_table_top = top
        if pdf.getPageNumber() == 2:
            second_table_top = max(first_table_top + SECOND_TABLE_OFFSET, top)

        _draw_table(
            pdf,
            content,
            team_leader_review,
            describe(team_leader_score, language),
            second_table_top,
            TEAM_LEADER_FILL,
            self._fonts.regular,
        )
        _draw_footer_rule(pdf)


# ============================================
# Drawing helpers
# ============================================


def _draw_centered(pdf: canvas.Canvas, text: str, font: str, size: float, top: float) -> float:
    """Draw one centered line whose top edge is `top`; return the next line's top."""
    width, height = A4
    pdf.setFillColor(colors.black)
    pdf.setFont(font, size)
    pdf.drawCentredString(width / 2, height - top - size * ASCENT, text)
    return top + size * LINE_GAP


def _draw_text(
    pdf: canvas.Canvas, text: str, x: float, top: float, size: float, font: str
) -> None:
    _, height = A4
    pdf.setFillColor(colors.black)
    pdf.setFont(font, size)
    pdf.drawString(x, height - top - size * ASCENT, text)


def _draw_rule(pdf: canvas.Canvas, x1: float, x2: float, top: float, line_width: float) -> None:
    _, height = A4
    pdf.setStrokeColor(colors.black)
    pdf.setLineWidth(line_width)
    pdf.line(x1, height - top, x2, height - top)


def _draw_footer_rule(pdf: canvas.Canvas) -> None:
    _, height = A4
    _draw_rule(pdf, 50, 550, height - FOOTER_OFFSET, 1)


def _ensure_room(pdf: canvas.Canvas, top: float, needed: float) -> float:
    """Start a new page when `needed` points no longer fit above the footer."""
    _, height = A4
    if top + needed <= height - FOOTER_OFFSET - 10:
        return top
    _draw_footer_rule(pdf)
    pdf.showPage()
    return PAGE_MARGIN


def _draw_table(
    pdf: canvas.Canvas,
    content: CertificateContent,
    categories: list[ReviewCategory],
    overall_label: str,
    table_top: float,
    fill: colors.Color,
    font: str,
) -> float:
    """
    Draw a category/rating table followed by its overall rating line.

    Rows that do not fit on the current page continue on a new one.

    Returns:
        The top of the line following the overall rating
    """
    width, height = A4
    table_x = (width - TABLE_WIDTH) / 2
    rating_x = table_x + RATING_COLUMN_OFFSET

    _draw_text(pdf, content.category, table_x, table_top, TABLE_FONT_SIZE, font)
    _draw_text(pdf, content.rating, rating_x, table_top, TABLE_FONT_SIZE, font)
    _draw_rule(pdf, table_x, table_x + TABLE_WIDTH, table_top + ROW_HEIGHT, 1)

    row_origin = table_top
    row_index = 0
    row_top = table_top
    for category in categories:
        row_index += 1
        row_top = row_origin + row_index * ROW_PITCH
        if row_top + ROW_HEIGHT > height - FOOTER_OFFSET - 10:
            _draw_footer_rule(pdf)
            pdf.showPage()
            row_origin = PAGE_MARGIN - ROW_PITCH
            row_index = 1
            row_top = PAGE_MARGIN

        pdf.setFillColor(fill)
        pdf.rect(table_x, height - row_top - ROW_HEIGHT, TABLE_WIDTH, ROW_HEIGHT, stroke=0, fill=1)
        _draw_text(pdf, category.name, table_x, row_top, TABLE_FONT_SIZE, font)
        _draw_text(pdf, format_rating(category.rating), rating_x, row_top, TABLE_FONT_SIZE, font)
        _draw_rule(pdf, table_x, table_x + TABLE_WIDTH, row_top + ROW_HEIGHT, 2)

    overall_top = _ensure_room(pdf, row_top + ROW_PITCH + 10, TABLE_FONT_SIZE * LINE_GAP)
    _draw_text(
        pdf,
        f"{content.overall_rating}: {overall_label}",
        table_x,
        overall_top,
        TABLE_FONT_SIZE,
        font,
    )
    return overall_top + TABLE_FONT_SIZE * LINE_GAP


def _star_points(cx: float, cy: float, radius: float) -> list[tuple[float, float]]:
    inner = radius * 0.382
    points = []
    for i in range(10):
        r = radius if i % 2 == 0 else inner
        angle = math.pi / 2 + i * math.pi / 5
        points.append((cx + r * math.cos(angle), cy + r * math.sin(angle)))
    return points


def _draw_european_flag(pdf: canvas.Canvas, left: float, top: float, box: float) -> None:
    """Draw the European flag (3:2) fitted into a box x box square at (left, top)."""
    _, height = A4
    flag_width = box
    flag_height = box * 2 / 3
    bottom = height - top - flag_height

    pdf.setFillColor(EU_BLUE)
    pdf.rect(left, bottom, flag_width, flag_height, stroke=0, fill=1)

    cx = left + flag_width / 2
    cy = bottom + flag_height / 2
    ring = flag_height / 3
    star_radius = flag_height / 18
    pdf.setFillColor(EU_GOLD)
    for i in range(12):
        angle = math.pi / 2 - i * math.pi / 6
        points = _star_points(cx + ring * math.cos(angle), cy + ring * math.sin(angle), star_radius)
        path = pdf.beginPath()
        path.moveTo(*points[0])
        for point in points[1:]:
            path.lineTo(*point)
        path.close()
        pdf.drawPath(path, stroke=0, fill=1)
    pdf.setFillColor(colors.black)


default_renderer = CertificateRenderer()


def render_certificate(
    full_name: str,
    payload: str | bytes | Mapping[str, Any],
    language: Language | str,
    reviewer_categories: Sequence[ReviewCategory | Mapping[str, Any]],
) -> bytes:
    """Render with the default renderer (system clock)."""
    return default_renderer.render(full_name, payload, language, reviewer_categories)

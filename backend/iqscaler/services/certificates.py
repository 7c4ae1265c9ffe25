"""
IQScaler - Certificate Service
Renders the single-page PDF certificate and gates who may fetch it
"""
import io
import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any

import fitz
import qrcode
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.ext.asyncio import AsyncSession

from iqscaler.core.exceptions import NotAuthorized, NotFoundError, PaymentRequired, ResultNotFound
from iqscaler.models.user import User
from iqscaler.services.results import ResultService, can_access_result

logger = logging.getLogger(__name__)

ISSUER = "IQScaler"
MIN_FONT_SIZE = 8
LINE_HEIGHT = 1.3
# Noto Sans from pymupdf-fonts; covers Latin, Greek and Cyrillic names
NAME_FONT = "notos"

# (minimum percentage, label), checked top to bottom
SCORE_BANDS = [
    (98, "130+ (Very Superior)"),
    (95, "125 - 129 (Superior)"),
    (90, "120 - 124 (High Average)"),
    (75, "110 - 119 (Above Average)"),
    (50, "100 - 109 (Average)"),
    (25, "90 - 99 (Low Average)"),
    (16, "80 - 89 (Below Average)"),
]
LOWEST_BAND = "Below 80 (Low)"

PRIMARY = "#0056b3"
TEXT = "#444444"
MUTED = "#555555"
SCORE = "#28a745"


def score_percentage(correct_answers: int, questions_attempted: int) -> float:
    """Percentage of correct answers to one decimal; 0 when nothing was attempted."""
    if questions_attempted <= 0:
        return 0.0
    return round(correct_answers / questions_attempted * 100, 1)


def score_band(percentage: float) -> str:
    for threshold, label in SCORE_BANDS:
        if percentage >= threshold:
            return label
    return LOWEST_BAND


def make_qr_png(data: str) -> bytes:
    """Encode `data` as a QR code PNG."""
    qr = qrcode.QRCode(border=2)
    qr.add_data(data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


@dataclass
class CertificateData:
    """Everything printed on a certificate."""
    result_id: str
    recipient: str
    correct_answers: int
    questions_attempted: int
    issued_at: datetime

    @classmethod
    def from_result(cls, result: Any) -> "CertificateData":
        return cls(
            result_id=str(result.id),
            recipient=result.user.username,
            correct_answers=result.correct_answers,
            questions_attempted=result.questions_attempted,
            issued_at=result.created_at,
        )

    @property
    def certificate_number(self) -> str:
        return self.result_id[-8:]

    @property
    def percentage(self) -> float:
        return score_percentage(self.correct_answers, self.questions_attempted)


def _rgb(hex_color: str) -> tuple[float, float, float]:
    hex_color = hex_color.lstrip("#")
    return tuple(int(hex_color[i:i + 2], 16) / 255 for i in (0, 2, 4))


def _centered_text(
    page: fitz.Page,
    top: float,
    text: str,
    fontsize: float,
    fontname: str = "helv",
    color: str = TEXT,
    lines: int = 1,
    margin: float = 20,
) -> None:
    """Write centered text, shrinking the font until it fits the box."""
    size = fontsize
    while size >= MIN_FONT_SIZE:
        rect = fitz.Rect(
            margin,
            top,
            page.rect.width - margin,
            top + size * LINE_HEIGHT * lines + 4,
        )
        overflow = page.insert_textbox(
            rect,
            text,
            fontsize=size,
            fontname=fontname,
            color=_rgb(color),
            align=fitz.TEXT_ALIGN_CENTER,
        )
        if overflow >= 0:
            return
        size -= 2
    logger.warning(f"Certificate text did not fit: {text[:40]!r}")


def render_certificate(data: CertificateData, verification_url: str) -> bytes:
    """
    Render a certificate as a complete PDF document.

    Layout is fixed (A4 landscape); the output depends only on the inputs.
    """
    qr_png = make_qr_png(verification_url)
    percentage = data.percentage

    width, height = fitz.paper_size("a4-l")
    doc = fitz.open()
    try:
        page = doc.new_page(width=width, height=height)

        # Frame
        page.draw_rect(fitz.Rect(18, 18, width - 18, height - 18), color=_rgb(PRIMARY), width=4)
        page.draw_rect(fitz.Rect(28, 28, width - 28, height - 28), color=_rgb(PRIMARY), width=1)

        y = 70
        _centered_text(page, y, "CERTIFICATE OF COGNITIVE ASSESSMENT", 30, "hebo", PRIMARY)
        y += 52
        _centered_text(page, y, "This certifies that", 22, "helv", TEXT)
        y += 36
        page.insert_font(fontname=NAME_FONT, fontbuffer=fitz.Font(NAME_FONT).buffer)
        _centered_text(page, y, data.recipient, 36, NAME_FONT, PRIMARY)
        y += 54
        _centered_text(
            page,
            y,
            f"has completed the {ISSUER} cognitive assessment, consisting of analytical, "
            "logical, and general reasoning questions and is hereby awarded a score of:",
            16,
            "helv",
            TEXT,
            lines=2,
            margin=60,
        )
        y += 52
        _centered_text(page, y, f"{percentage:.1f}%", 34, "tibo", SCORE)
        y += 46
        _centered_text(page, y, f"Assessed IQ Range: {score_band(percentage)}", 18, "heit", MUTED)
        y += 36
        _centered_text(
            page,
            y,
            "This score is derived from the individual's performance relative to a "
            "standardized scoring model based on general population benchmarks.",
            11,
            "heit",
            MUTED,
            lines=2,
            margin=80,
        )

        # Footer
        footer_y = height - 110
        side_margin = 80
        meta = [
            f"Issued by: {ISSUER}",
            f"Certificate ID: {data.certificate_number}",
            f"Date: {data.issued_at.strftime('%d/%m/%Y')}",
        ]
        for i, line in enumerate(meta):
            page.insert_text(
                (side_margin, footer_y + 14 + i * 20),
                line,
                fontsize=14,
                fontname="helv",
                color=_rgb(MUTED),
            )

        _centered_text(page, footer_y + 10, "IQ SCALER", 14, "hebo", PRIMARY)

        qr_size = 75
        qr_x = width - side_margin - qr_size
        qr_y = footer_y - 30
        page.insert_image(fitz.Rect(qr_x, qr_y, qr_x + qr_size, qr_y + qr_size), stream=qr_png)
        page.insert_textbox(
            fitz.Rect(qr_x - 10, qr_y + qr_size + 3, qr_x + qr_size + 10, qr_y + qr_size + 20),
            "Scan to Verify",
            fontsize=10,
            fontname="helv",
            color=_rgb(MUTED),
            align=fitz.TEXT_ALIGN_CENTER,
        )

        doc.set_metadata({
            "title": "Certificate of Cognitive Assessment",
            "author": ISSUER,
            "subject": f"Certificate {data.certificate_number}",
            "creator": ISSUER,
            "producer": ISSUER,
            "creationDate": "",
            "modDate": "",
        })
        return doc.tobytes(garbage=3, deflate=True, no_new_id=True)
    finally:
        doc.close()


class CertificateService:
    """Access checks and rendering for certificate downloads."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.results = ResultService(db)

    async def get_result_for_owner(self, result_id: uuid.UUID, user: User):
        """
        Result behind an authenticated download or preview.

        Raises:
            ResultNotFound: If the result does not exist
            NotAuthorized: If the user is neither the owner nor an admin
            PaymentRequired: If the certificate has not been purchased
        """
        result = await self.results.get_result(result_id)
        if not result:
            raise ResultNotFound()
        if not can_access_result(result, user):
            raise NotAuthorized()
        if not result.certificate_purchased:
            raise PaymentRequired()
        return result

    async def get_result_for_public(self, result_id: uuid.UUID):
        """Result behind a QR-code verification; ownership is not checked."""
        result = await self.results.get_result(result_id)
        if not result or not result.certificate_purchased:
            raise NotFoundError("Certificate not found or not purchased.")
        return result

    async def render(self, result: Any, verification_url: str) -> bytes:
        data = CertificateData.from_result(result)
        pdf = await run_in_threadpool(render_certificate, data, verification_url)
        logger.info(f"Rendered certificate {data.certificate_number} ({len(pdf)} bytes)")
        return pdf


def verification_url(base_url: str, path: str, result_id: uuid.UUID | str) -> str:
    return f"{base_url.rstrip('/')}/{path.strip('/')}/{result_id}"

"""
IQScaler - Certificate API Routes
PDF certificate download/preview and public QR-code verification
"""
import uuid

from fastapi import APIRouter, Query
from fastapi.responses import Response

from iqscaler.api.deps import BaseUrl, CurrentUser, DbSession
from iqscaler.services.certificates import CertificateService, verification_url

router = APIRouter(prefix="/certificates", tags=["Certificates"])

DOWNLOAD_FILENAME = "IQ_Certificate.pdf"


def _pdf_response(pdf: bytes, inline: bool) -> Response:
    disposition = "inline" if inline else f'attachment; filename="{DOWNLOAD_FILENAME}"'
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": disposition},
    )


@router.get(
    "/verify/{result_id}",
    response_class=Response,
    summary="Public certificate verification",
    description="Target of the certificate QR code; renders the certificate inline.",
)
async def verify_certificate(
    result_id: uuid.UUID,
    db: DbSession,
    base_url: BaseUrl,
) -> Response:
    service = CertificateService(db)
    result = await service.get_result_for_public(result_id)
    pdf = await service.render(result, verification_url(base_url, "verify-certificate", result_id))
    return _pdf_response(pdf, inline=True)


@router.get(
    "/{result_id}",
    response_class=Response,
    summary="Download or preview a certificate",
)
async def get_certificate(
    result_id: uuid.UUID,
    current_user: CurrentUser,
    db: DbSession,
    base_url: BaseUrl,
    preview: bool = Query(False),
) -> Response:
    """Owner or admin only, and only once the certificate has been purchased."""
    service = CertificateService(db)
    result = await service.get_result_for_owner(result_id, current_user)
    pdf = await service.render(result, verification_url(base_url, "certificates", result_id))
    return _pdf_response(pdf, inline=preview)

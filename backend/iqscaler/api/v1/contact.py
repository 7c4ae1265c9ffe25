"""
IQScaler - Contact API Routes
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from iqscaler.core.config import settings
from iqscaler.core.exceptions import UpstreamServiceError, ValidationError
from iqscaler.schemas.common import MessageResponse
from iqscaler.schemas.contact import ContactRequest
from iqscaler.services.email import Mailer, get_mailer

router = APIRouter(prefix="/contact", tags=["Contact"])


@router.post(
    "",
    response_model=MessageResponse,
    summary="Send a contact message to the administrators",
)
async def send_contact_message(
    data: ContactRequest,
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> MessageResponse:
    if not data.is_complete:
        raise ValidationError("Please fill out all fields.")

    body = (
        "A new contact message has been received:\n\n"
        f"From Name: {data.name}\n"
        f"From Email: {data.email}\n\n"
        "Message:\n"
        "------------------------------\n"
        f"{data.message}\n"
        "------------------------------\n"
    )

    try:
        await mailer.send(
            settings.ADMIN_EMAIL,
            f"New Contact Message from {data.name} ({data.email})",
            body,
        )
    except UpstreamServiceError as e:
        raise UpstreamServiceError(
            "Message received, but failed to send notification email."
        ) from e

    return MessageResponse(message="Message sent successfully. We will respond shortly.")

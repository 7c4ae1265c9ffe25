"""
IQScaler - Upload API Routes
Image uploads for questions and options (admin only)
"""
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile

from iqscaler.api.deps import AdminUser
from iqscaler.schemas.contact import UploadResponse
from iqscaler.services.uploads import ImageStorage, get_image_storage

router = APIRouter(prefix="/upload", tags=["Uploads"])


@router.post(
    "",
    response_model=UploadResponse,
    summary="Upload an image (admin)",
    description="Multipart field `image`; jpg, jpeg, png or gif.",
)
async def upload_image(
    admin: AdminUser,
    storage: Annotated[ImageStorage, Depends(get_image_storage)],
    image: UploadFile = File(...),
) -> UploadResponse:
    content = await image.read()
    image_url = storage.save(image.filename or "", content)
    return UploadResponse(image_url=image_url)

"""
IQScaler - Contact & Upload Schemas
"""
from pydantic import field_validator

from iqscaler.schemas.common import CamelModel


class ContactRequest(CamelModel):
    """Contact form; every field is required and non-blank."""
    name: str = ""
    email: str = ""
    message: str = ""

    @field_validator("name", "email", "message")
    @classmethod
    def strip(cls, v: str) -> str:
        return v.strip()

    @property
    def is_complete(self) -> bool:
        return bool(self.name and self.email and self.message)


class UploadResponse(CamelModel):
    image_url: str

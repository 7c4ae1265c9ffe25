"""
IQScaler - Common Schemas
Shared base model and small response bodies
"""
import uuid

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exposed to clients in camelCase (snake_case still accepted)."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement."""
    message: str


class SuccessMessageResponse(MessageResponse):
    success: bool = True


class UserSummary(CamelModel):
    """Owner details embedded in admin listings."""
    id: uuid.UUID
    username: str
    email: str

"""
IQScaler - Test Configuration Schemas
"""
import uuid
from datetime import datetime
from typing import Annotated

from pydantic import Field, field_validator

from iqscaler.models.question import Difficulty
from iqscaler.schemas.common import CamelModel


class DistributionEntry(CamelModel):
    """Target number of questions for one difficulty."""
    difficulty: Difficulty
    count: Annotated[int, Field(ge=0)] = 5


class TestConfigResponse(CamelModel):
    """The singleton test configuration."""
    id: uuid.UUID
    name: str
    duration_minutes: int
    total_questions: int
    difficulty_distribution: list[DistributionEntry]
    updated_at: datetime


class TestConfigUpdate(CamelModel):
    """Admin update; omitted fields keep their current value."""
    duration_minutes: Annotated[int, Field(ge=1)] | None = None
    total_questions: Annotated[int, Field(ge=1)] | None = None
    difficulty_distribution: list[DistributionEntry] | None = None

    @field_validator("difficulty_distribution")
    @classmethod
    def one_entry_per_difficulty(cls, v: list[DistributionEntry] | None):
        if v is None:
            return v
        seen = [entry.difficulty for entry in v]
        if len(seen) != len(set(seen)):
            raise ValueError("Only one distribution entry per difficulty is allowed")
        return v

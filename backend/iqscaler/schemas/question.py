"""
IQScaler - Question Schemas
Pydantic schemas for the question bank, assembled tests and answer submission
"""
import uuid
from datetime import datetime
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator

from iqscaler.models.question import Difficulty
from iqscaler.schemas.common import CamelModel, UserSummary

MIN_OPTIONS = 2
MAX_OPTIONS = 6


class QuestionOption(CamelModel):
    """A single answer option."""
    text: Annotated[str, Field(min_length=1)]
    image_url: str | None = None


class QuestionCreate(CamelModel):
    """Schema for creating a question."""
    text: Annotated[str, Field(min_length=1)]
    image_url: str | None = None
    options: Annotated[list[QuestionOption], Field(min_length=MIN_OPTIONS, max_length=MAX_OPTIONS)]
    correct_answer_index: Annotated[int, Field(ge=0)]
    difficulty: Difficulty = Difficulty.MEDIUM
    category: Annotated[str, Field(min_length=1, max_length=100)]

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Category must not be blank")
        return v

    @model_validator(mode="after")
    def check_answer_index(self):
        if self.correct_answer_index >= len(self.options):
            raise ValueError("Invalid correct answer index for the provided options.")
        return self


class QuestionUpdate(CamelModel):
    """
    Partial update.

    Options and the correct index travel together: replacing the options
    requires an index that is valid for the new list.
    """
    text: Annotated[str, Field(min_length=1)] | None = None
    image_url: str | None = None
    options: Annotated[list[QuestionOption], Field(min_length=MIN_OPTIONS, max_length=MAX_OPTIONS)] | None = None
    correct_answer_index: Annotated[int, Field(ge=0)] | None = None
    difficulty: Difficulty | None = None
    category: Annotated[str, Field(min_length=1, max_length=100)] | None = None

    @field_validator("category")
    @classmethod
    def strip_category(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("Category must not be blank")
        return v

    @model_validator(mode="after")
    def check_answer_index(self):
        if self.options is not None:
            if self.correct_answer_index is None or self.correct_answer_index >= len(self.options):
                raise ValueError("Invalid correct answer index for the provided options during update.")
        return self


class QuestionResponse(CamelModel):
    """Full question, answer key included (admin only)."""
    id: uuid.UUID
    text: str
    image_url: str | None = None
    options: list[QuestionOption]
    correct_answer_index: int
    difficulty: Difficulty
    category: str
    user: UserSummary | None = None
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Test delivery
# ============================================================================

class SanitizedOption(CamelModel):
    text: str
    image_url: str = ""


class SanitizedQuestion(CamelModel):
    """A question as delivered to a test taker: no answer key."""
    id: str
    text: str
    image_url: str = ""
    category: str
    difficulty: str
    options: list[SanitizedOption]


class AnswerItem(CamelModel):
    """
    One submitted answer.

    `selectedIndex` is taken as sent; grading coerces it to an integer and
    counts anything that does not coerce (null for a skipped question) as
    incorrect.
    """
    question_id: str
    selected_index: Any = None


class SubmitTestRequest(CamelModel):
    user_answers: list[AnswerItem] = []


class SubmitTestResponse(CamelModel):
    total_score: int
    correct_answers: int
    result_id: uuid.UUID

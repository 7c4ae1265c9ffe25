"""
IQScaler - Result Schemas
Pydantic schemas for test results and the leaderboard
"""
import uuid
from datetime import datetime

from iqscaler.schemas.common import CamelModel, UserSummary


class ResultResponse(CamelModel):
    """A completed test attempt."""
    id: uuid.UUID
    user_id: uuid.UUID
    total_score: int
    questions_attempted: int
    correct_answers: int
    difficulty_breakdown: dict[str, int]
    certificate_purchased: bool
    payment_id: str | None = None
    order_id: str | None = None
    created_at: datetime


class ResultWithUser(ResultResponse):
    """Result with owner details, for owner/admin views."""
    user: UserSummary | None = None


class LeaderboardEntry(CamelModel):
    """Best attempt of one user."""
    user_id: uuid.UUID
    username: str
    max_score: int
    test_date: datetime

"""
IQScaler - Result Service
Result lookup with ownership checks, history listings and the leaderboard
"""
import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from iqscaler.core.config import settings
from iqscaler.core.exceptions import NotAuthorized, ResultNotFound
from iqscaler.models.result import Result
from iqscaler.models.user import User


@dataclass
class LeaderboardRow:
    user_id: uuid.UUID
    username: str
    max_score: int
    test_date: datetime


def can_access_result(result: Result, user: User) -> bool:
    """Owners and admins may read a result."""
    return result.user_id == user.id or user.is_admin


class ResultService:
    """Service for reading results."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_result(self, result_id: uuid.UUID) -> Result | None:
        """Get a result with its owner loaded."""
        result = await self.db.execute(
            select(Result)
            .options(selectinload(Result.user))
            .where(Result.id == result_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_result_for_user(
        self,
        result_id: uuid.UUID,
        user: User,
        denied_message: str = "Not authorized to view this result.",
    ) -> Result:
        """
        Get a result the user is allowed to see.

        Raises:
            ResultNotFound: If the result does not exist
            NotAuthorized: If the user is neither the owner nor an admin
        """
        result = await self.get_result(result_id)
        if not result:
            raise ResultNotFound("Result not found.")
        if not can_access_result(result, user):
            raise NotAuthorized(denied_message)
        return result

    async def list_for_user(self, user_id: uuid.UUID) -> list[Result]:
        """A user's results, newest first."""
        result = await self.db.execute(
            select(Result)
            .where(Result.user_id == user_id)
            .order_by(Result.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_all(self) -> list[Result]:
        """Every result with its owner, newest first."""
        result = await self.db.execute(
            select(Result)
            .options(selectinload(Result.user))
            .order_by(Result.created_at.desc())
        )
        return list(result.scalars().all())

    async def leaderboard(self, limit: int | None = None) -> list[LeaderboardRow]:
        """
        Best attempt per user, highest first.

        A user's best attempt is their top score; among equal scores the most
        recent attempt supplies `test_date`.
        """
        limit = limit or settings.LEADERBOARD_SIZE

        ranked = (
            select(
                Result.user_id,
                Result.total_score,
                Result.created_at,
                func.row_number().over(
                    partition_by=Result.user_id,
                    order_by=(Result.total_score.desc(), Result.created_at.desc()),
                ).label("rank"),
            )
            .subquery()
        )

        query = (
            select(
                ranked.c.user_id,
                User.username,
                ranked.c.total_score,
                ranked.c.created_at,
            )
            .join(User, User.id == ranked.c.user_id)
            .where(ranked.c.rank == 1)
            .order_by(ranked.c.total_score.desc(), ranked.c.created_at.desc())
            .limit(limit)
        )

        rows = await self.db.execute(query)
        return [
            LeaderboardRow(
                user_id=row.user_id,
                username=row.username,
                max_score=row.total_score,
                test_date=row.created_at,
            )
            for row in rows.all()
        ]

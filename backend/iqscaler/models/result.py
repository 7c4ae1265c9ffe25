"""
IQScaler - Result Model
One row per submitted test; only the purchase fields change after creation
"""
import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from iqscaler.core.database import Base, utcnow

if TYPE_CHECKING:
    from iqscaler.models.user import User


def empty_breakdown() -> dict[str, int]:
    return {"easy": 0, "medium": 0, "hard": 0}


class Result(Base):
    """Completed test attempt."""

    __tablename__ = "results"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True
    )

    # Score data
    total_score: Mapped[int] = mapped_column(Integer, default=0, index=True)
    questions_attempted: Mapped[int] = mapped_column(Integer)
    correct_answers: Mapped[int] = mapped_column(Integer)
    # Correct answers per difficulty: {"easy": 2, "medium": 1, "hard": 0}
    difficulty_breakdown: Mapped[dict] = mapped_column(JSON, default=empty_breakdown)

    # Certificate purchase (set once by a verified payment)
    certificate_purchased: Mapped[bool] = mapped_column(Boolean, default=False)
    payment_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    order_id: Mapped[str | None] = mapped_column(String(100), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    user: Mapped["User"] = relationship("User")

    def __repr__(self):
        return f"<Result user={self.user_id} score={self.total_score}>"

"""
IQScaler - Question Model
Multiple-choice questions managed by admins
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from iqscaler.core.database import Base, utcnow

if TYPE_CHECKING:
    from iqscaler.models.user import User


class Difficulty(str, Enum):
    """Difficulty tiers; each carries a fixed scoring weight."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Question(Base):
    """
    A question with 2-6 ordered options.

    Options are stored as a JSON list of {"text", "imageUrl"}; list order is
    display order and `correct_answer_index` points into it.
    """

    __tablename__ = "questions"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    text: Mapped[str] = mapped_column(Text)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    options: Mapped[list[dict]] = mapped_column(JSON, default=list)
    correct_answer_index: Mapped[int] = mapped_column(Integer)
    difficulty: Mapped[Difficulty] = mapped_column(String(20), default=Difficulty.MEDIUM, index=True)
    category: Mapped[str] = mapped_column(String(100), index=True)

    # Owning admin
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        index=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    user: Mapped["User"] = relationship("User")

    def __repr__(self):
        return f"<Question {self.id} {self.difficulty}>"

"""
IQScaler - Test Configuration Model
The single configuration record describing how a test is assembled
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, DateTime, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from iqscaler.core.database import Base, utcnow

DEFAULT_CONFIG_NAME = "Default IQ Test Configuration"


class TestConfig(Base):
    """
    Test configuration.

    Exactly one live row is expected; the unique `name` guards it.
    Distribution format: [{"difficulty": "easy", "count": 5}, ...]
    """

    __tablename__ = "test_configs"
    __test__ = False  # not a pytest test class

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(100), unique=True, default=DEFAULT_CONFIG_NAME)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=15)
    total_questions: Mapped[int] = mapped_column(Integer, default=15)
    difficulty_distribution: Mapped[list[dict]] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    def __repr__(self):
        return f"<TestConfig total={self.total_questions}>"

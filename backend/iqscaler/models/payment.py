"""
IQScaler - Payment Model
One row per payment-gateway order opened for a certificate
"""
import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Float, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from iqscaler.core.database import Base, utcnow

if TYPE_CHECKING:
    from iqscaler.models.result import Result
    from iqscaler.models.user import User


class PaymentStatus(str, Enum):
    """Pending is the only non-terminal state."""
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


class Payment(Base):
    """Certificate payment keyed by the gateway's order id."""

    __tablename__ = "payments"

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
    result_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("results.id", ondelete="CASCADE"),
        index=True
    )
    razorpay_order_id: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    razorpay_payment_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    amount: Mapped[float] = mapped_column(Float)  # Major currency unit, for display
    status: Mapped[PaymentStatus] = mapped_column(String(20), default=PaymentStatus.PENDING)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow
    )

    user: Mapped["User"] = relationship("User")
    result: Mapped["Result"] = relationship("Result")

    @property
    def is_terminal(self) -> bool:
        return self.status != PaymentStatus.PENDING

    def __repr__(self):
        return f"<Payment {self.razorpay_order_id} {self.status}>"

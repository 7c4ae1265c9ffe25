"""IQScaler - Models initialization."""
from iqscaler.models.user import User
from iqscaler.models.question import Question, Difficulty
from iqscaler.models.test_config import TestConfig, DEFAULT_CONFIG_NAME
from iqscaler.models.result import Result
from iqscaler.models.payment import Payment, PaymentStatus


__all__ = [
    # User models
    "User",
    # Question bank
    "Question",
    "Difficulty",
    # Test configuration
    "TestConfig",
    "DEFAULT_CONFIG_NAME",
    # Results & payments
    "Result",
    "Payment",
    "PaymentStatus",
]

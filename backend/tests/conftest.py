"""
IQScaler - Test Configuration
Pytest fixtures and configuration for testing
"""
import os
import tempfile
import uuid

# Settings are read once at import time
os.environ["DATABASE_URL_OVERRIDE"] = "sqlite+aiosqlite://"
os.environ["ENVIRONMENT"] = "development"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="iqscaler-uploads-")
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_razorpay_secret"
os.environ["CERTIFICATE_PRICE_PAISE"] = "49900"
os.environ["CLIENT_URL"] = "http://client.test"
os.environ["SMTP_HOST"] = ""

from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from iqscaler.core.database import Base, get_db
from iqscaler.core.exceptions import UpstreamServiceError
from iqscaler.core.security import create_access_token, get_password_hash
from iqscaler.main import app
from iqscaler.models import Question, Result, TestConfig, User
from iqscaler.models.result import empty_breakdown
from iqscaler.services.email import get_mailer
from iqscaler.services.razorpay import get_payment_gateway


TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeGateway:
    """Stands in for Razorpay; records every order it opens."""

    key_id = "rzp_test_key"

    def __init__(self):
        self.orders: list[dict[str, Any]] = []

    async def create_order(self, amount, currency, receipt, notes=None):
        order = {
            "id": f"order_test_{len(self.orders) + 1}",
            "amount": amount,
            "currency": currency,
            "receipt": receipt,
            "notes": notes or {},
            "status": "created",
        }
        self.orders.append(order)
        return order


class FakeMailer:
    """Collects outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.sent: list[dict[str, str]] = []
        self.fail = False

    async def send(self, to: str, subject: str, text: str) -> None:
        if self.fail:
            raise UpstreamServiceError("Email could not be sent")
        self.sent.append({"to": to, "subject": subject, "text": text})


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh in-memory database and session for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def fake_mailer() -> FakeMailer:
    return FakeMailer()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    fake_gateway: FakeGateway,
    fake_mailer: FakeMailer,
) -> AsyncGenerator[AsyncClient, None]:
    """Test client with database, gateway and mailer overrides."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway
    app.dependency_overrides[get_mailer] = lambda: fake_mailer

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


# ============================================================================
# Data helpers
# ============================================================================

async def create_user(
    db: AsyncSession,
    username: str,
    email: str,
    password: str = "secret123",
    is_admin: bool = False,
) -> dict[str, Any]:
    """Insert a user and return its id, token and auth headers."""
    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(password),
        is_admin=is_admin,
    )
    db.add(user)
    await db.commit()
    user_id = str(user.id)
    token = create_access_token(subject=user_id)
    return {
        "id": user_id,
        "username": username,
        "email": email,
        "password": password,
        "token": token,
        "headers": {"Authorization": f"Bearer {token}"},
    }


async def create_question(
    db: AsyncSession,
    owner_id: str,
    difficulty: str = "medium",
    text: str = "Which number comes next: 2, 4, 8, ?",
    correct_answer_index: int = 0,
    category: str = "Numerical",
) -> str:
    question = Question(
        user_id=uuid.UUID(owner_id),
        text=text,
        options=[{"text": "16"}, {"text": "12"}, {"text": "10"}, {"text": "14"}],
        correct_answer_index=correct_answer_index,
        difficulty=difficulty,
        category=category,
    )
    db.add(question)
    await db.commit()
    return str(question.id)


async def create_config(
    db: AsyncSession,
    total_questions: int,
    distribution: list[dict[str, Any]],
    duration_minutes: int = 15,
) -> None:
    db.add(TestConfig(
        duration_minutes=duration_minutes,
        total_questions=total_questions,
        difficulty_distribution=distribution,
    ))
    await db.commit()


async def create_result(
    db: AsyncSession,
    owner_id: str,
    total_score: int = 10,
    correct_answers: int = 4,
    questions_attempted: int = 5,
    certificate_purchased: bool = False,
) -> str:
    result = Result(
        user_id=uuid.UUID(owner_id),
        total_score=total_score,
        correct_answers=correct_answers,
        questions_attempted=questions_attempted,
        difficulty_breakdown=empty_breakdown(),
        certificate_purchased=certificate_purchased,
    )
    db.add(result)
    await db.commit()
    return str(result.id)


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> dict[str, Any]:
    return await create_user(db_session, "alice", "alice@example.com")


@pytest_asyncio.fixture
async def other_user(db_session: AsyncSession) -> dict[str, Any]:
    return await create_user(db_session, "bob", "bob@example.com")


@pytest_asyncio.fixture
async def admin(db_session: AsyncSession) -> dict[str, Any]:
    return await create_user(db_session, "admin", "admin@example.com", is_admin=True)


@pytest.fixture
def sample_question_data() -> dict[str, Any]:
    """Question payload as the admin UI sends it."""
    return {
        "text": "Which shape completes the pattern?",
        "options": [
            {"text": "Circle"},
            {"text": "Square", "imageUrl": "/uploads/images/square.png"},
            {"text": "Triangle"},
        ],
        "correctAnswerIndex": 1,
        "difficulty": "hard",
        "category": " Spatial ",
    }

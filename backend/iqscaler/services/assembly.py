"""
IQScaler - Test Assembly
Builds a randomized, difficulty-balanced question set from the test configuration
"""
import logging
from typing import Any, Collection, Protocol, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from iqscaler.core.exceptions import ConfigurationMissing, InsufficientQuestions
from iqscaler.models.question import Question
from iqscaler.models.test_config import TestConfig
from iqscaler.schemas.question import SanitizedOption, SanitizedQuestion

logger = logging.getLogger(__name__)


class QuestionSampler(Protocol):
    """Draws random questions without replacement within one call."""

    async def sample(
        self,
        difficulty: str | None,
        size: int,
        exclude: Collection[Any] = (),
    ) -> Sequence[Any]:
        """Return up to `size` random questions; `difficulty=None` means the whole pool."""
        ...


class DatabaseSampler:
    """Random sampling through `ORDER BY random() LIMIT n`."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def sample(
        self,
        difficulty: str | None,
        size: int,
        exclude: Collection[Any] = (),
    ) -> Sequence[Question]:
        query = select(Question)
        if difficulty is not None:
            query = query.where(Question.difficulty == difficulty)
        if exclude:
            query = query.where(Question.id.notin_(list(exclude)))
        query = query.order_by(func.random()).limit(size)
        result = await self.db.execute(query)
        return result.scalars().all()


def sanitize_question(question: Any) -> SanitizedQuestion:
    """Strip the answer key and internal fields before a question leaves the server."""
    return SanitizedQuestion(
        id=str(question.id),
        text=question.text,
        image_url=question.image_url or "",
        category=question.category,
        difficulty=str(getattr(question.difficulty, "value", question.difficulty)),
        options=[
            SanitizedOption(
                text=option.get("text", ""),
                image_url=option.get("imageUrl") or "",
            )
            for option in question.options or []
        ],
    )


async def assemble_test(
    config: TestConfig | None,
    sampler: QuestionSampler,
) -> list[SanitizedQuestion]:
    """
    Assemble a test.

    Each (difficulty, count) entry with count > 0 draws `count` questions of
    that difficulty. A tier that holds fewer questions than requested simply
    contributes fewer. If the running total is still below
    `total_questions`, the remainder is drawn from the rest of the pool, so
    the test holds min(total_questions, pool size) distinct questions.

    Raises:
        ConfigurationMissing: If no configuration exists
        InsufficientQuestions: If nothing could be drawn
    """
    if config is None:
        raise ConfigurationMissing()

    selected: list[Any] = []
    remaining = config.total_questions

    for entry in config.difficulty_distribution or []:
        difficulty = entry.get("difficulty")
        count = int(entry.get("count") or 0)
        if count <= 0:
            continue

        drawn = await sampler.sample(difficulty, count)
        if len(drawn) < count:
            logger.info(f"Only {len(drawn)} of {count} {difficulty} questions available")
        selected.extend(drawn)
        remaining -= len(drawn)

    if remaining > 0:
        selected_ids = {q.id for q in selected}
        selected.extend(await sampler.sample(None, remaining, exclude=selected_ids))

    if not selected:
        raise InsufficientQuestions()

    return [sanitize_question(q) for q in selected]

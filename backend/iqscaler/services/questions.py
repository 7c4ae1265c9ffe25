"""
IQScaler - Question Service
Admin management of the question bank
"""
import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from iqscaler.core.exceptions import NotFoundError, ValidationError
from iqscaler.models.question import Question
from iqscaler.models.user import User
from iqscaler.schemas.question import QuestionCreate, QuestionUpdate

logger = logging.getLogger(__name__)


class QuestionService:
    """Service for question bank CRUD."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_questions(self) -> list[Question]:
        """All questions with their owning admin."""
        result = await self.db.execute(
            select(Question)
            .options(selectinload(Question.user))
            .order_by(Question.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_categories(self) -> list[str]:
        """Distinct categories, sorted."""
        result = await self.db.execute(
            select(Question.category).distinct().order_by(Question.category)
        )
        return list(result.scalars().all())

    async def get_question(self, question_id: uuid.UUID) -> Question:
        result = await self.db.execute(
            select(Question)
            .options(selectinload(Question.user))
            .where(Question.id == question_id)
            .execution_options(populate_existing=True)
        )
        question = result.scalar_one_or_none()
        if not question:
            raise NotFoundError("Question not found")
        return question

    async def create_question(self, data: QuestionCreate, owner: User) -> Question:
        question = Question(
            user_id=owner.id,
            text=data.text,
            image_url=data.image_url,
            options=[option.model_dump(by_alias=True) for option in data.options],
            correct_answer_index=data.correct_answer_index,
            difficulty=data.difficulty.value,
            category=data.category,
        )
        self.db.add(question)
        await self.db.flush()

        logger.info(f"Question {question.id} created by {owner.username}")
        return await self.get_question(question.id)

    async def update_question(self, question_id: uuid.UUID, data: QuestionUpdate) -> Question:
        question = await self.get_question(question_id)

        if data.options is not None:
            question.options = [option.model_dump(by_alias=True) for option in data.options]
            question.correct_answer_index = data.correct_answer_index
        elif data.correct_answer_index is not None:
            if data.correct_answer_index >= len(question.options or []):
                raise ValidationError("Invalid correct answer index for the provided options during update.")
            question.correct_answer_index = data.correct_answer_index
        if data.difficulty is not None:
            question.difficulty = data.difficulty.value

        # A null image_url clears the image; other null fields keep their value
        plain_fields = data.model_dump(
            exclude_unset=True,
            exclude={"options", "correct_answer_index", "difficulty"},
        )
        for field, value in plain_fields.items():
            if value is not None or field == "image_url":
                setattr(question, field, value)

        await self.db.flush()
        return await self.get_question(question.id)

    async def delete_question(self, question_id: uuid.UUID) -> None:
        question = await self.get_question(question_id)
        await self.db.delete(question)
        await self.db.flush()
        logger.info(f"Question {question_id} deleted")

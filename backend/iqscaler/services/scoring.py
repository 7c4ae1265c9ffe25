"""
IQScaler - Scoring Service
Grades submitted answers against the stored answer key and records a Result
"""
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from iqscaler.core.exceptions import NoAnswers
from iqscaler.models.question import Question
from iqscaler.models.result import Result, empty_breakdown

logger = logging.getLogger(__name__)


# Points for a correct answer per difficulty; anything else scores 0
DIFFICULTY_POINTS = {
    "easy": 1,
    "medium": 3,
    "hard": 6,
}


@dataclass
class ScoreSummary:
    total_score: int = 0
    correct_answers: int = 0
    questions_attempted: int = 0
    difficulty_breakdown: dict[str, int] = field(default_factory=empty_breakdown)


def normalize_question_id(value: Any) -> str:
    """Canonical string form of a question id; non-UUID input is kept as given."""
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        return str(value)


def grade_answers(
    answers: Sequence[Any],
    answer_key: dict[str, tuple[int, str]],
) -> ScoreSummary:
    """
    Grade answers against an answer key.

    Args:
        answers: Items with `question_id` and `selected_index`
        answer_key: question id -> (correct index, difficulty)

    Answers for ids missing from the key are ignored. They still count as
    attempted.
    """
    summary = ScoreSummary(questions_attempted=len(answers))

    for answer in answers:
        correct = answer_key.get(normalize_question_id(answer.question_id))
        if correct is None:
            continue

        correct_index, difficulty = correct
        try:
            selected = int(answer.selected_index)
        except (TypeError, ValueError):
            continue

        if selected == correct_index:
            summary.correct_answers += 1
            summary.total_score += DIFFICULTY_POINTS.get(difficulty, 0)
            if difficulty in summary.difficulty_breakdown:
                summary.difficulty_breakdown[difficulty] += 1

    return summary


class ScoringService:
    """Service for grading test submissions."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_answer_key(self, question_ids: Sequence[Any]) -> dict[str, tuple[int, str]]:
        """Fetch the authoritative answer key for exactly the submitted ids."""
        ids = set()
        for raw in question_ids:
            try:
                ids.add(uuid.UUID(str(raw)))
            except ValueError:
                continue
        if not ids:
            return {}

        result = await self.db.execute(
            select(Question).where(Question.id.in_(ids))
        )
        return {
            str(q.id): (q.correct_answer_index, str(getattr(q.difficulty, "value", q.difficulty)))
            for q in result.scalars().all()
        }

    async def grade(self, user_id: uuid.UUID, answers: Sequence[Any]) -> tuple[ScoreSummary, Result]:
        """
        Grade a submission and persist a new Result.

        Resubmitting creates another Result.

        Raises:
            NoAnswers: If no answers were submitted
        """
        if not answers:
            raise NoAnswers()

        answer_key = await self.load_answer_key([a.question_id for a in answers])
        summary = grade_answers(answers, answer_key)

        result = Result(
            user_id=user_id,
            total_score=summary.total_score,
            questions_attempted=summary.questions_attempted,
            correct_answers=summary.correct_answers,
            difficulty_breakdown=dict(summary.difficulty_breakdown),
        )
        self.db.add(result)
        await self.db.flush()
        await self.db.refresh(result)

        logger.info(
            f"Result {result.id} recorded for user {user_id}: "
            f"{summary.correct_answers}/{summary.questions_attempted} correct, score {summary.total_score}"
        )
        return summary, result

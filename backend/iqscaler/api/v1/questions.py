"""
IQScaler - Question API Routes
Question bank administration, test delivery and answer submission
"""
import uuid

from fastapi import APIRouter, status

from iqscaler.api.deps import AdminUser, CurrentUser, DbSession
from iqscaler.schemas.common import MessageResponse
from iqscaler.schemas.question import (
    QuestionCreate,
    QuestionResponse,
    QuestionUpdate,
    SanitizedQuestion,
    SubmitTestRequest,
    SubmitTestResponse,
)
from iqscaler.services.assembly import DatabaseSampler, assemble_test
from iqscaler.services.questions import QuestionService
from iqscaler.services.scoring import ScoringService
from iqscaler.services.test_config import TestConfigService

router = APIRouter(prefix="/questions", tags=["Questions"])


# ============================================================================
# Test delivery
# ============================================================================

@router.get(
    "/test",
    response_model=list[SanitizedQuestion],
    summary="Get a randomized test",
    description="Questions drawn per the test configuration, without answer keys.",
)
async def get_test_questions(db: DbSession) -> list[SanitizedQuestion]:
    config = await TestConfigService(db).get_config()
    return await assemble_test(config, DatabaseSampler(db))


@router.post(
    "/submit",
    response_model=SubmitTestResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit test answers",
)
async def submit_test(
    data: SubmitTestRequest,
    current_user: CurrentUser,
    db: DbSession,
) -> SubmitTestResponse:
    """Grade the answers and record a new result."""
    summary, result = await ScoringService(db).grade(current_user.id, data.user_answers)
    return SubmitTestResponse(
        total_score=summary.total_score,
        correct_answers=summary.correct_answers,
        result_id=result.id,
    )


# ============================================================================
# Admin
# ============================================================================

@router.get(
    "/categories",
    response_model=list[str],
    summary="List question categories (admin)",
)
async def get_categories(admin: AdminUser, db: DbSession) -> list[str]:
    return await QuestionService(db).list_categories()


@router.get(
    "",
    response_model=list[QuestionResponse],
    summary="List all questions (admin)",
)
async def list_questions(admin: AdminUser, db: DbSession) -> list[QuestionResponse]:
    questions = await QuestionService(db).list_questions()
    return [QuestionResponse.model_validate(q) for q in questions]


@router.post(
    "",
    response_model=QuestionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a question (admin)",
)
async def create_question(
    data: QuestionCreate,
    admin: AdminUser,
    db: DbSession,
) -> QuestionResponse:
    question = await QuestionService(db).create_question(data, admin)
    return QuestionResponse.model_validate(question)


@router.put(
    "/{question_id}",
    response_model=QuestionResponse,
    summary="Update a question (admin)",
)
async def update_question(
    question_id: uuid.UUID,
    data: QuestionUpdate,
    admin: AdminUser,
    db: DbSession,
) -> QuestionResponse:
    question = await QuestionService(db).update_question(question_id, data)
    return QuestionResponse.model_validate(question)


@router.delete(
    "/{question_id}",
    response_model=MessageResponse,
    summary="Delete a question (admin)",
)
async def delete_question(
    question_id: uuid.UUID,
    admin: AdminUser,
    db: DbSession,
) -> MessageResponse:
    await QuestionService(db).delete_question(question_id)
    return MessageResponse(message="Question removed")

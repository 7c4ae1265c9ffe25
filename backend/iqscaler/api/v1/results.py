"""
IQScaler - Result API Routes
Result history, single results and the public leaderboard
"""
import uuid

from fastapi import APIRouter

from iqscaler.api.deps import AdminUser, CurrentUser, DbSession
from iqscaler.schemas.result import LeaderboardEntry, ResultResponse, ResultWithUser
from iqscaler.services.results import ResultService

router = APIRouter(prefix="/results", tags=["Results"])


@router.get(
    "/leaderboard",
    response_model=list[LeaderboardEntry],
    summary="Top scores, one per user",
)
async def get_leaderboard(db: DbSession) -> list[LeaderboardEntry]:
    rows = await ResultService(db).leaderboard()
    return [LeaderboardEntry.model_validate(row) for row in rows]


@router.get(
    "/myresults",
    response_model=list[ResultResponse],
    summary="Current user's results",
)
async def get_my_results(current_user: CurrentUser, db: DbSession) -> list[ResultResponse]:
    results = await ResultService(db).list_for_user(current_user.id)
    return [ResultResponse.model_validate(r) for r in results]


@router.get(
    "",
    response_model=list[ResultWithUser],
    summary="All results (admin)",
)
async def get_all_results(admin: AdminUser, db: DbSession) -> list[ResultWithUser]:
    results = await ResultService(db).list_all()
    return [ResultWithUser.model_validate(r) for r in results]


@router.get(
    "/{result_id}",
    response_model=ResultWithUser,
    summary="Get a result (owner or admin)",
)
async def get_result(
    result_id: uuid.UUID,
    current_user: CurrentUser,
    db: DbSession,
) -> ResultWithUser:
    result = await ResultService(db).get_result_for_user(result_id, current_user)
    return ResultWithUser.model_validate(result)

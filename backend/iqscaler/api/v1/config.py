"""
IQScaler - Test Configuration API Routes
"""
from fastapi import APIRouter

from iqscaler.api.deps import AdminUser, DbSession
from iqscaler.schemas.test_config import TestConfigResponse, TestConfigUpdate
from iqscaler.services.test_config import TestConfigService

router = APIRouter(prefix="/config", tags=["Configuration"])


@router.get(
    "/test",
    response_model=TestConfigResponse,
    summary="Get the test configuration",
    description="Public. Creates the default configuration on first access.",
)
async def get_test_config(db: DbSession) -> TestConfigResponse:
    config = await TestConfigService(db).get_or_create_default()
    return TestConfigResponse.model_validate(config)


@router.put(
    "/test",
    response_model=TestConfigResponse,
    summary="Update the test configuration (admin)",
)
async def update_test_config(
    data: TestConfigUpdate,
    admin: AdminUser,
    db: DbSession,
) -> TestConfigResponse:
    config = await TestConfigService(db).update_config(data)
    return TestConfigResponse.model_validate(config)

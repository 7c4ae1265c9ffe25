"""IQScaler - API Router."""
from fastapi import APIRouter

from iqscaler.api.v1.users import router as users_router
from iqscaler.api.v1.questions import router as questions_router
from iqscaler.api.v1.config import router as config_router
from iqscaler.api.v1.results import router as results_router
from iqscaler.api.v1.certificates import router as certificates_router
from iqscaler.api.v1.payments import router as payments_router
from iqscaler.api.v1.contact import router as contact_router
from iqscaler.api.v1.upload import router as upload_router

api_router = APIRouter()

api_router.include_router(users_router)
api_router.include_router(questions_router)
api_router.include_router(config_router)
api_router.include_router(results_router)
api_router.include_router(certificates_router)
api_router.include_router(payments_router)
api_router.include_router(contact_router)
api_router.include_router(upload_router)

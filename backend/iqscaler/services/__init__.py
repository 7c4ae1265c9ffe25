"""IQScaler - Services initialization."""
from iqscaler.services.users import UserService
from iqscaler.services.questions import QuestionService
from iqscaler.services.test_config import TestConfigService
from iqscaler.services.assembly import DatabaseSampler, assemble_test
from iqscaler.services.scoring import ScoringService
from iqscaler.services.results import ResultService
from iqscaler.services.certificates import CertificateService
from iqscaler.services.payments import PaymentService

__all__ = [
    "UserService",
    "QuestionService",
    "TestConfigService",
    "DatabaseSampler",
    "assemble_test",
    "ScoringService",
    "ResultService",
    "CertificateService",
    "PaymentService",
]

"""
IQScaler - Email Service
Plain-text notification mail over SMTP
"""
import logging
import smtplib
from email.message import EmailMessage

from fastapi.concurrency import run_in_threadpool

from iqscaler.core.config import settings
from iqscaler.core.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class Mailer:
    """Sends mail through the configured SMTP server."""

    def __init__(
        self,
        host: str,
        port: int,
        user: str = "",
        password: str = "",
        sender: str = "",
        use_ssl: bool = True,
        timeout: int = 20,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender or user
        self.use_ssl = use_ssl
        self.timeout = timeout

    def _build_message(self, to: str, subject: str, text: str) -> EmailMessage:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content(text)
        return msg

    def _deliver(self, msg: EmailMessage) -> None:
        smtp_class = smtplib.SMTP_SSL if self.use_ssl else smtplib.SMTP
        with smtp_class(self.host, self.port, timeout=self.timeout) as server:
            if not self.use_ssl:
                server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)

    async def send(self, to: str, subject: str, text: str) -> None:
        """
        Send a plain-text email.

        Raises:
            UpstreamServiceError: If SMTP is not configured or delivery fails
        """
        if not self.host:
            logger.error(f"Email to {to} not sent: SMTP is not configured")
            raise UpstreamServiceError("Email could not be sent")

        msg = self._build_message(to, subject, text)
        try:
            await run_in_threadpool(self._deliver, msg)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email to {to} failed: {e}")
            raise UpstreamServiceError("Email could not be sent") from e

        logger.info(f"Email sent to {to}: {subject}")


def get_mailer() -> Mailer:
    """Dependency returning the configured mailer."""
    return Mailer(
        host=settings.SMTP_HOST,
        port=settings.SMTP_PORT,
        user=settings.SMTP_USER,
        password=settings.SMTP_PASSWORD,
        sender=settings.EMAIL_FROM,
        use_ssl=settings.SMTP_USE_SSL,
        timeout=settings.SMTP_TIMEOUT_SECONDS,
    )

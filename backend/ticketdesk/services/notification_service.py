"""
Notification service.
Sends support notification emails over SMTP.
"""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from ticketdesk.config import Settings

logger = logging.getLogger(__name__)


class OutboundEmail(BaseModel):
    """A single HTML email message."""
    from_address: str
    to: str
    subject: str
    html: str
    reply_to: Optional[str] = None


class SmtpMailer:
    """Mailer backed by an SMTP server."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str = "",
        password: str = "",
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            timeout=settings.smtp_timeout,
        )

    def _get_smtp_connection(self) -> smtplib.SMTP:
        """Create an authenticated SMTP connection."""
        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
        except Exception:
            server.close()
            raise
        return server

    @staticmethod
    def build_mime(message: OutboundEmail) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = message.subject
        msg["From"] = message.from_address
        msg["To"] = message.to
        if message.reply_to:
            msg["Reply-To"] = message.reply_to
        msg.attach(MIMEText(message.html, "html", "utf-8"))
        return msg

    def send_sync(self, message: OutboundEmail) -> None:
        """Send a message, raising on transport or auth errors."""
        msg = self.build_mime(message)
        with self._get_smtp_connection() as server:
            server.sendmail(message.from_address, [message.to], msg.as_string())
        logger.info("Email sent to %s: %s", message.to, message.subject)

    async def send(self, message: OutboundEmail) -> None:
        await run_in_threadpool(self.send_sync, message)


class RecordingMailer:
    """Mailer that keeps messages in memory instead of sending them.

    Used when SMTP_HOST is empty (local development) and in tests.
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        self.sent: List[OutboundEmail] = []
        self.fail_with = fail_with

    async def send(self, message: OutboundEmail) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(message)
        logger.info("Recorded email to %s: %s", message.to, message.subject)

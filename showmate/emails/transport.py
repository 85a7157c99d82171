"""
SMTP transport for transactional emails.

Configured from settings (SMTP_*). Errors from smtplib propagate to the
caller; EmailService decides what to do with them.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr

from showmate.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class SmtpTransport:
    """Sends multipart (plain + html) messages over SMTP"""

    def __init__(self, config: Settings = default_settings):
        self.config = config

    @property
    def is_configured(self) -> bool:
        return bool(self.config.SMTP_HOST)

    def build_message(self, to: str, subject: str, html: str, text: str) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.config.SMTP_FROM_NAME, self.config.SMTP_FROM_EMAIL))
        msg["To"] = to
        msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))
        return msg

    def send_mail(self, to: str, subject: str, html: str, text: str) -> None:
        if not self.is_configured:
            logger.warning("SMTP not configured, email '%s' to %s not sent", subject, to)
            return

        msg = self.build_message(to, subject, html, text)
        smtp_class = smtplib.SMTP_SSL if self.config.SMTP_SECURE else smtplib.SMTP

        with smtp_class(
            self.config.SMTP_HOST, self.config.SMTP_PORT, timeout=self.config.SMTP_TIMEOUT
        ) as server:
            if self.config.SMTP_STARTTLS and not self.config.SMTP_SECURE:
                server.starttls()
            if self.config.SMTP_USER:
                server.login(self.config.SMTP_USER, self.config.SMTP_PASSWORD)
            server.sendmail(self.config.SMTP_FROM_EMAIL, [to], msg.as_string())

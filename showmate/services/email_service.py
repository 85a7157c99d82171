"""
Email gateway.

Renders a registered template and hands it to the transport. Sending is
best-effort: transport failures are logged and reported as False, never
raised. A missing template is a programming error and is raised.
"""

import logging
import smtplib
from typing import Optional, Protocol

from showmate.core.exceptions import TemplateNotFoundException
from showmate.emails.templates import EMAIL_TEMPLATES, EmailTemplate, EmailType
from showmate.emails.transport import SmtpTransport

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    def send_mail(self, to: str, subject: str, html: str, text: str) -> None: ...


class EmailService:
    """Service for transactional emails"""

    def __init__(
        self,
        transport: Optional[MailTransport] = None,
        templates: Optional[dict[EmailType, EmailTemplate]] = None,
    ):
        self.transport = transport if transport is not None else SmtpTransport()
        self.templates = templates if templates is not None else EMAIL_TEMPLATES

    def send_transactional_email(
        self,
        email_type: EmailType,
        to: Optional[str],
        data: dict,
        subject: Optional[str] = None,
        html: Optional[str] = None,
        text: Optional[str] = None,
    ) -> bool:
        """
        Render and send a transactional email.

        Args:
            email_type: Registry key of the template
            to: Recipient address
            data: Values passed to the template
            subject, html, text: Optional overrides of the rendered parts

        Returns:
            True if the transport accepted the message, False otherwise

        Raises:
            TemplateNotFoundException: If no template is registered for email_type
        """
        template = self.templates.get(email_type)
        if template is None:
            raise TemplateNotFoundException(f"No email template registered for '{email_type}'")

        rendered_subject, rendered_html, rendered_text = template.render(data)
        subject = subject or rendered_subject
        html = html or rendered_html
        text = text or rendered_text

        if not to:
            logger.warning("No recipient address for %s email, skipped", email_type.value)
            return False

        try:
            self.transport.send_mail(to=to, subject=subject, html=html, text=text)
        except smtplib.SMTPAuthenticationError:
            logger.error("SMTP authentication failed sending %s email to %s", email_type.value, to)
            return False
        except Exception:
            logger.exception("Failed to send %s email to %s", email_type.value, to)
            return False

        logger.info("%s email sent to %s", email_type.value, to)
        return True


def get_email_service() -> EmailService:
    """FastAPI dependency for the email gateway"""
    return EmailService()

import smtplib
import pytest
from showmate.config import Settings
from showmate.core.exceptions import TemplateNotFoundException
from showmate.emails.templates import EMAIL_TEMPLATES, EmailType, strip_tags
from showmate.emails.transport import SmtpTransport
from showmate.services.email_service import EmailService
from tests.conftest import FailingTransport, RecordingTransport


INVITATION_DATA = {
    "first_name": "Tom",
    "project_name": "Festival <d'été>",
    "role_label": "Ingé son",
    "accept_url": "https://showmate.app/project/p/invitations/accept?project=p&user=u",
}


class TestSendTransactionalEmail:

    def test_sends_rendered_template(self):
        transport = RecordingTransport()
        service = EmailService(transport=transport)

        assert service.send_transactional_email(
            EmailType.PROJECT_INVITATION, "tom@example.com", INVITATION_DATA
        ) is True

        assert len(transport.sent) == 1
        email = transport.sent[0]
        assert email["to"] == "tom@example.com"
        assert email["subject"] == "Invitation au projet Festival <d'été>"
        # User values are escaped in html only
        assert "Festival &lt;d&#x27;été&gt;" in email["html"]
        assert "Festival <d'été>" in email["text"]

    def test_overrides_take_precedence(self):
        transport = RecordingTransport()
        service = EmailService(transport=transport)

        service.send_transactional_email(
            EmailType.PROJECT_DELETED,
            "tom@example.com",
            {"project_name": "Tournée"},
            subject="Sujet",
            html="<p>Corps</p>",
            text="Corps",
        )

        assert transport.sent[0] == {"to": "tom@example.com", "subject": "Sujet", "html": "<p>Corps</p>", "text": "Corps"}

    def test_text_falls_back_to_stripped_html(self):
        transport = RecordingTransport()
        service = EmailService(transport=transport)

        service.send_transactional_email(
            EmailType.PROJECT_REMOVED, "tom@example.com", {"first_name": "Tom", "project_name": "Tournée"}
        )

        text = transport.sent[0]["text"]
        assert "<" not in text
        assert "Vous avez été retiré du projet Tournée." in text

    def test_unknown_template_raises(self):
        service = EmailService(transport=RecordingTransport(), templates={})

        with pytest.raises(TemplateNotFoundException):
            service.send_transactional_email(EmailType.PROJECT_DELETED, "tom@example.com", {"project_name": "x"})

    def test_transport_failure_returns_false(self, caplog):
        transport = FailingTransport()
        service = EmailService(transport=transport)

        with caplog.at_level("ERROR"):
            sent = service.send_transactional_email(
                EmailType.PROJECT_DELETED, "tom@example.com", {"project_name": "Tournée"}
            )

        assert sent is False
        assert transport.attempts == 1
        assert "project_deleted" in caplog.text

    def test_authentication_failure_returns_false(self):
        class RejectingTransport:
            def send_mail(self, to, subject, html, text):
                raise smtplib.SMTPAuthenticationError(535, b"Authentication failed")

        service = EmailService(transport=RejectingTransport())

        assert service.send_transactional_email(
            EmailType.PROJECT_DELETED, "tom@example.com", {"project_name": "Tournée"}
        ) is False

    @pytest.mark.parametrize("recipient", [None, ""])
    def test_missing_recipient_is_skipped(self, recipient):
        transport = RecordingTransport()
        service = EmailService(transport=transport)

        assert service.send_transactional_email(
            EmailType.PROJECT_DELETED, recipient, {"project_name": "Tournée"}
        ) is False
        assert transport.sent == []


class TestTemplates:

    def test_every_email_type_has_a_template(self):
        assert set(EMAIL_TEMPLATES) == set(EmailType)

    @pytest.mark.parametrize(
        "email_type,data",
        [
            (EmailType.PROJECT_INVITATION, INVITATION_DATA),
            (EmailType.PROJECT_ADDED, {"project_name": "Tournée", "project_url": "https://showmate.app/project/p"}),
            (EmailType.INVITATION_ACCEPTED, {"project_name": "Tournée", "member_name": "Tom Martin"}),
            (EmailType.INVITATION_REFUSED, {"project_name": "Tournée", "invited_user_name": "Tom Martin"}),
            (EmailType.PROJECT_REMOVED, {"project_name": "Tournée"}),
            (EmailType.PROJECT_DELETED, {"project_name": "Tournée"}),
        ],
    )
    def test_templates_render(self, email_type, data):
        subject, html, text = EMAIL_TEMPLATES[email_type].render(data)

        assert subject
        assert html.startswith("<!DOCTYPE html>")
        assert text
        assert "Bonjour" in text

    def test_strip_tags(self):
        assert strip_tags("<p>Bonjour</p>\n\n\n<p>Tom</p>") == "Bonjour\n\nTom"


class TestSmtpTransport:

    def test_unconfigured_transport_does_not_connect(self, monkeypatch):
        def fail(*args, **kwargs):
            raise AssertionError("SMTP connection attempted")

        monkeypatch.setattr(smtplib, "SMTP", fail)
        transport = SmtpTransport(Settings(SECRET_KEY="k", SMTP_HOST=""))

        transport.send_mail("tom@example.com", "Sujet", "<p>Corps</p>", "Corps")

        assert transport.is_configured is False

    def test_builds_multipart_message(self):
        transport = SmtpTransport(Settings(SECRET_KEY="k", SMTP_FROM_EMAIL="no-reply@showmate.app", SMTP_FROM_NAME="ShowMate"))

        msg = transport.build_message("tom@example.com", "Sujet", "<p>Corps</p>", "Corps")

        assert msg["To"] == "tom@example.com"
        assert msg["From"] == "ShowMate <no-reply@showmate.app>"
        assert [part.get_content_type() for part in msg.get_payload()] == ["text/plain", "text/html"]

    def test_sends_with_starttls_and_login(self, monkeypatch):
        calls = []

        class FakeSMTP:
            def __init__(self, host, port, timeout):
                calls.append(("connect", host, port))

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

            def starttls(self):
                calls.append(("starttls",))

            def login(self, user, password):
                calls.append(("login", user))

            def sendmail(self, sender, recipients, message):
                calls.append(("sendmail", sender, recipients))

        monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
        transport = SmtpTransport(
            Settings(SECRET_KEY="k", SMTP_HOST="smtp.example.com", SMTP_USER="mailer", SMTP_PASSWORD="pw")
        )

        transport.send_mail("tom@example.com", "Sujet", "<p>Corps</p>", "Corps")

        assert calls == [
            ("connect", "smtp.example.com", 587),
            ("starttls",),
            ("login", "mailer"),
            ("sendmail", "no-reply@showmate.app", ["tom@example.com"]),
        ]

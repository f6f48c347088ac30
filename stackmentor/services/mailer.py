import smtplib
from email.message import EmailMessage
from typing import Protocol

from stackmentor.core.config import Settings
from stackmentor.core.logging import get_module_logger

logger = get_module_logger()


class EmailSender(Protocol):
    def send(self, recipient: str, subject: str, body: str) -> None: ...


class LoggingEmailSender:
    """Para desarrollo/tests: no envía nada, solo deja constancia."""

    def __init__(self):
        self.outbox: list[tuple[str, str, str]] = []

    def send(self, recipient: str, subject: str, body: str) -> None:
        self.outbox.append((recipient, subject, body))
        logger.info("email_not_sent_no_smtp", recipient=recipient, subject=subject)


class SmtpEmailSender:
    def __init__(self, settings: Settings):
        self.host = settings.SMTP_HOST
        self.port = settings.SMTP_PORT
        self.user = settings.SMTP_USER
        self.password = settings.SMTP_PASSWORD
        self.sender = settings.MAIL_FROM

    def send(self, recipient: str, subject: str, body: str) -> None:
        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = recipient
        msg["Subject"] = subject
        msg.set_content(body)

        with smtplib.SMTP(self.host, self.port) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)

        logger.info("email_sent", recipient=recipient, subject=subject)


def build_email_sender(settings: Settings) -> EmailSender:
    if settings.SMTP_HOST:
        return SmtpEmailSender(settings)
    return LoggingEmailSender()


def verification_email(link: str) -> tuple[str, str]:
    subject = "Email Verification for StackMentor.io"
    body = f"Please verify your email by clicking the following link: {link}"
    return subject, body

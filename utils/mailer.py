"""Delivery of one-time verification codes."""

from __future__ import annotations

import smtplib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from email.message import EmailMessage

from flask import current_app

from utils.request_validation import mask_email

SUBJECT = "Your verification code"
BODY_TEMPLATE = (
    "Hello {fullname},\n\n"
    "Your verification code is {code}\n\n"
    "It expires in {minutes} minutes.\n"
)


class MailDeliveryError(Exception):
    """Raised when a verification code could not be handed to the mail server."""


@dataclass
class SentCode:
    address: str
    code: str
    fullname: str


class OtpMailer(ABC):
    """Interface for OTP dispatch backends."""

    @abstractmethod
    def send_code(self, address: str, code: str, fullname: str = "") -> None:
        """Send ``code`` to ``address`` or raise ``MailDeliveryError``."""


def render_body(code: str, fullname: str, ttl_seconds: int) -> str:
    minutes = max(1, ttl_seconds // 60)
    return BODY_TEMPLATE.format(fullname=fullname or "there", code=code, minutes=minutes)


class SmtpOtpMailer(OtpMailer):
    """Send codes through an authenticated SMTP relay."""

    def __init__(
        self,
        server: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        *,
        use_tls: bool = True,
        timeout: float = 10.0,
        ttl_seconds: int = 600,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_tls = use_tls
        self.timeout = timeout
        self.ttl_seconds = ttl_seconds

    def build_message(self, address: str, code: str, fullname: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = address
        message["Subject"] = SUBJECT
        message.set_content(render_body(code, fullname, self.ttl_seconds))
        return message

    def send_code(self, address: str, code: str, fullname: str = "") -> None:
        message = self.build_message(address, code, fullname)
        try:
            with smtplib.SMTP(self.server, self.port, timeout=self.timeout) as smtp:
                if self.use_tls:
                    smtp.starttls()
                smtp.login(self.username, self.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise MailDeliveryError(f"SMTP delivery to {mask_email(address)} failed") from exc


class ConsoleOtpMailer(OtpMailer):
    """Write codes to the application log. Local development only."""

    def send_code(self, address: str, code: str, fullname: str = "") -> None:
        current_app.logger.warning("Verification code for %s: %s", address, code)


class MemoryOtpMailer(OtpMailer):
    """Keep sent codes in an outbox list."""

    def __init__(self):
        self.outbox: list[SentCode] = []

    def send_code(self, address: str, code: str, fullname: str = "") -> None:
        self.outbox.append(SentCode(address=address, code=code, fullname=fullname))

    def last_code_for(self, address: str) -> str | None:
        for sent in reversed(self.outbox):
            if sent.address == address:
                return sent.code
        return None


def build_mailer(config) -> OtpMailer:
    """Return the backend selected by ``MAIL_BACKEND``."""

    backend = config.get("MAIL_BACKEND", "console")
    if backend == "smtp":
        return SmtpOtpMailer(
            config["MAIL_SERVER"],
            int(config.get("MAIL_PORT", 587)),
            config["MAIL_USERNAME"],
            config["MAIL_PASSWORD"],
            config["MAIL_SENDER"],
            use_tls=bool(config.get("MAIL_USE_TLS", True)),
            timeout=float(config.get("MAIL_TIMEOUT", 10)),
            ttl_seconds=int(config.get("OTP_TTL_SECONDS", 600)),
        )
    if backend == "memory":
        return MemoryOtpMailer()
    return ConsoleOtpMailer()

"""
Near-expiry notices for contract documents.

Sending is best-effort: callers log a failed send and carry on.
"""
from __future__ import annotations
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

from core.config_loader import settings
from contract.schema import ContractExpirationDetail

log = logging.getLogger(__name__)


class Notifier(Protocol):
    def send_near_expiry_notice(self, detail: ContractExpirationDetail) -> None: ...


def build_near_expiry_message(detail: ContractExpirationDetail) -> tuple[str, str]:
    """Returns ``(subject, body_text)``."""
    subject = f"Contract {detail.contract_number} expires in {detail.days_remaining} day(s)"
    body = (
        f"The document '{detail.document_name}' of contract {detail.contract_number} "
        f"expires on {detail.end_date:%Y-%m-%d %H:%M} UTC "
        f"({detail.days_remaining} day(s) remaining).\n\n"
        "Please renew the contract before it expires. Accounts linked to an "
        "expired contract are deactivated automatically."
    )
    return subject, body


class LogNotifier:
    """Used when no SMTP host is configured."""

    def send_near_expiry_notice(self, detail: ContractExpirationDetail) -> None:
        subject, _ = build_near_expiry_message(detail)
        log.info("Near-expiry notice for %s: %s", detail.email or "<no email>", subject)


class SmtpNotifier:
    def __init__(
        self,
        host: str,
        port: int = 587,
        *,
        use_tls: bool = True,
        username: Optional[str] = None,
        password: Optional[str] = None,
        sender: str = "no-reply@guardshift.local",
        timeout: float = 10.0,
    ):
        self.host = host
        self.port = port
        self.use_tls = use_tls
        self.username = username
        self.password = password
        self.sender = sender
        self.timeout = timeout

    def send_near_expiry_notice(self, detail: ContractExpirationDetail) -> None:
        if not detail.email:
            log.warning("Document %s has no e-mail; near-expiry notice not sent", detail.document_id)
            return

        subject, body = build_near_expiry_message(detail)
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = detail.email
        msg.attach(MIMEText(body, "plain", "utf-8"))

        # smtplib errors propagate; the sweep logs them
        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            if self.use_tls:
                server.starttls()
            if self.username and self.password:
                server.login(self.username, self.password)
            server.send_message(msg)
        log.info("Near-expiry notice sent to %s for contract %s", detail.email, detail.contract_number)


def get_notifier() -> Notifier:
    if settings.SMTP_HOST:
        return SmtpNotifier(
            settings.SMTP_HOST,
            settings.SMTP_PORT,
            use_tls=settings.SMTP_USE_TLS,
            username=settings.SMTP_USERNAME,
            password=settings.SMTP_PASSWORD,
            sender=settings.SMTP_SENDER,
        )
    return LogNotifier()

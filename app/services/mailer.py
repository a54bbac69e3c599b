from __future__ import annotations

import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr

from app.core.config import get_settings
from app.models.settings import AppSettings

_RELAY_HOSTS = {
    "sendgrid": "smtp.sendgrid.net",
    "mailgun": "smtp.mailgun.org",
}


@dataclass(frozen=True)
class SmtpTransport:
    host: str
    port: int
    username: str = ""
    password: str = ""
    use_ssl: bool = False


def transport_from_settings(row: AppSettings | None) -> SmtpTransport:
    """Pick the SMTP transport configured in the settings row.

    SendGrid and Mailgun are reached through their SMTP relays with the API
    key as password. Without a configured host the .env SMTP values apply.
    """
    settings = get_settings()
    cfg = (row.email_settings if row is not None else None) or {}
    provider = (cfg.get("provider") or "smtp").lower()

    if provider in _RELAY_HOSTS:
        return SmtpTransport(
            host=_RELAY_HOSTS[provider],
            port=int(cfg.get("port") or 587),
            username=cfg.get("username") or ("apikey" if provider == "sendgrid" else ""),
            password=cfg.get("api_key") or "",
        )

    if cfg.get("host"):
        port = int(cfg.get("port") or 587)
        return SmtpTransport(
            host=cfg["host"],
            port=port,
            username=cfg.get("username") or "",
            password=cfg.get("password") or "",
            use_ssl=port == 465,
        )

    return SmtpTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_username,
        password=settings.smtp_password,
        use_ssl=settings.smtp_use_tls,
    )


def send_email(
    to_emails: str | list[str],
    subject: str,
    body: str,
    *,
    transport: SmtpTransport | None = None,
    sender_name: str = "",
    sender_email: str = "",
    html: bool = False,
) -> None:
    """Send an email via SMTP.

    For development, you can use MailHog on localhost:1025.
    """
    settings = get_settings()
    transport = transport or transport_from_settings(None)
    recipients = [to_emails] if isinstance(to_emails, str) else list(to_emails)

    msg = EmailMessage()
    msg["Subject"] = subject
    msg["From"] = formataddr((sender_name, sender_email or settings.email_from))
    msg["To"] = ", ".join(recipients)
    if html:
        msg.set_content("This message requires an HTML capable mail client.")
        msg.add_alternative(body, subtype="html")
    else:
        msg.set_content(body)

    if transport.use_ssl:
        server = smtplib.SMTP_SSL(transport.host, transport.port, timeout=30)
    else:
        server = smtplib.SMTP(transport.host, transport.port, timeout=30)

    try:
        if not transport.use_ssl and transport.port == 587:
            server.starttls()
        if transport.username:
            server.login(transport.username, transport.password)
        server.send_message(msg)
    finally:
        try:
            server.quit()
        except smtplib.SMTPException:
            pass

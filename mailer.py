"""
Order notification emails over SMTP.

Connection settings come from the environment at send time (SMTP_HOST,
SMTP_PORT, SMTP_USER, SMTP_PASSWORD, MAIL_FROM, SMTP_TIMEOUT). With no
SMTP_HOST configured, sends are skipped and logged.
"""

import logging
import os
import smtplib
from email.message import EmailMessage

from errors import NotificationError

log = logging.getLogger(__name__)

DEFAULT_FROM = "Your Shop <no-reply@shop.com>"


def _settings() -> dict:
    return {
        "host": os.getenv("SMTP_HOST"),
        "port": int(os.getenv("SMTP_PORT", "587")),
        "user": os.getenv("SMTP_USER"),
        "password": os.getenv("SMTP_PASSWORD"),
        "sender": os.getenv("MAIL_FROM", DEFAULT_FROM),
        "timeout": float(os.getenv("SMTP_TIMEOUT", "10")),
    }


def build_message(sender: str, recipient: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = sender
    msg["To"] = recipient
    msg["Subject"] = subject
    msg.set_content(body)
    return msg


def send_mail(recipient: str, subject: str, body: str) -> bool:
    """
    Send one plain-text message. Single attempt, no retry.

    Returns False when SMTP is not configured. Raises NotificationError if the
    relay refuses the message or cannot be reached.
    """
    cfg = _settings()
    if not cfg["host"]:
        log.info("SMTP_HOST not set; skipping email %r to %s", subject, recipient)
        return False

    msg = build_message(cfg["sender"], recipient, subject, body)
    try:
        with smtplib.SMTP(cfg["host"], cfg["port"], timeout=cfg["timeout"]) as smtp:
            if cfg["user"]:
                smtp.starttls()
                smtp.login(cfg["user"], cfg["password"] or "")
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as e:
        raise NotificationError(f"Failed to send email to {recipient}: {e}") from e

    log.info("Email %r sent to %s", subject, recipient)
    return True

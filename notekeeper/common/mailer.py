import logging
import smtplib
from email.message import EmailMessage

from flask import current_app

log = logging.getLogger(__name__)


class MailDeliveryError(Exception):
    pass


def get_outbox(app=None) -> list:
    """Messages capturés quand MAIL_SUPPRESS_SEND est actif (tests)."""
    app = app or current_app
    return app.extensions.setdefault("mail_outbox", [])


def build_message(to: str, subject: str, body: str) -> EmailMessage:
    msg = EmailMessage()
    msg["From"] = current_app.config["MAIL_DEFAULT_SENDER"]
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return msg


def send_email(to: str, subject: str, body: str) -> None:
    cfg = current_app.config
    msg = build_message(to, subject, body)

    if cfg.get("MAIL_SUPPRESS_SEND"):
        get_outbox().append(msg)
        log.info("email_suppressed", extra={"subject": subject})
        return

    try:
        with smtplib.SMTP(cfg["MAIL_SERVER"], cfg["MAIL_PORT"], timeout=cfg["MAIL_TIMEOUT"]) as smtp:
            if cfg.get("MAIL_USE_TLS"):
                smtp.starttls()
            if cfg.get("MAIL_USERNAME"):
                smtp.login(cfg["MAIL_USERNAME"], cfg["MAIL_PASSWORD"] or "")
            smtp.send_message(msg)
    except (smtplib.SMTPException, OSError) as exc:
        raise MailDeliveryError(str(exc)) from exc

    log.info("email_sent", extra={"subject": subject})

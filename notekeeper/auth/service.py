import hashlib
import logging
import secrets
from datetime import timedelta

from flask import current_app
from sqlalchemy.exc import IntegrityError

from notekeeper.extensions import db
from notekeeper.users.models import User
from notekeeper.users.schemas import AccountOut
from notekeeper.auth import tokens
from notekeeper.common import mailer, utils
from notekeeper.common.errors import (
    InvalidInput, Conflict, Unauthorized, NotFound,
    InvalidOrExpiredToken, EmailDeliveryFailed,
)

log = logging.getLogger(__name__)
account_out = AccountOut()


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_reset_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def find_by_email(email: str) -> User | None:
    return User.query.filter_by(email=normalize_email(email)).first()


def find_by_identity(identity) -> User | None:
    uid = utils.parse_uuid(identity)
    if uid is None:
        return None
    return db.session.get(User, uid)


def _session_payload(user: User) -> dict:
    """Champs publics + nouveau token (jamais le hash)."""
    data = account_out.dump(user)
    data["token"] = tokens.issue(user.id)
    return data


def register(username: str, email: str, password: str) -> dict:
    username = (username or "").strip()
    email_n = normalize_email(email)
    if not username or not email_n or not password:
        raise InvalidInput("Username, email & password required.")

    if find_by_email(email_n):
        log.warning("register_conflict", extra={"email": email_n})
        raise Conflict("User already exists.")

    user = User(username=username, email=email_n)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        # course entre deux inscriptions simultanées
        db.session.rollback()
        log.warning("register_conflict", extra={"email": email_n})
        raise Conflict("User already exists.")

    log.info("user_registered", extra={"user_id": str(user.id)})
    return _session_payload(user)


def login(email: str, password: str) -> dict:
    user = find_by_email(email)
    # même erreur pour email inconnu / mauvais mot de passe
    if not user or not password or not user.check_password(password):
        log.warning("login_failed", extra={"email": normalize_email(email)})
        raise Unauthorized("Invalid credentials.")

    log.info("user_logged_in", extra={"user_id": str(user.id)})
    return _session_payload(user)


def get_profile(identity) -> dict:
    user = find_by_identity(identity)
    if not user:
        raise NotFound("User not found.")
    return account_out.dump(user)


def update_profile(identity, password: str | None = None) -> dict:
    user = find_by_identity(identity)
    if not user:
        raise NotFound("User not found.")

    if password:
        user.set_password(password)
        db.session.commit()
        log.info("password_changed", extra={"user_id": str(user.id)})

    return _session_payload(user)


def forgot_password(email: str) -> None:
    user = find_by_email(email)
    if not user:
        raise NotFound("There is no user with that email.")

    raw_token = secrets.token_hex(20)
    minutes = current_app.config["RESET_TOKEN_MINUTES"]
    # écrase un éventuel reset précédent: un seul token actif
    user.set_reset_token(hash_reset_token(raw_token), utils.utcnow() + timedelta(minutes=minutes))
    db.session.commit()

    reset_url = f"{current_app.config['FRONTEND_URL'].rstrip('/')}/reset-password/{raw_token}"
    body = (
        "You are receiving this email because you (or someone else) requested "
        "a password reset for your Notes account.\n\n"
        f"Open the following link to choose a new password (valid {minutes} minutes):\n\n"
        f"{reset_url}\n\n"
        "If you did not request this, you can ignore this email."
    )

    try:
        mailer.send_email(user.email, "Password reset token", body)
    except mailer.MailDeliveryError as exc:
        user.clear_reset_token()
        db.session.commit()
        log.error("reset_email_failed", extra={"user_id": str(user.id), "reason": str(exc)})
        raise EmailDeliveryFailed("Email could not be sent.")

    log.info("reset_requested", extra={"user_id": str(user.id)})


def reset_password(raw_token: str, password: str) -> None:
    if not password:
        raise InvalidInput("Password required.")

    user = User.query.filter(
        User.reset_password_token == hash_reset_token(raw_token or ""),
        User.reset_password_expire > utils.utcnow(),
    ).first()
    if not user:
        raise InvalidOrExpiredToken("Invalid or expired token.")

    user.set_password(password)
    user.clear_reset_token()
    db.session.commit()
    log.info("password_reset", extra={"user_id": str(user.id)})

import uuid
from sqlalchemy import Uuid
from flask import current_app
from passlib.hash import bcrypt
from notekeeper.extensions import db
from notekeeper.common.utils import utcnow


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(320), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)

    # reset mot de passe: hash sha256 du token brut + expiration
    reset_password_token = db.Column(db.String(64), nullable=True, index=True)
    reset_password_expire = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    notes = db.relationship("Note", back_populates="owner", lazy="select")

    # helpers mot de passe
    def set_password(self, raw_password: str) -> None:
        rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
        self.password_hash = bcrypt.using(rounds=rounds).hash(raw_password)

    def check_password(self, raw_password: str) -> bool:
        return bcrypt.verify(raw_password, self.password_hash)

    # helpers reset
    def set_reset_token(self, token_hash: str, expires_at) -> None:
        self.reset_password_token = token_hash
        self.reset_password_expire = expires_at

    def clear_reset_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expire = None

    @property
    def has_pending_reset(self) -> bool:
        return self.reset_password_token is not None

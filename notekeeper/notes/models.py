import uuid
from sqlalchemy import Uuid, ForeignKey
from notekeeper.extensions import db
from notekeeper.common.utils import utcnow


class Note(db.Model):
    __tablename__ = "notes"

    id = db.Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = db.Column(db.String(200), nullable=False)
    content = db.Column(db.Text, nullable=False)  # rich-text opaque (HTML de l'éditeur)
    category = db.Column(db.String(64), nullable=False, default="General")
    tags = db.Column(db.JSON, nullable=False, default=list)
    is_pinned = db.Column(db.Boolean, nullable=False, default=False, index=True)
    is_archived = db.Column(db.Boolean, nullable=False, default=False)

    owner_id = db.Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    owner = db.relationship("User", back_populates="notes", lazy="select")

    # horodatage applicatif (microsecondes) pour un tri stable
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

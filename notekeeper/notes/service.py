import logging

from flask import current_app

from notekeeper.extensions import db
from notekeeper.notes.models import Note
from notekeeper.common import utils
from notekeeper.common.authz import owns
from notekeeper.common.errors import InvalidInput, NotFound, Forbidden

log = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "content", "category", "tags", "is_pinned", "is_archived")
SORT_FIELDS = ("created_at", "updated_at")


def _owned_note(identity, note_id, action: str) -> Note:
    # existence d'abord, propriété ensuite (404 puis 401)
    uid = utils.parse_uuid(note_id)
    note = db.session.get(Note, uid) if uid is not None else None
    if not note:
        log.warning("note_not_found", extra={"note_id": str(note_id), "action": action})
        raise NotFound("Note not found.")
    if not owns(identity, note):
        log.warning(
            f"note_{action}_forbidden",
            extra={"note_id": str(note.id), "user_id": str(identity)},
        )
        raise Forbidden("User not authorized.")
    return note


def _require_text(value, name):
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput(f"Please add a {name}.")
    return value


def list_notes(identity) -> list[Note]:
    sort_field = current_app.config.get("NOTES_SORT_FIELD", "created_at")
    if sort_field not in SORT_FIELDS:
        sort_field = "created_at"

    notes = (
        Note.query.filter(Note.owner_id == utils.parse_uuid(identity))
        .order_by(Note.is_pinned.desc(), getattr(Note, sort_field).desc())
        .all()
    )
    log.info("notes_listed", extra={"user_id": str(identity), "count": len(notes)})
    return notes


def create_note(identity, title, content, category=None, tags=None,
                is_pinned=False, is_archived=False) -> Note:
    if not title or not content:
        log.warning("note_create_invalid", extra={"user_id": str(identity)})
        raise InvalidInput("Please add a title and content.")

    note = Note(
        title=_require_text(title, "title"),
        content=_require_text(content, "content"),
        category=category or current_app.config.get("DEFAULT_NOTE_CATEGORY", "General"),
        tags=list(tags or []),
        is_pinned=bool(is_pinned),
        is_archived=bool(is_archived),
        owner_id=utils.parse_uuid(identity),
    )
    db.session.add(note)
    db.session.commit()
    log.info("note_created", extra={"note_id": str(note.id), "user_id": str(identity)})
    return note


def get_note(identity, note_id) -> Note:
    return _owned_note(identity, note_id, "read")


def update_note(identity, note_id, fields: dict) -> Note:
    note = _owned_note(identity, note_id, "update")

    changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
    if not changes:
        # rien à modifier: updated_at (et donc le tri) reste intact
        return note
    for name in ("title", "content"):
        if name in changes:
            _require_text(changes[name], name)
    if "category" in changes and not changes["category"]:
        changes["category"] = current_app.config.get("DEFAULT_NOTE_CATEGORY", "General")
    if "tags" in changes:
        changes["tags"] = list(changes["tags"] or [])

    for name, value in changes.items():
        setattr(note, name, value)
    note.updated_at = utils.utcnow()

    db.session.commit()
    log.info("note_updated", extra={"note_id": str(note.id), "fields": sorted(changes)})
    return note


def delete_note(identity, note_id):
    note = _owned_note(identity, note_id, "delete")
    deleted_id = note.id
    db.session.delete(note)
    db.session.commit()
    log.info("note_deleted", extra={"note_id": str(deleted_id)})
    return deleted_id

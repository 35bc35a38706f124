from flask import Blueprint, request, jsonify, g

from notekeeper.notes import service
from notekeeper.notes.schemas import NoteIn, NoteOut
from notekeeper.common.authz import login_required
from notekeeper.common.errors import InvalidInput

bp = Blueprint("notes", __name__)

note_in = NoteIn()
note_patch = NoteIn(partial=True)
note_out = NoteOut()
note_out_many = NoteOut(many=True)


@bp.get("")
@login_required
def list_notes():
    notes = service.list_notes(g.current_user.id)
    return jsonify(note_out_many.dump(notes)), 200


@bp.post("")
@login_required
def create_note():
    payload = request.get_json(silent=True) or {}
    data = note_in.load(payload)
    note = service.create_note(g.current_user.id, **data)
    return jsonify(note_out.dump(note)), 201


@bp.get("/<note_id>")
@login_required
def get_note(note_id):
    note = service.get_note(g.current_user.id, note_id)
    return jsonify(note_out.dump(note)), 200


@bp.put("/<note_id>")
@login_required
def update_note(note_id):
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInput("JSON object body required.")
    data = note_patch.load(payload)
    note = service.update_note(g.current_user.id, note_id, data)
    return jsonify(note_out.dump(note)), 200


@bp.delete("/<note_id>")
@login_required
def delete_note(note_id):
    deleted_id = service.delete_note(g.current_user.id, note_id)
    return jsonify({"id": str(deleted_id)}), 200

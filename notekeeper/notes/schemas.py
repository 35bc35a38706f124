from marshmallow import Schema, fields, validate, EXCLUDE


class NoteIn(Schema):
    class Meta:
        # le client renvoie parfois la note entière (_id, user, createdAt...)
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=1, max=200))
    content = fields.String(required=True, validate=validate.Length(min=1))
    category = fields.String(validate=validate.Length(min=1, max=64))
    tags = fields.List(fields.String(validate=validate.Length(min=1, max=64)))
    is_pinned = fields.Boolean(data_key="isPinned")
    is_archived = fields.Boolean(data_key="isArchived")


class NoteOut(Schema):
    id = fields.UUID(required=True, data_key="_id")
    title = fields.String(required=True)
    content = fields.String(required=True)
    category = fields.String(required=True)
    tags = fields.List(fields.String(), required=True)
    is_pinned = fields.Boolean(required=True, data_key="isPinned")
    is_archived = fields.Boolean(required=True, data_key="isArchived")
    owner_id = fields.UUID(required=True, data_key="user")
    created_at = fields.DateTime(required=True, data_key="createdAt")
    updated_at = fields.DateTime(required=True, data_key="updatedAt")

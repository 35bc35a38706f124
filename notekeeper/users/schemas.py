from marshmallow import Schema, fields


class AccountOut(Schema):
    id = fields.UUID(required=True, data_key="_id")
    username = fields.String(required=True)
    email = fields.Email(required=True)

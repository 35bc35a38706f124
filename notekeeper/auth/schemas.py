from marshmallow import Schema, fields, validate, EXCLUDE

from notekeeper.users.schemas import AccountOut


class _In(Schema):
    class Meta:
        unknown = EXCLUDE


class RegisterSchema(_In):
    username = fields.String(required=True, validate=validate.Length(min=1, max=100))
    email = fields.Email(required=True, validate=validate.Length(max=320))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1, max=128))


class LoginSchema(_In):
    # pas de validation de format: tout échec de login doit rester un 401 générique
    email = fields.String(load_default="", allow_none=True)
    password = fields.String(load_only=True, load_default="", allow_none=True)


class ProfileUpdateSchema(_In):
    # vide = absent, le service ne change alors que le token
    password = fields.String(load_only=True, validate=validate.Length(max=128))


class ForgotPasswordSchema(_In):
    email = fields.Email(required=True)


class ResetPasswordSchema(_In):
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1, max=128))


class SessionOut(AccountOut):
    token = fields.String(required=True)

# notekeeper/docs/spec.py
from apispec import APISpec
from apispec.ext.marshmallow import MarshmallowPlugin
from marshmallow import Schema, fields

from notekeeper.auth.schemas import (
    RegisterSchema, LoginSchema, ProfileUpdateSchema,
    ForgotPasswordSchema, ResetPasswordSchema, SessionOut,
)
from notekeeper.users.schemas import AccountOut
from notekeeper.notes.schemas import NoteIn, NoteOut


class ErrorBody(Schema):
    code = fields.String()
    message = fields.String()
    details = fields.Dict()


class ErrorSchema(Schema):
    error = fields.Nested(ErrorBody)


class AckSchema(Schema):
    success = fields.Boolean()
    data = fields.String()


class DeletedSchema(Schema):
    id = fields.UUID()


def _ref(name: str):
    return {"$ref": f"#/components/schemas/{name}"}


def _json(name: str):
    return {"application/json": {"schema": _ref(name)}}


def _error(description: str):
    return {"description": description, "content": _json("Error")}


_BEARER = [{"bearerAuth": []}]
_NOTE_ID = [{"in": "path", "name": "id", "required": True, "schema": {"type": "string", "format": "uuid"}}]


def build_spec():
    spec = APISpec(
        title="Notekeeper API",
        version="1.0.0",
        openapi_version="3.0.3",
        info={"description": "Personal notes: accounts, bearer auth, owner-scoped notes"},
        plugins=[MarshmallowPlugin()],
    )

    spec.components.security_scheme(
        "bearerAuth",
        {"type": "http", "scheme": "bearer", "bearerFormat": "JWT"},
    )

    spec.components.schema("Register", schema=RegisterSchema)
    spec.components.schema("Login", schema=LoginSchema)
    spec.components.schema("ProfileUpdate", schema=ProfileUpdateSchema)
    spec.components.schema("ForgotPassword", schema=ForgotPasswordSchema)
    spec.components.schema("ResetPassword", schema=ResetPasswordSchema)
    spec.components.schema("Session", schema=SessionOut)
    spec.components.schema("Account", schema=AccountOut)
    spec.components.schema("NoteIn", schema=NoteIn)
    spec.components.schema("NoteOut", schema=NoteOut)
    spec.components.schema("Ack", schema=AckSchema)
    spec.components.schema("Deleted", schema=DeletedSchema)
    spec.components.schema("Error", schema=ErrorSchema)

    # ---- USERS ----
    spec.path(
        path="/api/users/register",
        operations={
            "post": {
                "summary": "Register",
                "requestBody": {"required": True, "content": _json("Register")},
                "responses": {
                    "201": {"description": "Created", "content": _json("Session")},
                    "400": _error("Invalid input or email already registered"),
                },
            }
        },
    )

    spec.path(
        path="/api/users/login",
        operations={
            "post": {
                "summary": "Login",
                "requestBody": {"required": True, "content": _json("Login")},
                "responses": {
                    "200": {"description": "OK", "content": _json("Session")},
                    "401": _error("Invalid credentials"),
                },
            }
        },
    )

    spec.path(
        path="/api/users/profile",
        operations={
            "get": {
                "summary": "Current account",
                "security": _BEARER,
                "responses": {
                    "200": {"description": "OK", "content": _json("Account")},
                    "401": _error("Not authorized"),
                },
            },
            "put": {
                "summary": "Update profile (password) and re-issue token",
                "security": _BEARER,
                "requestBody": {"required": False, "content": _json("ProfileUpdate")},
                "responses": {
                    "200": {"description": "OK", "content": _json("Session")},
                    "401": _error("Not authorized"),
                    "404": _error("User not found"),
                },
            },
        },
    )

    spec.path(
        path="/api/users/forgot-password",
        operations={
            "post": {
                "summary": "Send a password reset link",
                "requestBody": {"required": True, "content": _json("ForgotPassword")},
                "responses": {
                    "200": {"description": "Email sent", "content": _json("Ack")},
                    "404": _error("No user with that email"),
                    "500": _error("Email could not be sent"),
                },
            }
        },
    )

    spec.path(
        path="/api/users/reset-password/{resetToken}",
        operations={
            "post": {
                "summary": "Reset password with an emailed token",
                "parameters": [{"in": "path", "name": "resetToken", "required": True, "schema": {"type": "string"}}],
                "requestBody": {"required": True, "content": _json("ResetPassword")},
                "responses": {
                    "200": {"description": "Password changed", "content": _json("Ack")},
                    "400": _error("Invalid or expired token"),
                },
            }
        },
    )

    # ---- NOTES ----
    spec.path(
        path="/api/notes",
        operations={
            "get": {
                "summary": "List my notes (pinned first, newest first)",
                "security": _BEARER,
                "responses": {
                    "200": {
                        "description": "OK",
                        "content": {"application/json": {"schema": {"type": "array", "items": _ref("NoteOut")}}},
                    },
                    "401": _error("Not authorized"),
                },
            },
            "post": {
                "summary": "Create note",
                "security": _BEARER,
                "requestBody": {"required": True, "content": _json("NoteIn")},
                "responses": {
                    "201": {"description": "Created", "content": _json("NoteOut")},
                    "400": _error("Title and content required"),
                    "401": _error("Not authorized"),
                },
            },
        },
    )

    spec.path(
        path="/api/notes/{id}",
        operations={
            "get": {
                "summary": "Get note by id",
                "security": _BEARER,
                "parameters": _NOTE_ID,
                "responses": {
                    "200": {"description": "OK", "content": _json("NoteOut")},
                    "401": _error("Not authorized / not the owner"),
                    "404": _error("Note not found"),
                },
            },
            "put": {
                "summary": "Update note (partial)",
                "security": _BEARER,
                "parameters": _NOTE_ID,
                "requestBody": {"required": True, "content": _json("NoteIn")},
                "responses": {
                    "200": {"description": "OK", "content": _json("NoteOut")},
                    "401": _error("Not authorized / not the owner"),
                    "404": _error("Note not found"),
                },
            },
            "delete": {
                "summary": "Delete note",
                "security": _BEARER,
                "parameters": _NOTE_ID,
                "responses": {
                    "200": {"description": "Deleted", "content": _json("Deleted")},
                    "401": _error("Not authorized / not the owner"),
                    "404": _error("Note not found"),
                },
            },
        },
    )

    return spec.to_dict()

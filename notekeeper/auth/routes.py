from flask import Blueprint, request, jsonify, current_app, g

from notekeeper.extensions import limiter
from notekeeper.auth import service
from notekeeper.auth.schemas import (
    RegisterSchema, LoginSchema, ProfileUpdateSchema,
    ForgotPasswordSchema, ResetPasswordSchema,
)
from notekeeper.common.authz import login_required
from notekeeper.common.utils import success

bp = Blueprint("users", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
profile_schema = ProfileUpdateSchema()
forgot_schema = ForgotPasswordSchema()
reset_schema = ResetPasswordSchema()


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_REGISTER", "10/hour"))
def register():
    data = register_schema.load(_payload())
    result = service.register(data["username"], data["email"], data["password"])
    return jsonify(result), 201


@bp.post("/login")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_LOGIN", "5/minute"))
def login():
    data = login_schema.load(_payload())
    result = service.login(data["email"], data["password"])
    return jsonify(result), 200


@bp.get("/profile")
@login_required
def get_profile():
    return jsonify(service.get_profile(g.current_user.id)), 200


@bp.put("/profile")
@login_required
def update_profile():
    data = profile_schema.load(_payload())
    result = service.update_profile(g.current_user.id, data.get("password"))
    return jsonify(result), 200


@bp.post("/forgot-password")
@limiter.limit(lambda: current_app.config.get("RATELIMIT_AUTH_FORGOT", "5/hour"))
def forgot_password():
    data = forgot_schema.load(_payload())
    service.forgot_password(data["email"])
    return success("Email sent")


@bp.post("/reset-password/<reset_token>")
def reset_password(reset_token):
    data = reset_schema.load(_payload())
    service.reset_password(reset_token, data["password"])
    return success("Password reset success")

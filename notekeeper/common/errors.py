import logging
import traceback

from flask import jsonify, current_app, request
from flask_limiter import RateLimitExceeded
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

log = logging.getLogger("notekeeper.error")


class ApiError(Exception):
    status_code = 400
    code = "bad_request"

    def __init__(self, message, status_code=None, code=None, details=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code
        self.details = details or {}


class InvalidInput(ApiError):
    status_code = 400
    code = "invalid_input"


class Conflict(ApiError):
    status_code = 400
    code = "conflict"


class Unauthorized(ApiError):
    status_code = 401
    code = "invalid_credentials"


class Unauthenticated(ApiError):
    status_code = 401
    code = "not_authorized"


# 401 et non 403: compat avec les clients existants
class Forbidden(ApiError):
    status_code = 401
    code = "forbidden"


class NotFound(ApiError):
    status_code = 404
    code = "not_found"


class InvalidOrExpiredToken(ApiError):
    status_code = 400
    code = "invalid_reset_token"


class EmailDeliveryFailed(ApiError):
    status_code = 500
    code = "email_delivery_failed"


def _json_error(message, status, code, details=None):
    return jsonify({
        "error": {"code": code, "message": message, "details": details or {}}
    }), status


def _log_error(e: Exception, status: int):
    extra = {"method": request.method, "path": request.path, "status": status}
    if status >= 500:
        log.error("request_failed: %s", e, exc_info=e, extra=extra)
    else:
        log.warning("request_failed: %s", e, extra=extra)


def register_error_handlers(app):
    @app.errorhandler(ApiError)
    def handle_api_error(e: ApiError):
        _log_error(e, e.status_code)
        return _json_error(e.message, e.status_code, e.code, e.details)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e: ValidationError):
        _log_error(e, 400)
        return _json_error("Invalid request body.", 400, "invalid_input", e.messages)

    @app.errorhandler(RateLimitExceeded)
    def handle_rate_limit(e):
        _log_error(e, 429)
        return _json_error("Rate limit exceeded.", 429, "rate_limited")

    @app.errorhandler(HTTPException)
    def handle_http_exception(e: HTTPException):
        # Ex: 404 route inconnue, 405, 413…
        status = e.code or 500
        _log_error(e, status)
        code = "not_found" if status == 404 else "http_error"
        message = "Resource not found." if status == 404 else (e.description or "HTTP error")
        return _json_error(message, status, code)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        _log_error(e, 500)
        details = {}
        if current_app.config.get("SHOW_STACK_TRACES"):
            details["stack"] = traceback.format_exception(type(e), e, e.__traceback__)
        return _json_error(str(e) or "Internal server error.", 500, "server_error", details)

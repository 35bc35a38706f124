import uuid
from datetime import datetime, timezone

from flask import jsonify


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_uuid(value):
    """UUID depuis str/UUID, None si la valeur n'en est pas un."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def success(data=None, status=200):
    return jsonify({"success": True, "data": data}), status

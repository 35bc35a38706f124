"""Émission / vérification des bearer tokens (JWT signés, sans état serveur)."""
from datetime import timedelta

from flask_jwt_extended import create_access_token, decode_token
from flask_jwt_extended.exceptions import JWTExtendedException
from jwt import ExpiredSignatureError, InvalidTokenError


class TokenError(Exception):
    pass


class InvalidToken(TokenError):
    pass


class TokenExpired(TokenError):
    pass


def issue(identity, expires_delta: timedelta | None = None) -> str:
    """Signe un access token pour `identity` (expiration: JWT_ACCESS_TOKEN_EXPIRES)."""
    kwargs = {}
    if expires_delta is not None:
        kwargs["expires_delta"] = expires_delta
    return create_access_token(identity=str(identity), **kwargs)


def verify(token: str) -> str:
    """Retourne l'identité embarquée, ou lève TokenExpired / InvalidToken."""
    if not token:
        raise InvalidToken("Empty token.")
    try:
        payload = decode_token(token)
    except ExpiredSignatureError as exc:
        raise TokenExpired(str(exc)) from exc
    except (InvalidTokenError, JWTExtendedException, ValueError) as exc:
        raise InvalidToken(str(exc)) from exc

    identity = payload.get("sub")
    if not identity:
        raise InvalidToken("Missing subject.")
    return identity

import logging
import uuid
from dataclasses import dataclass
from functools import wraps

from flask import g, request

from notekeeper.auth import tokens
from notekeeper.auth.service import find_by_identity
from notekeeper.common.errors import Unauthenticated

log = logging.getLogger("notekeeper.auth")


@dataclass(frozen=True)
class Principal:
    """Utilisateur courant tel qu'attaché à la requête (sans hash de mot de passe)."""
    id: uuid.UUID
    username: str
    email: str


def authenticate(authorization: str | None) -> Principal:
    """Bearer header -> Principal, ou Unauthenticated.

    Les sous-cas (pas de token / expiré / invalide / user disparu) sont
    loggés séparément mais le client ne voit que deux messages génériques.
    """
    if not authorization or not authorization.startswith("Bearer "):
        log.info("auth_no_token")
        raise Unauthenticated("Not authorized, no token")

    token = authorization[len("Bearer "):].strip()
    try:
        identity = tokens.verify(token)
    except tokens.TokenExpired:
        log.warning("auth_token_expired")
        raise Unauthenticated("Not authorized, token failed")
    except tokens.InvalidToken as exc:
        log.warning("auth_token_invalid", extra={"reason": str(exc)})
        raise Unauthenticated("Not authorized, token failed")

    user = find_by_identity(identity)
    if user is None:
        log.warning("auth_user_missing", extra={"user_id": identity})
        raise Unauthenticated("Not authorized, token failed")

    return Principal(id=user.id, username=user.username, email=user.email)


def login_required(fn):
    @wraps(fn)
    def inner(*args, **kwargs):
        g.current_user = authenticate(request.headers.get("Authorization"))
        return fn(*args, **kwargs)
    return inner


def owns(identity, resource) -> bool:
    """Prédicat unique de propriété, partagé par toutes les opérations sur une note."""
    return resource.owner_id is not None and str(resource.owner_id) == str(identity)

from __future__ import annotations

import logging
from functools import wraps
from typing import Any

from flask import jsonify, request, session
from werkzeug.exceptions import HTTPException

from ..core.enums import Role
from ..core.exceptions import AuthorizationError, DomainError, ValidationError
from .actor import Actor
from .validators import parse_enum

logger = logging.getLogger(__name__)


def error_response(e: DomainError):
    return jsonify(e.to_dict()), e.status_code


def json_endpoint(view):
    """Map DomainError to its structured JSON; anything else becomes a generic 500."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except DomainError as e:
            return error_response(e)
        except HTTPException as e:
            return jsonify({"success": False, "kind": e.name, "message": e.description}), e.code
        except Exception:
            logger.exception("Unhandled error in %s", request.path)
            return jsonify({"success": False, "kind": "InternalError", "message": "Errore di sistema"}), 500

    return wrapper


def actor_from_session() -> Actor:
    """Identity placed in the session by the auth layer."""

    if "role" not in session:
        raise AuthorizationError("Sessione non valida: effettua l'accesso")
    role = parse_enum(Role, session.get("role"), "Ruolo")
    if role == Role.EMPLOYEE:
        if not session.get("employee_id"):
            raise AuthorizationError("Sessione non valida: effettua l'accesso")
        merchant_id = session.get("merchant_id")
        return Actor.employee(int(session["employee_id"]), int(merchant_id) if merchant_id else None)
    if role == Role.MERCHANT:
        if not session.get("merchant_id"):
            raise AuthorizationError("Sessione non valida: effettua l'accesso")
        return Actor.merchant(int(session["merchant_id"]))
    return Actor.admin()


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Corpo della richiesta non valido")
    return data

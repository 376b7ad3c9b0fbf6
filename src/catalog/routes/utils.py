from typing import Optional

from flask import abort, current_app, g, jsonify, request
from marshmallow import Schema, ValidationError as MarshmallowValidationError

from catalog.core.dependencies import get_container
from catalog.services.credential_cache import CredentialCache
from catalog.services.credentials import get_profile_data
from catalog.services.database_service import DatabaseService
from catalog.utils.date_utils import DateUtils


def success_response(data, message: Optional[str] = None, status: int = 200):
    """Consistent success response envelope."""
    response = {
        "success": True,
        "data": data,
        "timestamp": DateUtils.now_iso(),
    }
    if message:
        response["message"] = message
    return jsonify(response), status


def parse_int(
    v,
    default=None,
    min_val: Optional[int] = None,
    max_val: Optional[int] = None,
    field_name: str = "value",
) -> Optional[int]:
    """Parse an integer with optional range validation."""
    if v is None or v == "":
        return default
    try:
        result = int(v)
    except (TypeError, ValueError):
        abort(400, f"Invalid {field_name}: must be a valid integer")
    if min_val is not None and result < min_val:
        abort(400, f"{field_name} must be at least {min_val}")
    if max_val is not None and result > max_val:
        abort(400, f"{field_name} cannot exceed {max_val}")
    return result


def load_args(schema: Schema) -> dict:
    """Validate the query string, aborting with 400 on bad input."""
    try:
        return schema.load(request.args)
    except MarshmallowValidationError as err:
        abort(400, str(err.messages))


def load_json(schema: Schema) -> dict:
    """Validate a JSON body, aborting with 400 on bad input."""
    if not request.is_json:
        abort(400, "Content-Type must be application/json.")
    try:
        return schema.load(request.get_json(force=True) or {})
    except MarshmallowValidationError as err:
        abort(400, str(err.messages))


def json_body() -> dict:
    """Raw JSON object body; field validation happens in the service layer."""
    if not request.is_json:
        abort(400, "Content-Type must be application/json.")
    body = request.get_json(force=True)
    if not isinstance(body, dict):
        abort(400, "Request body must be a JSON object.")
    return body


def get_current_user_id() -> str:
    """Extract the authenticated user ID from the X-User-Id request header."""
    uid = (request.headers.get("X-User-Id") or "").strip()
    if not uid:
        abort(401, "Missing X-User-Id header.")
    if len(uid) > 128:
        abort(400, "Invalid X-User-Id header.")
    return uid


def get_database_service() -> DatabaseService:
    """
    Database client for the current user, created once per request.

    Credentials come from the credential cache; the app's
    DATABASE_SERVICE_FACTORY builds the client from them.
    """
    if "db" not in g:
        user_id = get_current_user_id()
        cache = get_container().get(CredentialCache)
        credentials = get_profile_data(user_id, cache)
        factory = current_app.config.get("DATABASE_SERVICE_FACTORY", DatabaseService)
        g.db = factory(credentials)
    return g.db


def close_database_service(exc=None) -> None:
    db = g.pop("db", None)
    if db is not None:
        db.close()

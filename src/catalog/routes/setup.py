import logging

from flask import Blueprint, current_app

from catalog.core.dependencies import get_container
from catalog.core.exceptions import ExternalServiceError
from catalog.routes.schemas import ProvisionDatabaseSchema
from catalog.routes.utils import (
    get_current_user_id, get_database_service, json_body, load_json, success_response,
)
from catalog.services.credential_cache import CredentialCache
from catalog.services.credentials import cache_and_get_credentials
from catalog.services.database_service import DatabaseService
from catalog.services.provisioning_service import ProvisioningService
from catalog.services.table_service import TableService

logger = logging.getLogger(__name__)

setup_bp = Blueprint("setup", __name__)

_provision_schema = ProvisionDatabaseSchema()


def _cache() -> CredentialCache:
    return get_container().get(CredentialCache)


@setup_bp.route("/database", methods=["POST"])
def provision_database():
    """
    Onboarding: create (or reuse) the user's database, issue a token,
    cache the credentials and create the system tables.
    """
    user_id = get_current_user_id()
    body = load_json(_provision_schema)

    credentials = get_container().get(ProvisioningService).provision(body["email"], user_id)
    _cache().cache_credentials(credentials, user_id)

    factory = current_app.config.get("DATABASE_SERVICE_FACTORY", DatabaseService)
    db = factory(credentials)
    try:
        system_tables = TableService(db).ensure_system_tables()
    finally:
        db.close()

    return success_response(
        {"database": credentials.turso_db_name, "system_tables": system_tables},
        "Database ready." if system_tables else "Database created, system tables incomplete.",
        201,
    )


@setup_bp.route("/credentials", methods=["POST"])
def store_credentials():
    """Cache credentials from the profile record handed over by the auth layer."""
    user_id = get_current_user_id()
    credentials = cache_and_get_credentials(user_id, json_body(), _cache())
    return success_response({"database": credentials.turso_db_name}, "Credentials cached.")


@setup_bp.route("/credentials", methods=["GET"])
def credential_cache_info():
    get_current_user_id()
    return success_response(_cache().get_cache_info())


@setup_bp.route("/credentials", methods=["DELETE"])
def clear_credentials():
    get_current_user_id()
    _cache().clear_credential_cache()
    return success_response({"cleared": True})


@setup_bp.route("/tables", methods=["POST"])
def create_tables():
    """Create every catalog table in the current user's database."""
    if not TableService(get_database_service()).create_product_tables():
        raise ExternalServiceError("turso", "Failed to create one or more catalog tables")
    return success_response({"created": True}, "Catalog tables created.", 201)

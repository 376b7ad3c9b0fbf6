import logging
from typing import Any, Dict, Optional

from flask import Flask, jsonify

from catalog.core.config import config
from catalog.core.dependencies import get_container
from catalog.core.exceptions import BaseCatalogException
from catalog.routes import (
    attributes_bp, entities_bp, inventory_bp, products_bp, setup_bp, storage_bp,
)
from catalog.routes.utils import close_database_service
from catalog.schemas.common_schemas import ErrorResponse
from catalog.services.credential_cache import CredentialCache
from catalog.services.provisioning_service import ProvisioningService
from catalog.services.r2_storage_service import R2StorageService
from catalog.utils.date_utils import DateUtils

logging.basicConfig(
    level=getattr(logging, config.app.log_level.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)

logger = logging.getLogger(__name__)


def _register_services() -> None:
    container = get_container()
    if not container.is_registered(CredentialCache):
        container.register_factory(CredentialCache, CredentialCache)
    if not container.is_registered(R2StorageService):
        container.register_factory(R2StorageService, R2StorageService)
    if not container.is_registered(ProvisioningService):
        container.register_factory(ProvisioningService, ProvisioningService)


def create_app(overrides: Optional[Dict[str, Any]] = None) -> Flask:
    """
    Application factory.

    `overrides` is merged into the Flask config; tests use it to set
    DATABASE_SERVICE_FACTORY to a callable building a fake client from
    DatabaseCredentials.
    """
    app = Flask(__name__)
    app.config.update(overrides or {})

    _register_services()

    # ------------------------------------------------------------------ #
    # Blueprints, each domain registered under /api/v1/                   #
    # ------------------------------------------------------------------ #
    prefix = f"/api/{config.api.version}"
    app.register_blueprint(products_bp,   url_prefix=f"{prefix}/products")
    app.register_blueprint(inventory_bp,  url_prefix=f"{prefix}/inventory")
    app.register_blueprint(entities_bp,   url_prefix=f"{prefix}/entities")
    app.register_blueprint(attributes_bp, url_prefix=f"{prefix}/attributes")
    app.register_blueprint(storage_bp,    url_prefix=f"{prefix}/storage")
    app.register_blueprint(setup_bp,      url_prefix=f"{prefix}/setup")

    app.teardown_appcontext(close_database_service)

    # ------------------------------------------------------------------ #
    # Error handlers, consistent JSON error envelope                      #
    # ------------------------------------------------------------------ #
    @app.errorhandler(BaseCatalogException)
    def catalog_error(e: BaseCatalogException):
        if e.status_code >= 500:
            logger.error(f"{e.error_code}: {e.internal_message}")
        else:
            logger.info(f"{e.error_code}: {e.message}")
        body = ErrorResponse(error=e.to_dict()["error"]).model_dump(mode="json")
        return jsonify(body), e.status_code

    @app.errorhandler(400)
    def bad_request(e):
        return jsonify({"success": False, "error": str(e.description)}), 400

    @app.errorhandler(401)
    def unauthorized(e):
        return jsonify({"success": False, "error": str(e.description)}), 401

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"success": False, "error": str(e.description)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"success": False, "error": str(e.description)}), 405

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"success": False, "error": "An internal server error occurred."}), 500

    # ------------------------------------------------------------------ #
    # Health check                                                         #
    # ------------------------------------------------------------------ #
    @app.get("/health")
    def health():
        """Liveness probe. Tenant databases are per user, so none is pinged here."""
        return jsonify({
            "status": "ok",
            "environment": config.environment,
            "timestamp": DateUtils.now_iso(),
        }), 200

    return app


if __name__ == "__main__":
    config.validate()
    application = create_app()
    application.run(debug=config.app.debug, host=config.app.host, port=config.app.port)

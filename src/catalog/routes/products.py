import logging

from flask import Blueprint

from catalog.repositories.product_repository import ProductRepository
from catalog.routes.schemas import ProductListQuerySchema
from catalog.routes.utils import get_database_service, json_body, load_args, success_response
from catalog.schemas.common_schemas import PaginationResponse
from catalog.schemas.product_schemas import ProductListRequest
from catalog.services.product_service import ProductService

logger = logging.getLogger(__name__)

products_bp = Blueprint("products", __name__)

_list_schema = ProductListQuerySchema()


def _service() -> ProductService:
    return ProductService(ProductRepository(get_database_service()))


@products_bp.route("", methods=["GET"])
def list_products():
    """List products with page-number pagination, filtering, and search."""
    args = load_args(_list_schema)
    request_model = ProductListRequest(
        page=args["page"],
        page_size=args["page_size"],
        search=args["q"],
        type=args["type"],
        publish=args["publish"],
        category=args["category"],
    )

    products, state = _service().list_products(request_model)
    return success_response({
        "items": [p.to_dict() for p in products],
        "pagination": PaginationResponse.from_state(state).model_dump(),
    })


@products_bp.route("/<int:product_id>", methods=["GET"])
def get_product(product_id: int):
    return success_response(_service().get_product(product_id).to_dict())


@products_bp.route("", methods=["POST"])
def create_product():
    product = _service().create_product(json_body())
    return success_response(product.to_dict(), "Product created.", 201)


@products_bp.route("/<int:product_id>", methods=["PATCH", "PUT"])
def update_product(product_id: int):
    product = _service().update_product(product_id, json_body())
    return success_response(product.to_dict(), "Product updated.")


@products_bp.route("/<int:product_id>", methods=["DELETE"])
def delete_product(product_id: int):
    _service().delete_product(product_id)
    return success_response({"id": product_id}, "Product deleted.")

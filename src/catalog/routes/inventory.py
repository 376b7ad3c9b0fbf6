import logging

from flask import Blueprint, request

from catalog.repositories.inventory_repository import InventoryRepository
from catalog.repositories.product_repository import ProductRepository
from catalog.routes.schemas import InventoryQuerySchema
from catalog.routes.utils import get_database_service, json_body, load_args, parse_int, success_response
from catalog.services.inventory_service import InventoryService

logger = logging.getLogger(__name__)

inventory_bp = Blueprint("inventory", __name__)

_query_schema = InventoryQuerySchema()


def _service() -> InventoryService:
    db = get_database_service()
    return InventoryService(InventoryRepository(db), ProductRepository(db))


@inventory_bp.route("", methods=["GET"])
def list_inventory():
    args = load_args(_query_schema)
    items = _service().list_items(limit=args["limit"], product_id=args["product_id"])
    return success_response({"items": [item.to_dict() for item in items], "count": len(items)})


@inventory_bp.route("/low-stock", methods=["GET"])
def low_stock():
    limit = parse_int(request.args.get("limit"), default=100, min_val=1, max_val=500, field_name="limit")
    return success_response(_service().low_stock_report(limit))


@inventory_bp.route("/<int:item_id>", methods=["GET"])
def get_item(item_id: int):
    return success_response(_service().get_item(item_id).to_dict())


@inventory_bp.route("", methods=["POST"])
def create_item():
    item = _service().create_item(json_body())
    return success_response(item.to_dict(), "Inventory item created.", 201)


@inventory_bp.route("/<int:item_id>", methods=["PATCH", "PUT"])
def update_item(item_id: int):
    item = _service().update_item(item_id, json_body())
    return success_response(item.to_dict(), "Inventory item updated.")


@inventory_bp.route("/<int:item_id>/adjust", methods=["POST"])
def adjust_stock(item_id: int):
    item = _service().adjust_stock(item_id, json_body())
    return success_response(item.to_dict(), "Stock adjusted.")


@inventory_bp.route("/<int:item_id>", methods=["DELETE"])
def delete_item(item_id: int):
    _service().delete_item(item_id)
    return success_response({"id": item_id}, "Inventory item deleted.")

import logging

from flask import Blueprint, abort

from catalog.models.attributes import ATTRIBUTE_TYPES
from catalog.models.entities import ENTITY_TYPES
from catalog.routes.schemas import ListQuerySchema
from catalog.routes.utils import get_database_service, json_body, load_args, success_response
from catalog.services.catalog_entity_service import CatalogEntityService

logger = logging.getLogger(__name__)

entities_bp = Blueprint("entities", __name__)
attributes_bp = Blueprint("attributes", __name__)

_list_schema = ListQuerySchema()


def _service() -> CatalogEntityService:
    return CatalogEntityService(get_database_service())


def _check_entity_kind(kind: str) -> None:
    if kind not in ENTITY_TYPES:
        abort(404, f"Unknown entity type: {kind}")


def _check_attribute_kind(kind: str) -> None:
    if kind not in ATTRIBUTE_TYPES:
        abort(404, f"Unknown attribute type: {kind}")


# Categories, collections, vendors, brands, tags, warehouses, stores

@entities_bp.route("/<kind>", methods=["GET"])
def list_entities(kind: str):
    """List one lookup table by name; `q` keeps rows matching every term."""
    _check_entity_kind(kind)
    args = load_args(_list_schema)
    items = _service().list_entities(kind, search=args["q"], limit=args["limit"])
    return success_response({"items": [item.to_dict() for item in items], "count": len(items)})


@entities_bp.route("/<kind>/<int:entity_id>", methods=["GET"])
def get_entity(kind: str, entity_id: int):
    _check_entity_kind(kind)
    return success_response(_service().get_entity(kind, entity_id).to_dict())


@entities_bp.route("/<kind>", methods=["POST"])
def create_entity(kind: str):
    _check_entity_kind(kind)
    entity = _service().create_entity(kind, json_body())
    return success_response(entity.to_dict(), f"{entity.label} created.", 201)


@entities_bp.route("/<kind>/<int:entity_id>", methods=["PATCH", "PUT"])
def update_entity(kind: str, entity_id: int):
    _check_entity_kind(kind)
    entity = _service().update_entity(kind, entity_id, json_body())
    return success_response(entity.to_dict(), f"{entity.label} updated.")


@entities_bp.route("/<kind>/<int:entity_id>", methods=["DELETE"])
def delete_entity(kind: str, entity_id: int):
    _check_entity_kind(kind)
    _service().delete_entity(kind, entity_id)
    return success_response({"id": entity_id}, "Deleted.")


# Options, metafields, modifiers, media

@attributes_bp.route("/<kind>", methods=["GET"])
def list_attributes(kind: str):
    _check_attribute_kind(kind)
    args = load_args(_list_schema)
    items = _service().list_attributes(kind, limit=args["limit"])
    return success_response({"items": [item.to_dict() for item in items], "count": len(items)})


@attributes_bp.route("/<kind>/<int:parent_id>/children", methods=["GET"])
def list_children(kind: str, parent_id: int):
    _check_attribute_kind(kind)
    items = _service().attribute_children(kind, parent_id)
    return success_response({"items": [item.to_dict() for item in items], "count": len(items)})


@attributes_bp.route("/<kind>", methods=["POST"])
def create_attribute(kind: str):
    _check_attribute_kind(kind)
    attribute = _service().create_attribute(kind, json_body())
    return success_response(attribute.to_dict(), f"{attribute.label} created.", 201)


@attributes_bp.route("/<kind>/<int:attribute_id>", methods=["PATCH", "PUT"])
def update_attribute(kind: str, attribute_id: int):
    _check_attribute_kind(kind)
    attribute = _service().update_attribute(kind, attribute_id, json_body())
    return success_response(attribute.to_dict(), f"{attribute.label} updated.")


@attributes_bp.route("/<kind>/<int:attribute_id>", methods=["DELETE"])
def delete_attribute(kind: str, attribute_id: int):
    _check_attribute_kind(kind)
    _service().delete_attribute(kind, attribute_id)
    return success_response({"id": attribute_id}, "Deleted.")

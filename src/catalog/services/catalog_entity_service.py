from typing import Any, Dict, List, Sequence
from catalog.repositories.attribute_repository import AttributeRepository
from catalog.repositories.named_entity_repository import NamedEntityRepository
from catalog.models.attributes import Attribute, ATTRIBUTE_TYPES
from catalog.models.entities import NamedEntity, ENTITY_TYPES
from catalog.schemas.common_schemas import parse_request
from catalog.schemas.entity_schemas import AttributeRequest, NamedEntityRequest
from catalog.services.database_service import DatabaseService
from catalog.core.exceptions import ValidationError
import logging

logger = logging.getLogger(__name__)


def search_entities(items: Sequence[NamedEntity], text: str) -> List[NamedEntity]:
    """Entities whose name or notes contain every whitespace-separated term"""
    terms = [term for term in (text or "").lower().split() if term]
    if not terms:
        return list(items)
    return [item for item in items if item is not None and item.matches(terms)]


class CatalogEntityService:
    """CRUD for the lookup tables and the product attribute tables"""

    def __init__(self, db: DatabaseService):
        self.db = db

    def entities(self, kind: str) -> NamedEntityRepository:
        return NamedEntityRepository(self.db, kind)

    def attributes(self, kind: str) -> AttributeRepository:
        return AttributeRepository(self.db, kind)

    @staticmethod
    def entity_kinds() -> List[str]:
        return sorted(ENTITY_TYPES)

    @staticmethod
    def attribute_kinds() -> List[str]:
        return sorted(ATTRIBUTE_TYPES)

    # Named entities

    def list_entities(self, kind: str, search: str = "", limit: int = 100) -> List[NamedEntity]:
        return search_entities(self.entities(kind).list_all(limit), search)

    def get_entity(self, kind: str, entity_id: int) -> NamedEntity:
        return self.entities(kind).get_by_id(entity_id)

    def create_entity(self, kind: str, data: Dict[str, Any]) -> NamedEntity:
        repo = self.entities(kind)
        request = parse_request(NamedEntityRequest, data)
        if not request.name:
            raise ValidationError(f"{repo.entity_class.label} name is required")

        entity = repo.entity_class(
            name=request.name,
            images=request.images or [],
            notes=request.notes,
            parent=request.parent,
        )
        return repo.create(entity)

    def update_entity(self, kind: str, entity_id: int, data: Dict[str, Any]) -> NamedEntity:
        repo = self.entities(kind)
        request = parse_request(NamedEntityRequest, data)
        updates = request.model_dump(exclude_unset=True)
        if "name" in updates and not updates["name"]:
            raise ValidationError(f"{repo.entity_class.label} name cannot be blank")
        if not updates:
            raise ValidationError("No fields to update")
        return repo.update(entity_id, updates)

    def delete_entity(self, kind: str, entity_id: int) -> None:
        self.entities(kind).delete(entity_id)

    # Attributes

    def list_attributes(self, kind: str, limit: int = 100) -> List[Attribute]:
        return self.attributes(kind).list_all(limit)

    def attribute_children(self, kind: str, parent_id: int) -> List[Attribute]:
        return self.attributes(kind).children_of(parent_id)

    def create_attribute(self, kind: str, data: Dict[str, Any]) -> Attribute:
        repo = self.attributes(kind)
        values = parse_request(AttributeRequest, data).values()
        attribute_class = repo.attribute_class

        if "title" in attribute_class.columns() and not values.get("title"):
            raise ValidationError(f"{attribute_class.label} title is required")
        if attribute_class.table_name == "media" and not values.get("url"):
            raise ValidationError("Media url is required")

        attribute = attribute_class(**{k: v for k, v in values.items() if k in attribute_class.columns()})
        return repo.create(attribute)

    def update_attribute(self, kind: str, attribute_id: int, data: Dict[str, Any]) -> Attribute:
        values = parse_request(AttributeRequest, data).values()
        if "title" in values and not values["title"]:
            raise ValidationError("Title cannot be blank")
        return self.attributes(kind).update(attribute_id, values)

    def delete_attribute(self, kind: str, attribute_id: int) -> None:
        self.attributes(kind).delete(attribute_id)

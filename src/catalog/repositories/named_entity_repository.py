from typing import List, Dict, Any, Type
from catalog.repositories.base import BaseRepository
from catalog.models.entities import NamedEntity, ENTITY_TYPES
from catalog.core.exceptions import NotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


class NamedEntityRepository(BaseRepository[NamedEntity]):
    """
    Repository shared by the lookup tables (categories, collections, vendors,
    brands, tags, warehouses, stores). The kind is the table name.
    """

    def __init__(self, db, kind: str):
        super().__init__(db)
        if kind not in ENTITY_TYPES:
            raise ValidationError(f"Unknown entity type: {kind}")
        self.entity_class: Type[NamedEntity] = ENTITY_TYPES[kind]

    @property
    def table_name(self) -> str:
        return self.entity_class.table_name

    @property
    def _columns(self) -> str:
        columns = "id, name, image, notes"
        return columns + ", parent" if self.entity_class.has_parent else columns

    def get_by_id(self, entity_id: int) -> NamedEntity:
        row = self.execute_single_query(
            f"SELECT {self._columns} FROM {self.table_name} WHERE id = :entity_id",
            {"entity_id": entity_id},
        )
        if not row:
            raise NotFoundError(self.entity_class.label, str(entity_id))
        return self.entity_class.from_row(row)

    def list_all(self, limit: int = 100) -> List[NamedEntity]:
        rows = self.execute_query(
            f"SELECT {self._columns} FROM {self.table_name} ORDER BY name LIMIT :limit",
            {"limit": limit},
        )
        return [self.entity_class.from_row(row) for row in rows]

    def create(self, entity: NamedEntity) -> NamedEntity:
        data = entity.to_db_row()
        columns = list(data.keys())
        entity.id = self.execute_insert_returning_id(
            f"INSERT INTO {self.table_name} ({', '.join(columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})",
            data,
        )
        logger.info(f"Created {self.entity_class.label.lower()} {entity.id} '{entity.name}'")
        return entity

    def update(self, entity_id: int, updates: Dict[str, Any]) -> NamedEntity:
        """Partial update of name, image, notes (and parent where supported)"""
        current = self.get_by_id(entity_id)
        merged = current.to_dict()
        merged.update({k: v for k, v in updates.items() if k in ("name", "images", "notes", "parent")})
        entity = self.entity_class(
            id=entity_id,
            name=merged.get("name") or "",
            images=list(merged.get("images") or []),
            notes=merged.get("notes"),
            parent=merged.get("parent"),
        )

        data = entity.to_db_row()
        set_clause = ", ".join(f"{c} = :{c}" for c in data)
        self.execute_command(
            f"UPDATE {self.table_name} SET {set_clause} WHERE id = :entity_id",
            {**data, "entity_id": entity_id},
        )
        return entity

    def delete(self, entity_id: int) -> None:
        affected = self.execute_command(
            f"DELETE FROM {self.table_name} WHERE id = :entity_id", {"entity_id": entity_id}
        )
        if affected == 0:
            raise NotFoundError(self.entity_class.label, str(entity_id))
        logger.info(f"Deleted {self.entity_class.label.lower()} {entity_id}")

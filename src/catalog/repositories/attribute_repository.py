from typing import List, Dict, Any, Type
from catalog.repositories.base import BaseRepository
from catalog.models.attributes import Attribute, ATTRIBUTE_TYPES
from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.utils.sql_escape import escape_sql_identifier, sanitize_input
import logging

logger = logging.getLogger(__name__)


class AttributeRepository(BaseRepository[Attribute]):
    """Repository for options, metafields, modifiers and media rows"""

    def __init__(self, db, kind: str):
        super().__init__(db)
        if kind not in ATTRIBUTE_TYPES:
            raise ValidationError(f"Unknown attribute type: {kind}")
        self.attribute_class: Type[Attribute] = ATTRIBUTE_TYPES[kind]

    @property
    def table_name(self) -> str:
        return self.attribute_class.table_name

    @property
    def _select(self) -> str:
        # "group" and "order" are keywords, so every column is quoted
        columns = ", ".join(escape_sql_identifier(c) for c in ["id"] + self.attribute_class.columns())
        return f"SELECT {columns} FROM {self.table_name}"

    def get_by_id(self, attribute_id: int) -> Attribute:
        row = self.execute_single_query(f"{self._select} WHERE id = :attribute_id", {"attribute_id": attribute_id})
        if not row:
            raise NotFoundError(self.attribute_class.label, str(attribute_id))
        return self.attribute_class.from_row(row)

    def list_all(self, limit: int = 100) -> List[Attribute]:
        rows = self.execute_query(
            f"{self._select} ORDER BY {self.attribute_class.order_by} LIMIT :limit",
            {"limit": limit},
        )
        return [self.attribute_class.from_row(row) for row in rows]

    def children_of(self, parent_id: int) -> List[Attribute]:
        """Values belonging to one option or metafield group"""
        if "parentid" not in self.attribute_class.columns():
            raise ValidationError(f"{self.attribute_class.label} rows have no parent")
        rows = self.execute_query(
            f"{self._select} WHERE parentid = :parent_id ORDER BY {self.attribute_class.order_by}",
            {"parent_id": parent_id},
        )
        return [self.attribute_class.from_row(row) for row in rows]

    def _column_values(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: sanitize_input(value)
            for key, value in data.items()
            if key in self.attribute_class.columns()
        }

    def create(self, attribute: Attribute) -> Attribute:
        data = self._column_values(attribute.to_db_row())
        columns = list(data.keys())
        attribute.id = self.execute_insert_returning_id(
            f"INSERT INTO {self.table_name} ({', '.join(escape_sql_identifier(c) for c in columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})",
            data,
        )
        logger.info(f"Created {self.attribute_class.label.lower()} {attribute.id}")
        return attribute

    def update(self, attribute_id: int, updates: Dict[str, Any]) -> Attribute:
        data = self._column_values(updates)
        if not data:
            raise ValidationError("No updatable fields supplied")

        set_clause = ", ".join(f"{escape_sql_identifier(c)} = :{c}" for c in data)
        affected = self.execute_command(
            f"UPDATE {self.table_name} SET {set_clause} WHERE id = :attribute_id",
            {**data, "attribute_id": attribute_id},
        )
        if affected == 0:
            raise NotFoundError(self.attribute_class.label, str(attribute_id))
        return self.get_by_id(attribute_id)

    def delete(self, attribute_id: int) -> None:
        affected = self.execute_command(
            f"DELETE FROM {self.table_name} WHERE id = :attribute_id", {"attribute_id": attribute_id}
        )
        if affected == 0:
            raise NotFoundError(self.attribute_class.label, str(attribute_id))

from typing import List, Optional, Dict, Any
from catalog.repositories.base import BaseRepository
from catalog.models.inventory import InventoryItem, INVENTORY_COLUMNS
from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.utils.sql_escape import escape_sql, sanitize_input
import logging

logger = logging.getLogger(__name__)

_SELECT_ITEMS = """
SELECT
    i.id, i.productId, i.sku, i.image, i.option1, i.option2, i.option3,
    i.reorderlevel, i.reorderqty, i.warehouse, i.expiry, i.batchno,
    i.quantity, i.cost, i.price, i.margin, i.saleprice,
    p.title AS productTitle
FROM inventory i
LEFT JOIN products p ON p.id = i.productId
"""


class InventoryRepository(BaseRepository[InventoryItem]):
    """Repository for stock-keeping units in the inventory table"""

    @property
    def table_name(self) -> str:
        return "inventory"

    def get_by_id(self, item_id: int) -> InventoryItem:
        row = self.execute_single_query(_SELECT_ITEMS + " WHERE i.id = :item_id", {"item_id": item_id})
        if not row:
            raise NotFoundError("Inventory item", str(item_id))
        return InventoryItem.from_row(row)

    def list_items(self, limit: int = 100, product_id: Optional[int] = None) -> List[InventoryItem]:
        """Inventory rows, newest first, joined with their product title"""
        query = _SELECT_ITEMS
        params: Dict[str, Any] = {"limit": limit}

        if product_id is not None:
            query += " WHERE i.productId = :product_id"
            params["product_id"] = product_id

        query += " ORDER BY i.id DESC LIMIT :limit"
        return [InventoryItem.from_row(row) for row in self.execute_query(query, params)]

    def low_stock(self, limit: int = 100) -> List[InventoryItem]:
        """Items at or below their reorder level, emptiest first"""
        query = (
            _SELECT_ITEMS
            + " WHERE i.reorderlevel IS NOT NULL AND COALESCE(i.quantity, 0) <= i.reorderlevel"
            + " ORDER BY i.quantity ASC, i.id LIMIT :limit"
        )
        return [InventoryItem.from_row(row) for row in self.execute_query(query, {"limit": limit})]

    @staticmethod
    def _column_values(data: Dict[str, Any]) -> Dict[str, Any]:
        return {
            key: sanitize_input(value)
            for key, value in data.items()
            if key in INVENTORY_COLUMNS
        }

    def create(self, item: InventoryItem) -> InventoryItem:
        data = self._column_values(item.to_db_row())
        columns = list(data.keys())
        query = (
            f"INSERT INTO inventory ({', '.join(escape_sql(c) for c in columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})"
        )
        item.id = self.execute_insert_returning_id(query, data)
        logger.info(f"Created inventory item {item.id} for product {item.product_id}")
        return item

    def update(self, item_id: int, updates: Dict[str, Any]) -> InventoryItem:
        data = self._column_values(updates)
        if not data:
            raise ValidationError("No updatable fields supplied")

        set_clause = ", ".join(f"{escape_sql(c)} = :{c}" for c in data)
        affected = self.execute_command(
            f"UPDATE inventory SET {set_clause} WHERE id = :item_id",
            {**data, "item_id": item_id},
        )
        if affected == 0:
            raise NotFoundError("Inventory item", str(item_id))
        return self.get_by_id(item_id)

    def adjust_quantity(self, item_id: int, delta: int) -> InventoryItem:
        """Add delta to the stored quantity, never going below zero"""
        affected = self.execute_command(
            "UPDATE inventory SET quantity = MAX(0, COALESCE(quantity, 0) + :delta) WHERE id = :item_id",
            {"delta": delta, "item_id": item_id},
        )
        if affected == 0:
            raise NotFoundError("Inventory item", str(item_id))
        logger.info(f"Adjusted inventory item {item_id} by {delta}")
        return self.get_by_id(item_id)

    def delete(self, item_id: int) -> None:
        affected = self.execute_command("DELETE FROM inventory WHERE id = :item_id", {"item_id": item_id})
        if affected == 0:
            raise NotFoundError("Inventory item", str(item_id))

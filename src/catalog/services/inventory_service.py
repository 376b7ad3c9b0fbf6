from typing import Any, Dict, List, Optional
from catalog.repositories.inventory_repository import InventoryRepository
from catalog.repositories.product_repository import ProductRepository
from catalog.models.inventory import InventoryItem
from catalog.schemas.common_schemas import parse_request
from catalog.schemas.inventory_schemas import (
    InventoryCreateRequest, InventoryUpdateRequest, StockAdjustmentRequest
)
from catalog.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
import logging

logger = logging.getLogger(__name__)


class InventoryService:
    """Stock levels per product variant"""

    def __init__(self, inventory_repository: InventoryRepository,
                 product_repository: Optional[ProductRepository] = None):
        self.inventory_repo = inventory_repository
        self.product_repo = product_repository

    def list_items(self, limit: int = 100, product_id: Optional[int] = None) -> List[InventoryItem]:
        return self.inventory_repo.list_items(limit=limit, product_id=product_id)

    def get_item(self, item_id: int) -> InventoryItem:
        return self.inventory_repo.get_by_id(item_id)

    def create_item(self, data: Dict[str, Any]) -> InventoryItem:
        request = parse_request(InventoryCreateRequest, data)

        if self.product_repo is not None and not self.product_repo.exists(request.productId):
            raise NotFoundError("Product", str(request.productId))

        item = self.inventory_repo.create(request.to_item())
        logger.info(f"Stock record {item.id} created with {item.quantity} units")
        return item

    def update_item(self, item_id: int, data: Dict[str, Any]) -> InventoryItem:
        request = parse_request(InventoryUpdateRequest, data)
        updates = request.to_updates()
        if not updates:
            raise ValidationError("No fields to update")
        return self.inventory_repo.update(item_id, updates)

    def adjust_stock(self, item_id: int, data: Dict[str, Any]) -> InventoryItem:
        """
        Apply a relative stock change

        Business Rules:
        - A zero change is rejected
        - Removing more units than are on hand is rejected
        """
        request = parse_request(StockAdjustmentRequest, data)
        if request.delta == 0:
            raise ValidationError("Stock adjustment must not be zero")

        current = self.inventory_repo.get_by_id(item_id)
        if current.quantity + request.delta < 0:
            raise BusinessLogicError(
                f"Cannot remove {-request.delta} units, only {current.quantity} on hand",
                rule="stock_cannot_go_negative",
            )

        item = self.inventory_repo.adjust_quantity(item_id, request.delta)
        logger.info(
            f"Adjusted stock of item {item_id} by {request.delta} "
            f"({request.reason or 'no reason given'}), now {item.quantity}"
        )
        if item.needs_reorder:
            logger.warning(f"Item {item_id} is at or below its reorder level ({item.reorderlevel})")
        return item

    def delete_item(self, item_id: int) -> None:
        self.inventory_repo.delete(item_id)

    def low_stock_report(self, limit: int = 100) -> Dict[str, Any]:
        items = self.inventory_repo.low_stock(limit)
        return {
            "count": len(items),
            "out_of_stock": sum(1 for item in items if not item.in_stock),
            "items": [item.to_dict() for item in items],
        }

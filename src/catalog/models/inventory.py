from dataclasses import dataclass
from typing import Optional, Dict, Any, List

from catalog.models.product import _as_float
from catalog.utils.json_columns import primary_image


def _as_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None or value == '':
        return default
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return default


@dataclass
class InventoryItem:
    """A stock-keeping unit for a product variant, from the `inventory` table"""
    id: Optional[int] = None
    product_id: Optional[int] = None
    sku: Optional[str] = None
    image: Optional[str] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None
    reorderlevel: Optional[int] = None
    reorderqty: Optional[int] = None
    warehouse: Optional[str] = None
    expiry: Optional[str] = None
    batchno: Optional[str] = None
    quantity: int = 0
    cost: Optional[float] = None
    price: Optional[float] = None
    stored_margin: Optional[float] = None
    saleprice: Optional[float] = None
    product_title: Optional[str] = None  # Joined from products when listing

    @property
    def margin(self) -> Optional[float]:
        """Stored margin, or price minus cost when both are known"""
        if self.stored_margin is not None:
            return self.stored_margin
        if self.price is None or self.cost is None:
            return None
        return round(self.price - self.cost, 2)

    @property
    def needs_reorder(self) -> bool:
        return self.reorderlevel is not None and self.quantity <= self.reorderlevel

    @property
    def in_stock(self) -> bool:
        return self.quantity > 0

    @property
    def variant_label(self) -> str:
        """Human-readable variant, e.g. "Red / M" """
        return " / ".join(o for o in (self.option1, self.option2, self.option3) if o)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "InventoryItem":
        return cls(
            id=row.get("id"),
            product_id=_as_int(row.get("productId")),
            sku=row.get("sku"),
            image=primary_image(row.get("image")),
            option1=row.get("option1"),
            option2=row.get("option2"),
            option3=row.get("option3"),
            reorderlevel=_as_int(row.get("reorderlevel")),
            reorderqty=_as_int(row.get("reorderqty")),
            warehouse=row.get("warehouse"),
            expiry=row.get("expiry"),
            batchno=row.get("batchno"),
            quantity=_as_int(row.get("quantity"), 0),
            cost=_as_float(row.get("cost")),
            price=_as_float(row.get("price")),
            stored_margin=_as_float(row.get("margin")),
            saleprice=_as_float(row.get("saleprice")),
            product_title=row.get("productTitle"),
        )

    def to_db_row(self) -> Dict[str, Any]:
        return {
            "productId": self.product_id,
            "sku": self.sku,
            "image": self.image,
            "option1": self.option1,
            "option2": self.option2,
            "option3": self.option3,
            "reorderlevel": self.reorderlevel,
            "reorderqty": self.reorderqty,
            "warehouse": self.warehouse,
            "expiry": self.expiry,
            "batchno": self.batchno,
            "quantity": self.quantity,
            "cost": self.cost,
            "price": self.price,
            "margin": self.stored_margin,
            "saleprice": self.saleprice,
        }

    def to_dict(self) -> Dict[str, Any]:
        data = self.to_db_row()
        data.update({
            "id": self.id,
            "product_title": self.product_title,
            "variant_label": self.variant_label,
            "needs_reorder": self.needs_reorder,
            "in_stock": self.in_stock,
            "margin": self.margin,
        })
        return data


INVENTORY_COLUMNS: List[str] = list(InventoryItem().to_db_row().keys())

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Dict, Any

from catalog.models.inventory import InventoryItem


class InventoryFields(BaseModel):
    sku: Optional[str] = Field(default=None, max_length=100)
    image: Optional[str] = None
    option1: Optional[str] = None
    option2: Optional[str] = None
    option3: Optional[str] = None
    reorderlevel: Optional[int] = Field(default=None, ge=0)
    reorderqty: Optional[int] = Field(default=None, ge=0)
    warehouse: Optional[str] = None
    expiry: Optional[str] = None
    batchno: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    price: Optional[float] = Field(default=None, ge=0)
    margin: Optional[float] = None
    saleprice: Optional[float] = Field(default=None, ge=0)


class InventoryCreateRequest(InventoryFields):
    """Request to register stock for a product variant"""
    productId: int = Field(ge=1, description="Product the stock belongs to")
    quantity: int = Field(default=0, ge=0, description="Units on hand")

    def to_item(self) -> InventoryItem:
        return InventoryItem(
            product_id=self.productId,
            sku=self.sku,
            image=self.image,
            option1=self.option1,
            option2=self.option2,
            option3=self.option3,
            reorderlevel=self.reorderlevel,
            reorderqty=self.reorderqty,
            warehouse=self.warehouse,
            expiry=self.expiry,
            batchno=self.batchno,
            quantity=self.quantity,
            cost=self.cost,
            price=self.price,
            stored_margin=self.margin,
            saleprice=self.saleprice,
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "productId": 12,
                "sku": "SHIRT-RED-M",
                "option1": "Red",
                "option2": "M",
                "quantity": 25,
                "reorderlevel": 5,
                "cost": 18.5,
                "price": 49.0
            }
        }
    )


class InventoryUpdateRequest(InventoryFields):
    """Partial inventory update"""
    productId: Optional[int] = Field(default=None, ge=1)
    quantity: Optional[int] = Field(default=None, ge=0)

    def to_updates(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class StockAdjustmentRequest(BaseModel):
    """Relative change to the units on hand"""
    delta: int = Field(description="Units to add (positive) or remove (negative)")
    reason: Optional[str] = Field(default=None, max_length=200)

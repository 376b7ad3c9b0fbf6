from .base import BaseRepository
from .product_repository import ProductRepository
from .inventory_repository import InventoryRepository
from .named_entity_repository import NamedEntityRepository
from .attribute_repository import AttributeRepository

__all__ = [
    "BaseRepository",
    "ProductRepository",
    "InventoryRepository",
    "NamedEntityRepository",
    "AttributeRepository",
]

from .product import Product, ProductOption, ProductSeo, ProductSummary
from .inventory import InventoryItem
from .entities import (
    NamedEntity, Category, Collection, Vendor, Brand, Tag, Warehouse, Store, ENTITY_TYPES
)
from .attributes import Attribute, Option, Metafield, Modifier, Media, ATTRIBUTE_TYPES
from .credentials import DatabaseCredentials

__all__ = [
    "Product", "ProductOption", "ProductSeo", "ProductSummary",
    "InventoryItem",
    "NamedEntity", "Category", "Collection", "Vendor", "Brand", "Tag", "Warehouse", "Store",
    "ENTITY_TYPES",
    "Attribute", "Option", "Metafield", "Modifier", "Media", "ATTRIBUTE_TYPES",
    "DatabaseCredentials",
]

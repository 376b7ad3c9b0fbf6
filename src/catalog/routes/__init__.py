from catalog.routes.products import products_bp
from catalog.routes.inventory import inventory_bp
from catalog.routes.entities import entities_bp, attributes_bp
from catalog.routes.storage import storage_bp
from catalog.routes.setup import setup_bp

__all__ = ["products_bp", "inventory_bp", "entities_bp", "attributes_bp", "storage_bp", "setup_bp"]

from typing import List, Optional, Dict, Any
from catalog.repositories.base import BaseRepository
from catalog.models.product import Product, ProductSummary
from catalog.core.exceptions import NotFoundError, ValidationError
from catalog.services.database_service import PRODUCT_DETAIL_COLUMNS, PRODUCT_LIST_COLUMNS
from catalog.utils.date_utils import DateUtils
from catalog.utils.sql_escape import escape_like_pattern, escape_sql, sanitize_product_data
import logging

logger = logging.getLogger(__name__)


class ProductRepository(BaseRepository[Product]):
    """Repository for the products table"""

    @property
    def table_name(self) -> str:
        return "products"

    def get_by_id(self, product_id: int) -> Product:
        """
        Get a product with every column decoded

        Raises:
            NotFoundError: When no product has this id
        """
        row = self.execute_single_query(
            f"SELECT {PRODUCT_DETAIL_COLUMNS} FROM products WHERE id = :product_id",
            {"product_id": product_id},
        )
        if not row:
            raise NotFoundError("Product", str(product_id))
        return Product.from_row(row)

    def _where_clause(
        self,
        search_query: Optional[str],
        product_type: Optional[str],
        publish: Optional[str],
        category: Optional[str] = None,
    ):
        query = " WHERE 1=1"
        params: Dict[str, Any] = {}

        if search_query:
            query += " AND title LIKE :search_query ESCAPE '\\'"
            params["search_query"] = f"%{escape_like_pattern(search_query)}%"

        if product_type:
            query += " AND type = :product_type"
            params["product_type"] = product_type

        if publish:
            query += " AND publish = :publish"
            params["publish"] = publish

        if category:
            query += " AND category = :category"
            params["category"] = category

        return query, params

    def list_products(
        self,
        limit: int,
        offset: int = 0,
        search_query: Optional[str] = None,
        product_type: Optional[str] = None,
        publish: Optional[str] = None,
        category: Optional[str] = None,
    ) -> List[ProductSummary]:
        """List products newest first with offset pagination and filtering"""
        where, params = self._where_clause(search_query, product_type, publish, category)
        query = (
            f"SELECT {PRODUCT_LIST_COLUMNS} FROM products{where} "
            f"ORDER BY id DESC LIMIT :limit OFFSET :offset"
        )
        params.update({"limit": limit, "offset": offset})

        rows = self.execute_query(query, params)
        return [ProductSummary.from_row(row) for row in rows]

    def count_products(
        self,
        search_query: Optional[str] = None,
        product_type: Optional[str] = None,
        publish: Optional[str] = None,
        category: Optional[str] = None,
    ) -> int:
        where, params = self._where_clause(search_query, product_type, publish, category)
        total = self.execute_scalar(f"SELECT COUNT(*) AS total FROM products{where}", params)
        return int(total or 0)

    def create(self, product: Product) -> Product:
        """Insert a product and return it with its generated id"""
        data = sanitize_product_data(product.to_db_row())
        columns = list(data.keys())
        query = (
            f"INSERT INTO products ({', '.join(escape_sql(c) for c in columns)}) "
            f"VALUES ({', '.join(':' + c for c in columns)})"
        )

        product.id = self.execute_insert_returning_id(query, data)
        logger.info(f"Created product {product.id} '{product.title}'")
        return product

    def update(self, product_id: int, updates: Dict[str, Any]) -> Product:
        """
        Apply a partial update and return the stored product

        Only known product columns are written; `updatedat` is always stamped.
        """
        data = sanitize_product_data(updates)
        if not data:
            raise ValidationError("No updatable fields supplied")
        data["updatedat"] = DateUtils.now_iso()

        set_clause = ", ".join(f"{escape_sql(c)} = :{c}" for c in data)
        affected = self.execute_command(
            f"UPDATE products SET {set_clause} WHERE id = :product_id",
            {**data, "product_id": product_id},
        )
        if affected == 0:
            raise NotFoundError("Product", str(product_id))

        logger.info(f"Updated product {product_id}: {sorted(data.keys())}")
        return self.get_by_id(product_id)

    def delete(self, product_id: int) -> None:
        affected = self.execute_command(
            "DELETE FROM products WHERE id = :product_id", {"product_id": product_id}
        )
        if affected == 0:
            raise NotFoundError("Product", str(product_id))
        logger.info(f"Deleted product {product_id}")

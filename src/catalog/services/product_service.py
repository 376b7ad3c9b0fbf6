from typing import Any, Dict, List, Optional, Sequence, Tuple
from catalog.repositories.product_repository import ProductRepository
from catalog.models.product import Product, ProductSummary
from catalog.schemas.common_schemas import parse_request
from catalog.schemas.product_schemas import (
    ProductCreateRequest, ProductListRequest, ProductUpdateRequest
)
from catalog.core.exceptions import BusinessLogicError, NotFoundError, ValidationError
from catalog.core.config import config
from catalog.utils.date_utils import DateUtils
from catalog.utils.pagination import PaginationState
import logging

logger = logging.getLogger(__name__)


class ProductService:
    """
    Product business logic service

    Responsibilities:
    - Validate product payloads (title, prices, type, publish status)
    - Stamp creation and modification times
    - Page listings and report pagination state
    """

    def __init__(self, product_repository: ProductRepository):
        self.product_repo = product_repository

    def get_product(self, product_id: int) -> Product:
        logger.info(f"Fetching product {product_id}")
        try:
            return self.product_repo.get_by_id(product_id)
        except NotFoundError:
            logger.warning(f"Product {product_id} not found")
            raise

    def list_products(self, request: ProductListRequest) -> Tuple[List[ProductSummary], PaginationState]:
        """
        List products page by page

        Business Rules:
        - Enforce maximum page size
        - A page past the end is clamped to the last page
        """
        logger.info(f"Listing products with filters: {request.model_dump(exclude_none=True)}")

        page_size = request.page_size
        max_page_size = config.api.max_page_size
        if page_size > max_page_size:
            logger.warning(f"Requested page size {page_size} exceeds maximum {max_page_size}")
            page_size = max_page_size

        filters = dict(
            search_query=request.search,
            product_type=request.type.value if request.type else None,
            publish=request.publish.value if request.publish else None,
            category=request.category,
        )

        total = self.product_repo.count_products(**filters)
        state = PaginationState(page_size=page_size, total_items=total)
        state.set_page(request.page)

        products = self.product_repo.list_products(limit=state.page_size, offset=state.offset, **filters)
        logger.info(f"Retrieved {len(products)} of {total} products (page {state.current_page}/{state.total_pages})")
        return products, state

    def create_product(self, data: Dict[str, Any]) -> Product:
        request = parse_request(ProductCreateRequest, data)
        product = request.to_product()
        self._validate_pricing(product.price, product.saleprice)

        now = DateUtils.now_iso()
        product.createdat = now
        product.updatedat = now

        created = self.product_repo.create(product)
        logger.info(f"Product {created.id} created")
        return created

    def update_product(self, product_id: int, data: Dict[str, Any]) -> Product:
        request = parse_request(ProductUpdateRequest, data)
        updates = request.to_updates()
        if not updates:
            raise ValidationError("No fields to update")

        if "price" in updates or "saleprice" in updates:
            current = self.product_repo.get_by_id(product_id)
            self._validate_pricing(
                updates.get("price", current.price),
                updates.get("saleprice", current.saleprice),
            )

        return self.product_repo.update(product_id, updates)

    def delete_product(self, product_id: int) -> None:
        self.product_repo.delete(product_id)

    @staticmethod
    def filter_products(
        products: Sequence[Any],
        text: str = "",
        product_type: Optional[str] = None
    ) -> List[Any]:
        """
        Narrow an already-loaded product list

        `product_type` of None or "all" keeps every type; `text` matches the
        title or the type, case-insensitively.
        """
        result = list(products)
        if product_type and product_type != "all":
            result = [p for p in result if p.type == product_type]

        needle = (text or "").strip().lower()
        if not needle:
            return result
        return [
            p for p in result
            if needle in (p.title or "").lower() or needle in (p.type or "").lower()
        ]

    def _validate_pricing(self, price: Optional[float], saleprice: Optional[float]) -> None:
        """Business rule: a sale price may not exceed the list price"""
        if price is not None and saleprice is not None and saleprice > price:
            raise BusinessLogicError(
                "Sale price cannot be greater than the regular price",
                rule="saleprice_not_above_price",
            )

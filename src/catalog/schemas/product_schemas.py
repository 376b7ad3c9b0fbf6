from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List, Dict, Any
from enum import Enum

from catalog.models.product import Product, ProductOption, ProductSeo
from catalog.schemas.common_schemas import PaginationRequest


class ProductType(str, Enum):
    PHYSICAL = "physical"
    DIGITAL = "digital"


class PublishStatus(str, Enum):
    ACTIVE = "active"
    DRAFT = "draft"
    ARCHIVED = "archived"


class ProductOptionSchema(BaseModel):
    """Option entry of the `options` JSON column"""
    id: Optional[Any] = None
    title: str = Field(min_length=1)
    value: str = ""
    identifierType: Optional[str] = None
    identifierValue: Optional[str] = None
    group: Optional[str] = None


class ProductSeoSchema(BaseModel):
    slug: str = ""
    title: str = ""
    keywords: str = ""


class ProductFields(BaseModel):
    """Optional product fields shared by create and update requests"""
    images: Optional[List[str]] = None
    excerpt: Optional[str] = Field(default=None, max_length=500)
    notes: Optional[str] = None
    category: Optional[str] = None
    collection: Optional[str] = None
    unit: Optional[str] = None
    saleprice: Optional[float] = Field(default=None, ge=0, description="Sale price, never negative")
    cost: Optional[float] = Field(default=None, ge=0)
    vendor: Optional[str] = None
    brand: Optional[str] = None
    options: Optional[List[ProductOptionSchema]] = None
    modifiers: Optional[List[Any]] = None
    metafields: Optional[List[Any]] = None
    saleinfo: Optional[str] = None
    stores: Optional[str] = None
    location: Optional[str] = None
    saleschannel: Optional[str] = None
    pos: Optional[bool] = None
    website: Optional[bool] = None
    seo: Optional[ProductSeoSchema] = None
    tags: Optional[str] = None
    barcode: Optional[str] = None
    publishat: Optional[str] = None
    promoinfo: Optional[str] = None
    featured: Optional[bool] = None
    relproducts: Optional[List[Any]] = None
    sellproducts: Optional[List[Any]] = None

    @field_validator('images')
    @classmethod
    def drop_blank_images(cls, v):
        if v is None:
            return v
        return [url.strip() for url in v if url and url.strip()]


class ProductCreateRequest(ProductFields):
    """Request body for creating a product"""
    title: str = Field(min_length=1, max_length=500, description="Product title")
    type: ProductType = Field(default=ProductType.PHYSICAL)
    price: float = Field(default=0.0, ge=0, description="List price, never negative")
    publish: PublishStatus = Field(default=PublishStatus.DRAFT)

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Product title is required')
        return v

    def to_product(self) -> Product:
        return Product(
            title=self.title,
            images=self.images or [],
            excerpt=self.excerpt,
            notes=self.notes,
            type=self.type.value,
            category=self.category,
            collection=self.collection,
            unit=self.unit,
            price=self.price,
            saleprice=self.saleprice,
            vendor=self.vendor,
            brand=self.brand,
            options=[ProductOption.from_dict(o.model_dump()) for o in self.options or []],
            modifiers=self.modifiers or [],
            metafields=self.metafields or [],
            saleinfo=self.saleinfo,
            stores=self.stores,
            location=self.location,
            saleschannel=self.saleschannel,
            pos=bool(self.pos),
            website=bool(self.website),
            seo=ProductSeo.from_dict(self.seo.model_dump()) if self.seo else ProductSeo(),
            tags=self.tags,
            cost=self.cost,
            barcode=self.barcode,
            publishat=self.publishat,
            publish=self.publish.value,
            promoinfo=self.promoinfo,
            featured=bool(self.featured),
            relproducts=self.relproducts or [],
            sellproducts=self.sellproducts or [],
        )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Linen Shirt",
                "type": "physical",
                "price": 49.0,
                "saleprice": 39.0,
                "images": ["https://media.example.com/catalog/products/3f1c-shirt.jpg"],
                "options": [{"title": "Size", "value": "M"}],
                "publish": "active"
            }
        }
    )


class ProductUpdateRequest(ProductFields):
    """Partial product update; only supplied fields are written"""
    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    type: Optional[ProductType] = None
    price: Optional[float] = Field(default=None, ge=0)
    publish: Optional[PublishStatus] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Product title cannot be blank')
        return v.strip() if v else v

    def to_updates(self) -> Dict[str, Any]:
        """Column values for the supplied fields, JSON columns left as Python values"""
        return self.model_dump(mode='json', exclude_unset=True)


class ProductListRequest(PaginationRequest):
    """Request parameters for listing products"""
    search: Optional[str] = Field(default=None, max_length=100, description="Title search")
    type: Optional[ProductType] = Field(default=None, description="Filter by product type")
    publish: Optional[PublishStatus] = Field(default=None, description="Filter by publish status")
    category: Optional[str] = Field(default=None, description="Filter by category name")

    @field_validator('search')
    @classmethod
    def normalize_search(cls, v):
        if v is None:
            return v
        v = v.strip()
        return v or None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "page": 1,
                "page_size": 20,
                "search": "shirt",
                "type": "physical",
                "publish": "active"
            }
        }
    )

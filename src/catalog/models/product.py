from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any

from catalog.utils.json_columns import (
    dump_json_column, parse_image_list, parse_json_list, parse_json_object,
)


def _as_float(value: Any, default: Optional[float] = None) -> Optional[float]:
    if value is None or value == '':
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


@dataclass
class ProductOption:
    """An option attached to a product, stored inside the `options` JSON column"""
    id: Optional[Any] = None
    title: str = ""
    value: str = ""
    identifier_type: Optional[str] = None  # e.g. "color", "image", "text"
    identifier_value: Optional[str] = None  # e.g. "#ff0000"
    group: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductOption":
        return cls(
            id=data.get("id"),
            title=data.get("title") or "",
            value=data.get("value") or "",
            identifier_type=data.get("identifierType"),
            identifier_value=data.get("identifierValue"),
            group=data.get("group"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "value": self.value,
            "identifierType": self.identifier_type,
            "identifierValue": self.identifier_value,
            "group": self.group,
        }


@dataclass
class ProductSeo:
    """Search metadata stored in the `seo` JSON column"""
    slug: str = ""
    title: str = ""
    keywords: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProductSeo":
        keywords = data.get("keywords") or ""
        if isinstance(keywords, list):
            keywords = ", ".join(str(k) for k in keywords)
        return cls(slug=data.get("slug") or "", title=data.get("title") or "", keywords=keywords)

    def to_dict(self) -> Dict[str, Any]:
        return {"slug": self.slug, "title": self.title, "keywords": self.keywords}


@dataclass
class Product:
    """A catalog product mirrored from a `products` row"""
    id: Optional[int] = None
    title: str = ""
    images: List[str] = field(default_factory=list)
    excerpt: Optional[str] = None
    notes: Optional[str] = None
    type: str = "physical"  # physical, digital
    category: Optional[str] = None
    collection: Optional[str] = None
    unit: Optional[str] = None
    price: float = 0.0
    saleprice: Optional[float] = None
    vendor: Optional[str] = None
    brand: Optional[str] = None
    options: List[ProductOption] = field(default_factory=list)
    modifiers: List[Any] = field(default_factory=list)
    metafields: List[Any] = field(default_factory=list)
    saleinfo: Optional[str] = None
    stores: Optional[str] = None
    location: Optional[str] = None
    saleschannel: Optional[str] = None
    pos: bool = False
    website: bool = False
    seo: ProductSeo = field(default_factory=ProductSeo)
    tags: Optional[str] = None
    cost: Optional[float] = None
    barcode: Optional[str] = None
    createdat: Optional[str] = None
    updatedat: Optional[str] = None
    publishat: Optional[str] = None
    publish: str = "draft"  # active, draft, archived
    promoinfo: Optional[str] = None
    featured: bool = False
    relproducts: List[Any] = field(default_factory=list)
    sellproducts: List[Any] = field(default_factory=list)

    @property
    def primary_image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    @property
    def on_sale(self) -> bool:
        return self.saleprice is not None and 0 < self.saleprice < self.price

    @property
    def effective_price(self) -> float:
        return self.saleprice if self.on_sale else self.price

    @property
    def tag_list(self) -> List[str]:
        if not self.tags:
            return []
        return [t.strip() for t in self.tags.split(",") if t.strip()]

    def get_option_values(self, title: str) -> List[str]:
        """All option values recorded under one option title"""
        return [o.value for o in self.options if o.title.lower() == title.lower()]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        """Build a Product from a row dict, decoding JSON and boolean columns"""
        options = [
            ProductOption.from_dict(o) for o in parse_json_list(row.get("options"))
            if isinstance(o, dict)
        ]
        return cls(
            id=row.get("id"),
            title=row.get("title") or "",
            images=parse_image_list(row.get("images")),
            excerpt=row.get("excerpt"),
            notes=row.get("notes"),
            type=row.get("type") or "",
            category=row.get("category"),
            collection=row.get("collection"),
            unit=row.get("unit"),
            price=_as_float(row.get("price"), 0.0),
            saleprice=_as_float(row.get("saleprice")),
            vendor=row.get("vendor"),
            brand=row.get("brand"),
            options=options,
            modifiers=parse_json_list(row.get("modifiers")),
            metafields=parse_json_list(row.get("metafields")),
            saleinfo=row.get("saleinfo"),
            stores=row.get("stores"),
            location=row.get("location"),
            saleschannel=row.get("saleschannel"),
            pos=_as_bool(row.get("pos")),
            website=_as_bool(row.get("website")),
            seo=ProductSeo.from_dict(parse_json_object(row.get("seo"))),
            tags=row.get("tags"),
            cost=_as_float(row.get("cost")),
            barcode=row.get("barcode"),
            createdat=row.get("createdat"),
            updatedat=row.get("updatedat"),
            publishat=row.get("publishat"),
            publish=row.get("publish") or "draft",
            promoinfo=row.get("promoinfo"),
            featured=_as_bool(row.get("featured")),
            relproducts=parse_json_list(row.get("relproducts")),
            sellproducts=parse_json_list(row.get("sellproducts")),
        )

    def to_db_row(self) -> Dict[str, Any]:
        """Column values for INSERT/UPDATE, with JSON columns encoded as text"""
        return {
            "title": self.title,
            "images": dump_json_column(self.images),
            "excerpt": self.excerpt,
            "notes": self.notes,
            "type": self.type,
            "category": self.category,
            "collection": self.collection,
            "unit": self.unit,
            "price": self.price,
            "saleprice": self.saleprice,
            "vendor": self.vendor,
            "brand": self.brand,
            "options": dump_json_column([o.to_dict() for o in self.options]),
            "modifiers": dump_json_column(self.modifiers),
            "metafields": dump_json_column(self.metafields),
            "saleinfo": self.saleinfo,
            "stores": self.stores,
            "location": self.location,
            "saleschannel": self.saleschannel,
            "pos": 1 if self.pos else 0,
            "website": 1 if self.website else 0,
            "seo": dump_json_column(self.seo.to_dict(), default="{}"),
            "tags": self.tags,
            "cost": self.cost,
            "barcode": self.barcode,
            "createdat": self.createdat,
            "updatedat": self.updatedat,
            "publishat": self.publishat,
            "publish": self.publish,
            "promoinfo": self.promoinfo,
            "featured": 1 if self.featured else 0,
            "relproducts": dump_json_column(self.relproducts),
            "sellproducts": dump_json_column(self.sellproducts),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization"""
        data = self.to_db_row()
        data.update({
            "id": self.id,
            "images": list(self.images),
            "options": [o.to_dict() for o in self.options],
            "modifiers": self.modifiers,
            "metafields": self.metafields,
            "seo": self.seo.to_dict(),
            "pos": self.pos,
            "website": self.website,
            "featured": self.featured,
            "relproducts": self.relproducts,
            "sellproducts": self.sellproducts,
            "primary_image": self.primary_image,
            "on_sale": self.on_sale,
            "effective_price": self.effective_price,
        })
        return data


@dataclass
class ProductSummary:
    """Lightweight product representation for listing screens"""
    id: int
    title: str
    price: float = 0.0
    type: str = ""
    image: Optional[str] = None
    category: Optional[str] = None
    vendor: Optional[str] = None
    brand: Optional[str] = None
    publish: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ProductSummary":
        images = parse_image_list(row.get("images"))
        return cls(
            id=int(row["id"]),
            title=row.get("title") or "",
            price=_as_float(row.get("price"), 0.0),
            type=row.get("type") or "",
            image=images[0] if images else None,
            category=row.get("category"),
            vendor=row.get("vendor"),
            brand=row.get("brand"),
            publish=row.get("publish"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "price": self.price,
            "type": self.type,
            "image": self.image,
            "category": self.category,
            "vendor": self.vendor,
            "brand": self.brand,
            "publish": self.publish,
        }

from dataclasses import dataclass, field
from typing import ClassVar, Dict, Any, List, Optional, Type

from catalog.utils.json_columns import dump_json_column, parse_image_list


@dataclass
class NamedEntity:
    """
    Shared shape of the lookup tables (categories, vendors, stores, ...)

    The `image` column holds a JSON array of URLs; rows written by older
    clients may hold a single bare URL instead.
    """
    table_name: ClassVar[str] = ""
    label: ClassVar[str] = "Entity"
    has_parent: ClassVar[bool] = False

    id: Optional[int] = None
    name: str = ""
    images: List[str] = field(default_factory=list)
    notes: Optional[str] = None
    parent: Optional[int] = None

    @property
    def image(self) -> Optional[str]:
        return self.images[0] if self.images else None

    def matches(self, terms: List[str]) -> bool:
        """Every term must appear in the name or the notes"""
        haystack = f"{self.name} {self.notes or ''}".lower()
        return all(term in haystack for term in terms)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "NamedEntity":
        parent = row.get("parent") if cls.has_parent else None
        return cls(
            id=row.get("id"),
            name=row.get("name") or "",
            images=parse_image_list(row.get("image")),
            notes=row.get("notes"),
            parent=int(parent) if parent not in (None, "") else None,
        )

    def to_db_row(self) -> Dict[str, Any]:
        row = {
            "name": self.name,
            "image": dump_json_column(self.images),
            "notes": self.notes or "",
        }
        if self.has_parent:
            row["parent"] = self.parent
        return row

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "images": list(self.images),
            "image": self.image,
            "notes": self.notes,
        }
        if self.has_parent:
            data["parent"] = self.parent
        return data


@dataclass
class Category(NamedEntity):
    table_name: ClassVar[str] = "categories"
    label: ClassVar[str] = "Category"
    has_parent: ClassVar[bool] = True


@dataclass
class Collection(NamedEntity):
    table_name: ClassVar[str] = "collections"
    label: ClassVar[str] = "Collection"
    has_parent: ClassVar[bool] = True


@dataclass
class Vendor(NamedEntity):
    table_name: ClassVar[str] = "vendors"
    label: ClassVar[str] = "Vendor"


@dataclass
class Brand(NamedEntity):
    table_name: ClassVar[str] = "brands"
    label: ClassVar[str] = "Brand"


@dataclass
class Tag(NamedEntity):
    table_name: ClassVar[str] = "tags"
    label: ClassVar[str] = "Tag"


@dataclass
class Warehouse(NamedEntity):
    table_name: ClassVar[str] = "warehouses"
    label: ClassVar[str] = "Warehouse"


@dataclass
class Store(NamedEntity):
    table_name: ClassVar[str] = "stores"
    label: ClassVar[str] = "Store"


ENTITY_TYPES: Dict[str, Type[NamedEntity]] = {
    cls.table_name: cls
    for cls in (Category, Collection, Vendor, Brand, Tag, Warehouse, Store)
}

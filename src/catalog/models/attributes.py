from dataclasses import dataclass, fields
from typing import ClassVar, Dict, Any, List, Optional, Type


def _parent_id(value: Any) -> Optional[int]:
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class Attribute:
    """
    Merchant-configurable product attribute row

    Option and metafield rows form a two-level tree: rows without a parent
    are groups (e.g. "Color"), rows pointing at a group are its values.
    """
    table_name: ClassVar[str] = ""
    label: ClassVar[str] = "Attribute"
    order_by: ClassVar[str] = "title"

    id: Optional[int] = None

    @classmethod
    def columns(cls) -> List[str]:
        return [f.name for f in fields(cls) if f.name != "id"]

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Attribute":
        values = {name: row.get(name) for name in cls.columns()}
        if "parentid" in values:
            values["parentid"] = _parent_id(values["parentid"])
        return cls(id=row.get("id"), **values)

    def to_db_row(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.columns()}

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id}
        data.update(self.to_db_row())
        return data


@dataclass
class Option(Attribute):
    table_name: ClassVar[str] = "options"
    label: ClassVar[str] = "Option"
    order_by: ClassVar[str] = "parentid, title"

    parentid: Optional[int] = None
    title: str = ""
    value: Optional[str] = None
    identifier: Optional[str] = None

    @property
    def is_group(self) -> bool:
        return not self.parentid


@dataclass
class Metafield(Attribute):
    table_name: ClassVar[str] = "metafields"
    label: ClassVar[str] = "Metafield"
    order_by: ClassVar[str] = "parentid, title"

    parentid: Optional[int] = None
    title: str = ""
    value: Optional[str] = None
    group: Optional[str] = None
    type: Optional[str] = None
    filter: Optional[int] = None

    @property
    def is_group(self) -> bool:
        return not self.parentid

    @property
    def filterable(self) -> bool:
        return bool(self.filter)


@dataclass
class Modifier(Attribute):
    table_name: ClassVar[str] = "modifiers"
    label: ClassVar[str] = "Modifier"
    order_by: ClassVar[str] = "title"

    title: str = ""
    notes: Optional[str] = None
    type: Optional[str] = None
    value: Optional[str] = None
    identifier: Optional[str] = None


@dataclass
class Media(Attribute):
    table_name: ClassVar[str] = "media"
    label: ClassVar[str] = "Media"
    order_by: ClassVar[str] = 'parentid, "order"'

    parentid: Optional[int] = None
    type: Optional[str] = None  # image, video
    url: str = ""
    order: int = 0


ATTRIBUTE_TYPES: Dict[str, Type[Attribute]] = {
    cls.table_name: cls for cls in (Option, Metafield, Modifier, Media)
}

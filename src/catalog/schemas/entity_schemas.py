from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any


class NamedEntityRequest(BaseModel):
    """Create/update body for categories, vendors, stores and the other lookup tables"""
    name: Optional[str] = Field(default=None, max_length=200)
    images: Optional[List[str]] = None
    notes: Optional[str] = None
    parent: Optional[int] = Field(default=None, ge=1, description="Parent category or collection")

    @field_validator('name')
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v


class AttributeRequest(BaseModel):
    """
    Create/update body for options, metafields, modifiers and media

    Fields a given kind does not have are ignored when the row is written.
    """
    parentid: Optional[int] = Field(default=None, ge=1)
    title: Optional[str] = Field(default=None, max_length=200)
    value: Optional[str] = None
    identifier: Optional[str] = None
    notes: Optional[str] = None
    group: Optional[str] = None
    type: Optional[str] = None
    filter: Optional[bool] = None
    url: Optional[str] = None
    order: Optional[int] = Field(default=None, ge=0)

    @field_validator('title')
    @classmethod
    def strip_title(cls, v):
        return v.strip() if isinstance(v, str) else v

    def values(self) -> Dict[str, Any]:
        data: Dict[str, Any] = self.model_dump(exclude_unset=True)
        if 'filter' in data and data['filter'] is not None:
            data['filter'] = 1 if data['filter'] else 0
        return data

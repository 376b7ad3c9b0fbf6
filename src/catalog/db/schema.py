"""
Table definitions for a tenant catalog database.

The tables are described once with SQLAlchemy Core; the CREATE TABLE
statements sent to the gateway and the column descriptions registered in
``tableconfig`` are both generated from these definitions.
"""
from typing import Any, Dict, List

from sqlalchemy import (
    Column, ForeignKey, Integer, MetaData, REAL, Table, Text,
)
from sqlalchemy.dialects import sqlite
from sqlalchemy.schema import CreateTable

metadata = MetaData()

_SQLITE = sqlite.dialect()


def _id_column() -> Column:
    return Column("id", Integer, primary_key=True)


products = Table(
    "products", metadata,
    _id_column(),
    Column("title", Text),
    Column("images", Text, comment="JSON array of URLs"),
    Column("excerpt", Text),
    Column("notes", Text),
    Column("type", Text, comment="physical, digital"),
    Column("category", Text),
    Column("collection", Text),
    Column("unit", Text),
    Column("price", REAL),
    Column("saleprice", REAL),
    Column("vendor", Text),
    Column("brand", Text),
    Column("options", Text, comment="JSON array of option objects with id, title, value, identifierType, identifierValue, group"),
    Column("modifiers", Text),
    Column("metafields", Text),
    Column("saleinfo", Text),
    Column("stores", Text),
    Column("location", Text),
    Column("saleschannel", Text),
    Column("pos", Integer, comment="BOOLEAN stored as INTEGER (0 or 1)"),
    Column("website", Integer, comment="BOOLEAN stored as INTEGER (0 or 1)"),
    Column("seo", Text, comment="JSON with slug, title, keywords"),
    Column("tags", Text),
    Column("cost", REAL),
    Column("barcode", Text),
    Column("createdat", Text),
    Column("updatedat", Text),
    Column("publishat", Text),
    Column("publish", Text, comment="active, draft, archived"),
    Column("promoinfo", Text),
    Column("featured", Integer, comment="BOOLEAN stored as INTEGER (0 or 1)"),
    Column("relproducts", Text, comment="JSON array of product IDs"),
    Column("sellproducts", Text, comment="JSON array of product IDs"),
    sqlite_autoincrement=True,
)

inventory = Table(
    "inventory", metadata,
    _id_column(),
    Column("productId", Integer, ForeignKey("products.id")),
    Column("sku", Text),
    Column("image", Text),
    Column("option1", Text),
    Column("option2", Text),
    Column("option3", Text),
    Column("reorderlevel", Integer),
    Column("reorderqty", Integer),
    Column("warehouse", Text),
    Column("expiry", Text),
    Column("batchno", Text),
    Column("quantity", Integer),
    Column("cost", REAL),
    Column("price", REAL),
    Column("margin", REAL),
    Column("saleprice", REAL),
    sqlite_autoincrement=True,
)


def _named_table(name: str, with_parent: bool = False) -> Table:
    columns = [
        _id_column(),
        Column("name", Text, unique=True),
        Column("image", Text),
        Column("notes", Text),
    ]
    if with_parent:
        columns.append(Column("parent", Integer))
    return Table(name, metadata, *columns, sqlite_autoincrement=True)


categories = _named_table("categories", with_parent=True)
collections = _named_table("collections", with_parent=True)
vendors = _named_table("vendors")
brands = _named_table("brands")
warehouses = _named_table("warehouses")
stores = _named_table("stores")
tags = _named_table("tags")

metafields = Table(
    "metafields", metadata,
    _id_column(),
    Column("parentid", Integer),
    Column("title", Text),
    Column("value", Text),
    Column("group", Text),
    Column("type", Text),
    Column("filter", Integer, comment="BOOLEAN stored as INTEGER (0 or 1)"),
    sqlite_autoincrement=True,
)

options = Table(
    "options", metadata,
    _id_column(),
    Column("parentid", Integer),
    Column("title", Text),
    Column("value", Text),
    Column("identifier", Text),
    sqlite_autoincrement=True,
)

modifiers = Table(
    "modifiers", metadata,
    _id_column(),
    Column("title", Text),
    Column("notes", Text),
    Column("type", Text),
    Column("value", Text),
    Column("identifier", Text),
    sqlite_autoincrement=True,
)

media = Table(
    "media", metadata,
    _id_column(),
    Column("parentid", Integer),
    Column("type", Text),
    Column("url", Text),
    Column("order", Integer),
    sqlite_autoincrement=True,
)

# Per-tenant bookkeeping tables created during onboarding
memories = Table(
    "memories", metadata,
    _id_column(),
    Column("content", Text, nullable=False),
    Column("group", Text, nullable=False),
)

tableconfig = Table(
    "tableconfig", metadata,
    _id_column(),
    Column("name", Text, nullable=False, unique=True),
    Column("config", Text, nullable=False),
)

CATALOG_TABLES: List[Table] = [
    products, inventory, categories, collections, vendors, brands,
    warehouses, stores, tags, metafields, options, modifiers, media,
]

SYSTEM_TABLES: List[Table] = [memories, tableconfig]


def create_table_sql(table: Table) -> str:
    """CREATE TABLE IF NOT EXISTS statement in the SQLite dialect."""
    return str(CreateTable(table, if_not_exists=True).compile(dialect=_SQLITE)).strip()


def table_config(table: Table) -> Dict[str, Any]:
    """Column description stored in ``tableconfig.config`` for a table."""
    columns = []
    foreign_keys = []
    for column in table.columns:
        entry: Dict[str, Any] = {
            "name": column.name,
            "type": column.type.compile(dialect=_SQLITE),
        }
        if column.primary_key:
            entry["constraints"] = "PRIMARY KEY AUTOINCREMENT" if table.kwargs.get("sqlite_autoincrement") else "PRIMARY KEY"
        elif column.unique:
            entry["constraints"] = "UNIQUE"
        elif not column.nullable:
            entry["constraints"] = "NOT NULL"
        if column.comment:
            entry["description"] = column.comment
        columns.append(entry)

        for fk in column.foreign_keys:
            foreign_keys.append({
                "column": column.name,
                "references": f"{fk.column.table.name}({fk.column.name})",
            })

    config: Dict[str, Any] = {"columns": columns}
    if foreign_keys:
        config["foreignKeys"] = foreign_keys
    return config

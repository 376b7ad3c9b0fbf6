"""
SQL escaping and statement-building helpers.

Statements sent to the gateway are parameterized wherever a value is involved;
identifiers (tables, columns) cannot be bound, so they are validated against a
strict pattern before being interpolated.
"""
import json
import math
import re
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import text
from sqlalchemy.dialects import sqlite

from catalog.core.exceptions import ValidationError

_IDENTIFIER_RE = re.compile(r'^[a-zA-Z_][a-zA-Z0-9_]*$')
_CONTROL_CHARS_RE = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')

# qmark paramstyle: `:name` placeholders compile to `?`
_SQLITE_DIALECT = sqlite.dialect()

# Product columns and how values bound for them are coerced
PRODUCT_FIELD_KINDS: Dict[str, str] = {
    'title': 'string',
    'images': 'json',
    'excerpt': 'string',
    'notes': 'string',
    'type': 'string',
    'category': 'string',
    'collection': 'string',
    'unit': 'string',
    'price': 'number',
    'saleprice': 'number',
    'vendor': 'string',
    'brand': 'string',
    'options': 'json',
    'modifiers': 'json',
    'metafields': 'json',
    'saleinfo': 'string',
    'stores': 'string',
    'location': 'string',
    'saleschannel': 'string',
    'pos': 'boolean',
    'website': 'boolean',
    'seo': 'json',
    'tags': 'string',
    'cost': 'number',
    'barcode': 'string',
    'createdat': 'string',
    'updatedat': 'string',
    'publishat': 'string',
    'publish': 'string',
    'promoinfo': 'string',
    'featured': 'boolean',
    'relproducts': 'json',
    'sellproducts': 'json',
}


def escape_sql_string(value: Any) -> str:
    """Escape a string literal by doubling single quotes."""
    if not isinstance(value, str):
        return str(value)
    return value.replace("'", "''")


def escape_sql_identifier(identifier: str) -> str:
    """Quote an identifier with double quotes, dropping any embedded quotes."""
    if not isinstance(identifier, str):
        raise ValidationError("SQL identifier must be a string")
    cleaned = identifier.replace('"', '')
    return f'"{cleaned}"'


def escape_sql(identifier: str) -> str:
    """Validate an identifier: letters, digits and underscores only."""
    if not isinstance(identifier, str):
        raise ValidationError("SQL identifier must be a string")
    if not _IDENTIFIER_RE.match(identifier):
        raise ValidationError(f"Invalid SQL identifier: {identifier}")
    return identifier


def escape_like_pattern(pattern: Any) -> str:
    """Escape LIKE wildcards. Use together with ``ESCAPE '\\'``."""
    if not isinstance(pattern, str):
        return str(pattern)
    return (
        pattern
        .replace('\\', '\\\\')  # backslashes first
        .replace('%', '\\%')
        .replace('_', '\\_')
    )


def build_safe_query(template: str, params: Optional[Dict[str, Any]] = None) -> Tuple[str, List[Any]]:
    """
    Convert a ``:name`` style statement into positional form.

    A name used twice in the template is bound twice. Extra entries in
    ``params`` are ignored.

    Raises:
        ValidationError: When the template references a missing parameter
    """
    params = params or {}
    compiled = text(template).compile(dialect=_SQLITE_DIALECT)
    args = []
    for name in compiled.positiontup or []:
        if name not in params:
            raise ValidationError(f"Missing parameter: {name}")
        args.append(params[name])
    return compiled.string, args


def sanitize_input(value: Any) -> Any:
    """Normalize a value for binding to a SQLite column."""
    if value is None:
        return None

    if isinstance(value, bool):
        return 1 if value else 0

    if isinstance(value, str):
        return _CONTROL_CHARS_RE.sub('', value)

    if isinstance(value, (int, float)):
        if isinstance(value, float) and math.isnan(value):
            return None
        return value

    if isinstance(value, (list, tuple)):
        return json.dumps([sanitize_input(item) for item in value])

    if isinstance(value, dict):
        return json.dumps({escape_sql(key): sanitize_input(item) for key, item in value.items()})

    return str(value)


def _coerce_number(value: Any) -> float:
    if isinstance(value, bool):
        return 1 if value else 0
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and math.isnan(value) else value
    try:
        number = float(str(value))
    except (TypeError, ValueError):
        return 0
    return 0 if math.isnan(number) else number


def _coerce_json(value: Any) -> str:
    if isinstance(value, str):
        try:
            return json.dumps(json.loads(value))
        except ValueError:
            return value
    return json.dumps(value)


def sanitize_product_data(product: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known product columns only, coercing each to its column kind."""
    sanitized: Dict[str, Any] = {}

    for key, value in product.items():
        kind = PRODUCT_FIELD_KINDS.get(key)
        if kind is None:
            continue

        if kind == 'number':
            sanitized[key] = _coerce_number(value)
        elif kind == 'boolean':
            sanitized[key] = 1 if value else 0
        elif kind == 'json':
            sanitized[key] = _coerce_json(value)
        else:
            sanitized[key] = sanitize_input(value)

    return sanitized


def create_insert_query(table_name: str, data: Dict[str, Any]) -> Tuple[str, List[Any]]:
    """Build a parameterized INSERT for product-shaped data."""
    sanitized = sanitize_product_data(data)
    if not sanitized:
        raise ValidationError("No insertable fields supplied")

    fields = list(sanitized.keys())
    placeholders = ', '.join('?' for _ in fields)
    sql = (
        f"INSERT INTO {escape_sql(table_name)} "
        f"({', '.join(escape_sql(f) for f in fields)}) VALUES ({placeholders})"
    )
    return sql, list(sanitized.values())


def create_update_query(
    table_name: str,
    data: Dict[str, Any],
    where_clause: str,
    where_args: Optional[List[Any]] = None
) -> Tuple[str, List[Any]]:
    """Build a parameterized UPDATE for product-shaped data."""
    sanitized = sanitize_product_data(data)
    if not sanitized:
        raise ValidationError("No updatable fields supplied")

    set_clause = ', '.join(f"{escape_sql(field)} = ?" for field in sanitized)
    sql = f"UPDATE {escape_sql(table_name)} SET {set_clause} WHERE {where_clause}"
    return sql, list(sanitized.values()) + list(where_args or [])

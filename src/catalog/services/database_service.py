import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence

import requests

from catalog.core.config import TursoConfig, config
from catalog.core.exceptions import (
    CredentialsError, DatabaseError, ExternalServiceError, QueryExecutionError, ValidationError,
)
from catalog.db.turso import (
    ResultSet, StatementLike, build_pipeline, parse_pipeline_response, to_statement,
)
from catalog.models.credentials import DatabaseCredentials
from catalog.utils.sql_escape import (
    create_insert_query, create_update_query, escape_sql,
)

logger = logging.getLogger(__name__)

PRODUCT_LIST_COLUMNS = "id, title, images, price, type, category, vendor, brand, publish"

PRODUCT_DETAIL_COLUMNS = """
    id, title, images, excerpt, notes, type, category, collection, unit,
    price, saleprice, vendor, brand, options, modifiers, metafields,
    saleinfo, stores, location, saleschannel, pos, website, seo, tags, cost,
    barcode, createdat, updatedat, publishat, publish, promoinfo, featured,
    relproducts, sellproducts
"""

# 4xx statuses worth another attempt
_RETRYABLE_CLIENT_STATUSES = {408, 425, 429}


class DatabaseService:
    """
    Client for a tenant's database behind the Turso HTTP pipeline endpoint

    Every call is a stateless POST. Transport failures and retryable HTTP
    statuses are retried with exponential backoff; statements rejected by
    the database are raised immediately.
    """

    def __init__(
        self,
        credentials: DatabaseCredentials,
        session: Optional[requests.Session] = None,
        settings: Optional[TursoConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if not credentials or not credentials.is_complete:
            raise CredentialsError("Missing database credentials")

        self.credentials = credentials
        self.settings = settings or config.turso
        self.base_url = self.settings.pipeline_url(credentials.turso_db_name)
        self.session = session or requests.Session()
        self._sleep = sleep

    def __enter__(self) -> "DatabaseService":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.credentials.turso_api_token}",
            "Content-Type": "application/json",
        }

    def _post_pipeline(self, statements: Sequence[StatementLike], operation: str,
                       retries: Optional[int] = None) -> List[ResultSet]:
        stmts = [to_statement(s) for s in statements]
        body = build_pipeline(stmts)
        attempts = retries if retries is not None else self.settings.max_retries
        if attempts < 1:
            raise ValidationError(f"Retry count must be at least 1, got {attempts}")
        last_error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                response = self.session.post(
                    self.base_url,
                    json=body,
                    headers=self._headers(),
                    timeout=self.settings.request_timeout,
                )

                if response.status_code in (401, 403):
                    raise CredentialsError(
                        f"Database rejected the access token ({response.status_code})"
                    )

                if response.status_code // 100 != 2:
                    error = ExternalServiceError(
                        "turso",
                        f"Database {operation} failed: {response.status_code} - {response.text[:500]}",
                        status=response.status_code,
                    )
                    if 400 <= response.status_code < 500 and response.status_code not in _RETRYABLE_CLIENT_STATUSES:
                        raise error
                    last_error = error
                else:
                    return parse_pipeline_response(response.json(), stmts)

            except requests.RequestException as e:
                last_error = e

            logger.error(f"Database {operation} attempt {attempt} of {attempts} failed: {last_error}")

            if attempt < attempts:
                self._sleep(self.settings.backoff_base ** attempt)

        if isinstance(last_error, ExternalServiceError):
            raise last_error
        raise ExternalServiceError(
            "turso", f"All database {operation} attempts failed: {last_error}"
        ) from last_error

    def execute_query(self, sql: str, args: Optional[Sequence[Any]] = None,
                      retries: Optional[int] = None) -> ResultSet:
        """
        Execute a single SQL statement with retry logic

        Returns:
            ResultSet for the statement

        Raises:
            QueryExecutionError: When the statement is rejected
            ExternalServiceError: When every attempt failed to reach the gateway
        """
        results = self._post_pipeline([(sql, list(args or []))], "query", retries)
        if not results:
            raise DatabaseError("Pipeline returned no result for query", "EXECUTE")
        return results[0]

    def execute_transaction(self, statements: Sequence[StatementLike],
                            retries: Optional[int] = None) -> List[ResultSet]:
        """
        Execute several statements in one pipeline request

        Statements run in order; the first rejected statement raises
        QueryExecutionError. Returns one ResultSet per statement.
        """
        if not statements:
            return []
        return self._post_pipeline(statements, "transaction", retries)

    # Catalog convenience queries

    def _product_conditions(self, search_query: str, filters: Optional[Dict[str, Any]]):
        conditions: List[str] = []
        args: List[Any] = []

        if search_query and search_query.strip():
            conditions.append("title LIKE ?")
            args.append(f"%{search_query.strip()}%")

        for key, value in (filters or {}).items():
            if value is not None and value != "":
                conditions.append(f"{escape_sql(key)} = ?")
                args.append(value)

        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""
        return where, args

    def fetch_products(self, limit: int = 100, offset: int = 0, search_query: str = "",
                       filters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Fetch products with pagination and filtering"""
        where, args = self._product_conditions(search_query, filters)
        sql = f"SELECT {PRODUCT_LIST_COLUMNS} FROM products{where} ORDER BY id DESC LIMIT ? OFFSET ?"
        return self.execute_query(sql, args + [limit, offset])

    def count_products(self, search_query: str = "", filters: Optional[Dict[str, Any]] = None) -> ResultSet:
        """Count products matching the same conditions as fetch_products"""
        where, args = self._product_conditions(search_query, filters)
        return self.execute_query(f"SELECT COUNT(*) AS total FROM products{where}", args)

    def fetch_product_by_id(self, product_id: int) -> ResultSet:
        return self.execute_query(
            f"SELECT {PRODUCT_DETAIL_COLUMNS} FROM products WHERE id = ?", [product_id]
        )

    def insert_product(self, product: Dict[str, Any]) -> ResultSet:
        sql, args = create_insert_query("products", product)
        return self.execute_query(sql, args)

    def update_product(self, product_id: int, updates: Dict[str, Any]) -> ResultSet:
        sql, args = create_update_query("products", updates, "id = ?", [product_id])
        return self.execute_query(sql, args)

    def delete_product(self, product_id: int) -> ResultSet:
        return self.execute_query("DELETE FROM products WHERE id = ?", [product_id])

    def fetch_options(self, limit: int = 100) -> ResultSet:
        return self.execute_query(
            "SELECT id, parentid, title, value, identifier FROM options ORDER BY title LIMIT ?",
            [limit],
        )

    def fetch_metafields(self, limit: int = 100) -> ResultSet:
        return self.execute_query(
            'SELECT id, parentid, title, value, "group", type, filter FROM metafields ORDER BY title LIMIT ?',
            [limit],
        )

    def fetch_modifiers(self, limit: int = 100) -> ResultSet:
        return self.execute_query(
            "SELECT id, title, notes, type, value, identifier FROM modifiers ORDER BY title LIMIT ?",
            [limit],
        )

    def fetch_categories(self, limit: int = 100) -> ResultSet:
        return self.execute_query(
            "SELECT id, name, image, notes, parent FROM categories ORDER BY name LIMIT ?",
            [limit],
        )

    def fetch_generic_entities(self, table_name: str, fields: Optional[Sequence[str]] = None,
                               limit: int = 100) -> ResultSet:
        """Generic fetch for collections, vendors, brands, tags and the like"""
        columns = ", ".join(escape_sql(f) for f in (fields or ["id", "name", "image", "notes"]))
        return self.execute_query(
            f"SELECT {columns} FROM {escape_sql(table_name)} ORDER BY name LIMIT ?",
            [limit],
        )


__all__ = ["DatabaseService", "QueryExecutionError"]

import json
import logging
from typing import Any, Dict, List

from sqlalchemy import Table

from catalog.core.exceptions import BaseCatalogException
from catalog.db.schema import (
    CATALOG_TABLES, SYSTEM_TABLES, create_table_sql, table_config,
)
from catalog.services.database_service import DatabaseService

logger = logging.getLogger(__name__)


class TableService:
    """
    Creates catalog tables in a tenant database

    Each table's column description is registered in `tableconfig` before the
    table itself is created, so `tableconfig` must exist first; onboarding
    creates it through `ensure_system_tables`.
    """

    def __init__(self, db: DatabaseService):
        self.db = db

    def table_exists(self, table_name: str) -> bool:
        result = self.db.execute_query(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?", [table_name]
        )
        return len(result) > 0

    def create_turso_table(self, table_name: str, create_sql: str, config: Dict[str, Any]) -> bool:
        """
        Register the table description, run the DDL and verify the table exists

        Returns:
            True when the table exists afterwards; failures are logged
        """
        try:
            self.db.execute_query(
                "INSERT OR REPLACE INTO tableconfig (name, config) VALUES (?, ?)",
                [table_name, json.dumps(config)],
            )
        except BaseCatalogException as e:
            logger.error(f"Failed to register schema for {table_name} in tableconfig: {e.internal_message}")
            return False

        try:
            self.db.execute_query(create_sql)
        except BaseCatalogException as e:
            logger.error(f"Failed to create table {table_name}: {e.internal_message}")
            return False

        try:
            exists = self.table_exists(table_name)
        except BaseCatalogException as e:
            logger.error(f"Failed to verify table {table_name}: {e.internal_message}")
            return False

        if not exists:
            logger.error(f"Table {table_name} was not found after creation")
            return False

        logger.info(f"Table {table_name} created and registered")
        return True

    def create_table(self, table: Table) -> bool:
        return self.create_turso_table(table.name, create_table_sql(table), table_config(table))

    def create_product_tables(self) -> bool:
        """Create every catalog table; True only when all of them succeed"""
        results = {table.name: self.create_table(table) for table in CATALOG_TABLES}
        failed = [name for name, ok in results.items() if not ok]
        if failed:
            logger.error(f"Failed to create catalog tables: {', '.join(failed)}")
            return False
        logger.info(f"Created {len(results)} catalog tables")
        return True

    def ensure_system_tables(self) -> bool:
        """Create the onboarding tables (memories, tableconfig) and verify them"""
        statements: List[str] = [create_table_sql(table) for table in SYSTEM_TABLES]
        try:
            self.db.execute_transaction(statements)
            missing = [table.name for table in SYSTEM_TABLES if not self.table_exists(table.name)]
        except BaseCatalogException as e:
            logger.error(f"Failed to create system tables: {e.internal_message}")
            return False

        if missing:
            logger.error(f"System tables missing after creation: {', '.join(missing)}")
            return False
        return True

from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional, List, Any, Dict
from contextlib import contextmanager
from catalog.core.exceptions import ConflictError, QueryExecutionError
from catalog.db.turso import Statement
from catalog.services.database_service import DatabaseService
from catalog.utils.sql_escape import build_safe_query
import logging

T = TypeVar('T')

logger = logging.getLogger(__name__)


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository providing common database operations.

    Statements are written with ``:name`` placeholders and compiled to the
    positional form the pipeline endpoint expects before being sent.
    """

    def __init__(self, db: DatabaseService):
        self.db = db

    @contextmanager
    def statement_errors(self, sql: str, operation: str):
        """Log rejected statements and surface constraint violations as conflicts"""
        try:
            yield
        except QueryExecutionError as e:
            logger.error(f"{operation} failed: {sql}, Error: {e.internal_message}")
            if "UNIQUE constraint failed" in e.internal_message:
                field = e.internal_message.rsplit(".", 1)[-1].strip()
                raise ConflictError(f"A record with this {field} already exists", field)
            raise

    def execute_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """
        Execute SELECT query and return results as list of dictionaries

        Args:
            query: SQL query string with :name placeholders
            params: Query parameters

        Returns:
            List of row dictionaries

        Raises:
            QueryExecutionError: When the statement is rejected
        """
        sql, args = build_safe_query(query, params)
        with self.statement_errors(sql, "Query"):
            return self.db.execute_query(sql, args).as_dicts()

    def execute_single_query(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Execute query expecting single result

        Returns:
            Single row dictionary or None if not found
        """
        rows = self.execute_query(query, params)
        return rows[0] if rows else None

    def execute_command(
        self,
        command: str,
        params: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        Execute INSERT/UPDATE/DELETE command

        Returns:
            Number of affected rows
        """
        sql, args = build_safe_query(command, params)
        with self.statement_errors(sql, "Command"):
            return self.db.execute_query(sql, args).affected_row_count

    def execute_scalar(
        self,
        query: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        Execute query returning single scalar value (COUNT, SUM, etc.)
        """
        sql, args = build_safe_query(query, params)
        with self.statement_errors(sql, "Scalar query"):
            return self.db.execute_query(sql, args).scalar()

    def execute_insert_returning_id(
        self,
        command: str,
        params: Optional[Dict[str, Any]] = None
    ) -> Optional[int]:
        """
        Execute INSERT command and return the generated ID
        """
        sql, args = build_safe_query(command, params)
        with self.statement_errors(sql, "Insert"):
            return self.db.execute_query(sql, args).last_insert_rowid

    def execute_batch_command(
        self,
        command: str,
        params_list: List[Dict[str, Any]]
    ) -> int:
        """
        Execute one command for every parameter set in a single pipeline

        Returns:
            Total number of affected rows
        """
        if not params_list:
            return 0

        statements = [Statement(*build_safe_query(command, params)) for params in params_list]
        with self.statement_errors(statements[0].sql, "Batch"):
            results = self.db.execute_transaction(statements)
        return sum(result.affected_row_count for result in results)

    # Abstract methods that concrete repositories must implement
    @abstractmethod
    def get_by_id(self, entity_id: int) -> T:
        """Get entity by ID"""
        pass

    def exists(self, entity_id: int) -> bool:
        """Check if entity exists by ID"""
        query = f"SELECT 1 FROM {self.table_name} WHERE id = :id"
        result = self.execute_scalar(query, {"id": entity_id})
        return result is not None

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Table name for the entity"""
        pass

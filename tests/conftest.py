"""Shared fixtures for the catalog test suite."""

from typing import Any, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from catalog.core.config import StorageConfig, TursoConfig
from catalog.db.turso import ResultSet
from catalog.models.credentials import DatabaseCredentials
from catalog.services.credential_cache import CredentialCache, KeyValueStore
from catalog.services.database_service import DatabaseService


def rows_result(rows: List[Dict[str, Any]], affected: int = 0, last_id: Optional[int] = None) -> ResultSet:
    """ResultSet holding the given row dicts, columns taken from the first row."""
    columns = list(rows[0].keys()) if rows else []
    return ResultSet(
        columns=columns,
        rows=[[row.get(c) for c in columns] for row in rows],
        affected_row_count=affected,
        last_insert_rowid=last_id,
    )


def ok_entry(columns: List[str], rows: List[List[Dict[str, Any]]], affected: int = 0,
             last_id: Optional[str] = None) -> Dict[str, Any]:
    """One successful pipeline result in wire format."""
    return {
        "type": "ok",
        "response": {
            "type": "execute",
            "result": {
                "cols": [{"name": c, "decltype": None} for c in columns],
                "rows": rows,
                "affected_row_count": affected,
                "last_insert_rowid": last_id,
            },
        },
    }


@pytest.fixture
def credentials() -> DatabaseCredentials:
    return DatabaseCredentials(turso_db_name="shopowner", turso_api_token="token-123", user_id="user-1")


@pytest.fixture
def turso_settings() -> TursoConfig:
    return TursoConfig(platform_token="platform-token", max_retries=3, backoff_base=2.0, request_timeout=5)


@pytest.fixture
def storage_settings() -> StorageConfig:
    return StorageConfig(
        endpoint="https://account.r2.cloudflarestorage.com",
        access_key="test-access",
        secret_key="test-secret",
        bucket_name="catalog-media",
    )


@pytest.fixture
def fake_db() -> MagicMock:
    """DatabaseService double; tests queue ResultSets on execute_query."""
    db = MagicMock(spec=DatabaseService)
    db.execute_query.return_value = ResultSet()
    db.execute_transaction.return_value = []
    return db


@pytest.fixture
def credential_cache(tmp_path) -> CredentialCache:
    return CredentialCache(KeyValueStore(str(tmp_path / "cache")), "turso_credentials")

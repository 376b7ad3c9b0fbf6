"""Unit tests for the pipeline database client and its retry loop."""

from unittest.mock import MagicMock

import pytest
import requests

from catalog.core.exceptions import (
    CredentialsError,
    ExternalServiceError,
    QueryExecutionError,
    ValidationError,
)
from catalog.models.credentials import DatabaseCredentials
from catalog.services.database_service import DatabaseService
from conftest import ok_entry


def _response(status: int = 200, payload=None, text: str = ""):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    response.text = text
    return response


def _ok_payload(*entries):
    return {"baton": None, "base_url": None, "results": list(entries)}


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def service(credentials, turso_settings, session, sleeps):
    return DatabaseService(credentials, session=session, settings=turso_settings, sleep=sleeps.append)


class TestConstruction:
    def test_pipeline_url_built_from_database_name(self, service):
        assert service.base_url == "https://shopowner-tarframework.aws-eu-west-1.turso.io/v2/pipeline"

    def test_incomplete_credentials_rejected(self, turso_settings):
        with pytest.raises(CredentialsError):
            DatabaseService(DatabaseCredentials("", "token"), settings=turso_settings)

    def test_token_not_in_repr(self, credentials):
        assert "token-123" not in repr(credentials)


class TestExecuteQuery:
    def test_posts_typed_args_with_bearer_token(self, service, session):
        session.post.return_value = _response(payload=_ok_payload(
            ok_entry(["id"], [[{"type": "integer", "value": "3"}]])
        ))

        result = service.execute_query("SELECT id FROM products WHERE title = ?", ["Shirt"])

        assert result.as_dicts() == [{"id": 3}]
        _, kwargs = session.post.call_args
        assert kwargs["headers"]["Authorization"] == "Bearer token-123"
        assert kwargs["timeout"] == 5
        assert kwargs["json"] == {"requests": [{"type": "execute", "stmt": {
            "sql": "SELECT id FROM products WHERE title = ?",
            "args": [{"type": "text", "value": "Shirt"}],
        }}]}

    def test_transport_errors_retried_with_exponential_backoff(self, service, session, sleeps):
        session.post.side_effect = [
            requests.ConnectionError("reset"),
            requests.Timeout("slow"),
            _response(payload=_ok_payload(ok_entry(["n"], [[{"type": "integer", "value": "1"}]]))),
        ]

        result = service.execute_query("SELECT 1 AS n")

        assert result.scalar() == 1
        assert session.post.call_count == 3
        assert sleeps == [2.0, 4.0]

    def test_server_errors_exhaust_retries(self, service, session, sleeps):
        session.post.return_value = _response(status=503, text="unavailable")

        with pytest.raises(ExternalServiceError) as exc_info:
            service.execute_query("SELECT 1")

        assert session.post.call_count == 3
        assert sleeps == [2.0, 4.0]
        assert exc_info.value.details["status"] == 503

    def test_transport_failure_on_every_attempt(self, service, session):
        session.post.side_effect = requests.ConnectionError("down")

        with pytest.raises(ExternalServiceError, match="All database query attempts failed"):
            service.execute_query("SELECT 1")

    def test_statement_errors_are_not_retried(self, service, session, sleeps):
        session.post.return_value = _response(payload=_ok_payload(
            {"type": "error", "error": {"message": "no such table: nope"}}
        ))

        with pytest.raises(QueryExecutionError):
            service.execute_query("SELECT * FROM nope")

        assert session.post.call_count == 1
        assert sleeps == []

    def test_client_errors_are_not_retried(self, service, session):
        session.post.return_value = _response(status=400, text="bad request")

        with pytest.raises(ExternalServiceError):
            service.execute_query("SELECT 1")

        assert session.post.call_count == 1

    def test_rate_limit_is_retried(self, service, session):
        session.post.side_effect = [
            _response(status=429, text="slow down"),
            _response(payload=_ok_payload(ok_entry([], []))),
        ]
        service.execute_query("SELECT 1")
        assert session.post.call_count == 2

    def test_rejected_token(self, service, session):
        session.post.return_value = _response(status=401, text="unauthorized")

        with pytest.raises(CredentialsError):
            service.execute_query("SELECT 1")

        assert session.post.call_count == 1

    def test_retry_count_override(self, service, session, sleeps):
        session.post.side_effect = requests.ConnectionError("down")
        with pytest.raises(ExternalServiceError):
            service.execute_query("SELECT 1", retries=1)
        assert session.post.call_count == 1
        assert sleeps == []

    @pytest.mark.parametrize("retries", [0, -2])
    def test_retry_count_below_one_rejected(self, service, session, retries):
        with pytest.raises(ValidationError):
            service.execute_query("SELECT 1", retries=retries)
        session.post.assert_not_called()


class TestExecuteTransaction:
    def test_one_pipeline_one_result_per_statement(self, service, session):
        session.post.return_value = _response(payload=_ok_payload(
            ok_entry([], [], affected=1, last_id="4"),
            ok_entry([], [], affected=2),
        ))

        results = service.execute_transaction([
            ("INSERT INTO tags (name) VALUES (?)", ["sale"]),
            "UPDATE products SET featured = 1",
        ])

        assert [r.affected_row_count for r in results] == [1, 2]
        assert results[0].last_insert_rowid == 4
        assert session.post.call_count == 1
        assert len(session.post.call_args.kwargs["json"]["requests"]) == 2

    def test_empty_transaction_sends_nothing(self, service, session):
        assert service.execute_transaction([]) == []
        session.post.assert_not_called()


class TestConvenienceQueries:
    @pytest.fixture
    def sent(self, service, session):
        session.post.return_value = _response(payload=_ok_payload(ok_entry([], [])))

        def _sent():
            stmt = session.post.call_args.kwargs["json"]["requests"][0]["stmt"]
            return stmt["sql"], [arg.get("value") for arg in stmt.get("args", [])]
        return _sent

    def test_fetch_products_with_search_and_filters(self, service, sent):
        service.fetch_products(limit=10, offset=20, search_query=" shirt ",
                               filters={"type": "physical", "brand": "", "vendor": None})
        sql, args = sent()
        assert "WHERE title LIKE ? AND type = ?" in sql
        assert sql.endswith("ORDER BY id DESC LIMIT ? OFFSET ?")
        assert args == ["%shirt%", "physical", "10", "20"]

    def test_filter_keys_are_validated(self, service):
        with pytest.raises(ValidationError):
            service.fetch_products(filters={"type; DROP TABLE products": "x"})

    def test_count_products(self, service, sent):
        service.count_products(search_query="mug")
        sql, args = sent()
        assert sql == "SELECT COUNT(*) AS total FROM products WHERE title LIKE ?"
        assert args == ["%mug%"]

    def test_insert_product_uses_sanitized_columns(self, service, sent):
        service.insert_product({"title": "Mug", "price": "9.5", "bogus": 1})
        sql, args = sent()
        assert sql == "INSERT INTO products (title, price) VALUES (?, ?)"
        assert args == ["Mug", 9.5]

    def test_update_and_delete_product(self, service, sent):
        service.update_product(8, {"publish": "active"})
        assert sent() == ("UPDATE products SET publish = ? WHERE id = ?", ["active", "8"])

        service.delete_product(8)
        assert sent() == ("DELETE FROM products WHERE id = ?", ["8"])

    def test_generic_entities_validate_table_and_fields(self, service, sent):
        service.fetch_generic_entities("vendors", ["id", "name"], limit=5)
        assert sent() == ("SELECT id, name FROM vendors ORDER BY name LIMIT ?", ["5"])

        with pytest.raises(ValidationError):
            service.fetch_generic_entities("vendors; --")

    def test_attribute_fetchers(self, service, sent):
        service.fetch_metafields(limit=3)
        sql, _ = sent()
        assert '"group"' in sql and "FROM metafields" in sql

        service.fetch_options()
        assert sent()[0].startswith("SELECT id, parentid, title, value, identifier FROM options")

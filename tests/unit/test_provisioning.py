"""Unit tests for database provisioning through the platform API."""

from unittest.mock import MagicMock

import pytest
import requests

from catalog.core.config import TursoConfig
from catalog.core.exceptions import CredentialsError, ExternalServiceError, ValidationError
from catalog.services.provisioning_service import ProvisioningService, format_database_name

DATABASES_URL = "https://api.turso.tech/v1/organizations/tarframework/databases"


def _response(status: int = 200, payload=None, text: str = ""):
    response = MagicMock(spec=requests.Response)
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = payload
    response.text = text
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def service(turso_settings, session):
    return ProvisioningService(turso_settings, session=session)


class TestFormatDatabaseName:
    def test_strips_non_alphanumerics_and_lowercases(self):
        assert format_database_name("John.Doe+1@Example.com") == "johndoe1examplecom"

    def test_truncated_to_fifty_characters(self):
        name = format_database_name(f"{'a' * 60}@example.com")
        assert name == "a" * 50

    @pytest.mark.parametrize("email", ["", "not-an-email", "two@@example.com"])
    def test_invalid_email(self, email):
        with pytest.raises(ValidationError):
            format_database_name(email)


class TestProvisioningService:
    def test_platform_token_required(self):
        with pytest.raises(CredentialsError):
            ProvisioningService(TursoConfig(platform_token=None))

    def test_get_database(self, service, session):
        session.request.return_value = _response(payload={"database": {"Name": "shop"}})

        assert service.get_database("shop") == {"database": {"Name": "shop"}}

        args, kwargs = session.request.call_args
        assert args == ("GET", f"{DATABASES_URL}/shop")
        assert kwargs["headers"]["Authorization"] == "Bearer platform-token"
        assert kwargs["timeout"] == 5

    def test_get_missing_database(self, service, session):
        session.request.return_value = _response(status=404)
        assert service.get_database("shop") is None

    def test_create_database_uses_configured_group(self, service, session):
        session.request.return_value = _response(payload={"database": {"Name": "shop"}})

        service.create_database("shop")

        args, kwargs = session.request.call_args
        assert args == ("POST", DATABASES_URL)
        assert kwargs["json"] == {"name": "shop", "group": "tarapp"}

    def test_existing_database_is_not_an_error(self, service, session):
        session.request.side_effect = [
            _response(status=409, payload={"error": "database shop already exists"}),
            _response(payload={"database": {"Name": "shop"}}),
        ]

        assert service.create_database("shop") == {"database": {"Name": "shop"}}

    def test_create_database_failure(self, service, session):
        session.request.return_value = _response(status=400, payload={"error": "group not found"})

        with pytest.raises(ExternalServiceError, match="group not found") as exc_info:
            service.create_database("shop")
        assert exc_info.value.details == {"service": "turso-platform", "status": 400}

    def test_create_token(self, service, session):
        session.request.return_value = _response(payload={"jwt": "jwt-xyz"})

        assert service.create_token("shop") == "jwt-xyz"

        args, kwargs = session.request.call_args
        assert args == ("POST", f"{DATABASES_URL}/shop/auth/tokens")
        assert kwargs["params"] == {"authorization": "full-access"}

    def test_token_response_without_jwt(self, service, session):
        session.request.return_value = _response(payload={})
        with pytest.raises(ExternalServiceError):
            service.create_token("shop")

    def test_unreachable_platform(self, service, session):
        session.request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ExternalServiceError, match="unreachable"):
            service.get_database("shop")

    def test_provision_new_database(self, service, session):
        session.request.side_effect = [
            _response(status=404),
            _response(payload={"database": {"Name": "janeexamplecom"}}),
            _response(payload={"jwt": "jwt-new"}),
        ]

        credentials = service.provision("jane@example.com", user_id="user-9")

        assert credentials.turso_db_name == "janeexamplecom"
        assert credentials.turso_api_token == "jwt-new"
        assert credentials.user_id == "user-9"
        assert [c.args[0] for c in session.request.call_args_list] == ["GET", "POST", "POST"]

    def test_provision_existing_database(self, service, session):
        session.request.side_effect = [
            _response(payload={"database": {"Name": "janeexamplecom"}}),
            _response(payload={"jwt": "jwt-existing"}),
        ]

        credentials = service.provision("jane@example.com")

        assert credentials.turso_api_token == "jwt-existing"
        assert session.request.call_count == 2

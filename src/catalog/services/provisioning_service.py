import logging
import re
from typing import Any, Dict, Optional

import requests
from email_validator import EmailNotValidError, validate_email

from catalog.core.config import TursoConfig, config
from catalog.core.exceptions import CredentialsError, ExternalServiceError, ValidationError
from catalog.models.credentials import DatabaseCredentials

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r'[^a-zA-Z0-9]')
MAX_DATABASE_NAME_LENGTH = 50


def format_database_name(email: str) -> str:
    """
    Database name for a user: the email with every non-alphanumeric
    character removed, lowercased and cut to 50 characters.
    """
    try:
        validated = validate_email(email or "", check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}")

    formatted = _NON_ALNUM_RE.sub("", validated.normalized).lower()
    return formatted[:MAX_DATABASE_NAME_LENGTH]


class ProvisioningService:
    """Client for the Turso platform API: databases and access tokens"""

    def __init__(self, settings: Optional[TursoConfig] = None, session: Optional[requests.Session] = None):
        self.settings = settings or config.turso
        if not self.settings.platform_token:
            raise CredentialsError("TURSO_PLATFORM_TOKEN is not configured")
        self.session = session or requests.Session()

    @property
    def _databases_url(self) -> str:
        return f"{self.settings.platform_url}/organizations/{self.settings.organization}/databases"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.settings.platform_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            return self.session.request(
                method, url, headers=self._headers(), timeout=self.settings.request_timeout, **kwargs
            )
        except requests.RequestException as e:
            raise ExternalServiceError("turso-platform", f"Platform API unreachable: {e}") from e

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:500]
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text[:500]

    def get_database(self, name: str) -> Optional[Dict[str, Any]]:
        """Database details, or None when it does not exist"""
        response = self._request("GET", f"{self._databases_url}/{name}")
        if response.status_code == 404:
            return None
        if not response.ok:
            raise ExternalServiceError(
                "turso-platform",
                f"Failed to look up database {name}: {self._error_message(response)}",
                status=response.status_code,
            )
        return response.json()

    def create_database(self, name: str, group: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a database in the configured group

        A database that already exists is not an error; its details are
        returned instead.
        """
        response = self._request(
            "POST",
            self._databases_url,
            json={"name": name, "group": group or self.settings.database_group},
        )
        if response.ok:
            logger.info(f"Created database {name}")
            return response.json()

        message = self._error_message(response)
        if "already exists" in message:
            logger.info(f"Database {name} already exists")
            return self.get_database(name) or {"database": {"Name": name}}

        raise ExternalServiceError(
            "turso-platform", f"Failed to create database {name}: {message}", status=response.status_code
        )

    def create_token(self, name: str) -> str:
        """Full-access JWT for one database"""
        response = self._request(
            "POST",
            f"{self._databases_url}/{name}/auth/tokens",
            params={"authorization": "full-access"},
        )
        if not response.ok:
            raise ExternalServiceError(
                "turso-platform",
                f"Failed to create token for {name}: {self._error_message(response)}",
                status=response.status_code,
            )

        token = (response.json() or {}).get("jwt")
        if not token:
            raise ExternalServiceError("turso-platform", f"Token response for {name} did not contain a JWT")
        return token

    def provision(self, email: str, user_id: Optional[str] = None) -> DatabaseCredentials:
        """Make sure the user's database exists and issue a token for it"""
        name = format_database_name(email)

        if self.get_database(name) is None:
            self.create_database(name)
        else:
            logger.info(f"Using existing database {name}")

        token = self.create_token(name)
        logger.info(f"Provisioned database {name} for user {user_id}")
        return DatabaseCredentials(turso_db_name=name, turso_api_token=token, user_id=user_id)

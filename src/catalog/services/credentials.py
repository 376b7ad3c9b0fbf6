import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from catalog.core.exceptions import CredentialsError, ValidationError
from catalog.models.credentials import DatabaseCredentials
from catalog.schemas.credential_schemas import ProfileCredentials
from catalog.services.credential_cache import CredentialCache

logger = logging.getLogger(__name__)


def _require_user_id(user_id: Optional[str]) -> str:
    if user_id is None or not str(user_id).strip():
        raise ValidationError("User ID is required")
    return str(user_id).strip()


def get_profile_data(user_id: str, cache: Optional[CredentialCache] = None) -> DatabaseCredentials:
    """
    Credentials for a user from the local cache only

    Raises:
        ValidationError: When the user id is empty
        CredentialsError: When nothing is cached for this user
    """
    user_id = _require_user_id(user_id)
    cache = cache or CredentialCache()

    credentials = cache.get_cached_credentials(user_id)
    if credentials is None:
        raise CredentialsError(
            "No cached credentials found. Please ensure user is properly authenticated and onboarded."
        )
    return credentials


def cache_and_get_credentials(
    user_id: str,
    profile_data: Dict[str, Any],
    cache: Optional[CredentialCache] = None
) -> DatabaseCredentials:
    """
    Take credentials from the first profile record, cache and return them

    `profile_data` is the payload returned by the profile lookup:
    ``{"profile": [{"tursoDbName": ..., "tursoApiToken": ...}, ...]}``.
    """
    user_id = _require_user_id(user_id)
    cache = cache or CredentialCache()

    profiles = (profile_data or {}).get("profile") or []
    if not profiles or not isinstance(profiles[0], dict):
        raise CredentialsError("Profile data does not contain a profile record")

    try:
        profile = ProfileCredentials.model_validate(profiles[0])
    except PydanticValidationError as e:
        raise CredentialsError(f"Invalid database credentials in profile data: {e.error_count()} invalid field(s)")
    if not profile.turso_db_name or not profile.turso_api_token:
        raise CredentialsError("Missing database credentials in profile data")

    credentials = DatabaseCredentials(
        turso_db_name=profile.turso_db_name,
        turso_api_token=profile.turso_api_token,
        user_id=user_id,
    )
    cache.cache_credentials(credentials, user_id)
    return credentials


def get_credentials_with_cache(
    user_id: str,
    profile_data: Optional[Dict[str, Any]] = None,
    cache: Optional[CredentialCache] = None
) -> DatabaseCredentials:
    """Cached credentials first, then the profile record when one is supplied"""
    user_id = _require_user_id(user_id)
    cache = cache or CredentialCache()

    credentials = cache.get_cached_credentials(user_id)
    if credentials is not None:
        logger.debug(f"Using cached credentials for user {user_id}")
        return credentials

    if profile_data is None:
        raise CredentialsError(
            "No cached credentials found. Please ensure user is properly authenticated and onboarded."
        )

    logger.info(f"Credential cache miss for user {user_id}, reading profile data")
    return cache_and_get_credentials(user_id, profile_data, cache)

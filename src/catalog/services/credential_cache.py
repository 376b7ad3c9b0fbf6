"""
Local cache of per-user database credentials.

Credentials are stored as one JSON blob under a single key. There is no
expiry: an entry stays valid until it is cleared or replaced by a lookup for
another user. Failures to write or clear the cache are logged and swallowed
so a broken cache never blocks a request; the caller simply falls back to the
profile record.
"""
import json
import logging
import os
import re
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from catalog.core.config import config
from catalog.models.credentials import DatabaseCredentials
from catalog.schemas.credential_schemas import CachedCredentials
from catalog.utils.date_utils import DateUtils

logger = logging.getLogger(__name__)

_KEY_RE = re.compile(r'^[A-Za-z0-9_.-]+$')


class KeyValueStore:
    """Persistent string key-value storage, one file per key"""

    def __init__(self, directory: Optional[str] = None):
        self.directory = directory or config.cache.directory

    def _path(self, key: str) -> str:
        if not _KEY_RE.match(key):
            raise ValueError(f"Invalid storage key: {key}")
        return os.path.join(self.directory, f"{key}.json")

    def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            return f.read()

    def set_item(self, key: str, value: str) -> None:
        os.makedirs(self.directory, exist_ok=True)
        path = self._path(key)
        tmp_path = f"{path}.tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(value)
        os.replace(tmp_path, path)

    def remove_item(self, key: str) -> None:
        path = self._path(key)
        if os.path.exists(path):
            os.remove(path)


class CredentialCache:
    """Read and write the cached credential blob"""

    def __init__(self, store: Optional[KeyValueStore] = None, cache_key: Optional[str] = None):
        self.store = store or KeyValueStore()
        self.cache_key = cache_key or config.cache.credentials_key

    def cache_credentials(self, credentials: DatabaseCredentials, user_id: str) -> None:
        entry = CachedCredentials(
            turso_db_name=credentials.turso_db_name,
            turso_api_token=credentials.turso_api_token,
            user_id=str(user_id),
            timestamp=DateUtils.now_millis(),
        )
        try:
            self.store.set_item(self.cache_key, entry.model_dump_json(by_alias=True))
            logger.info(f"Cached database credentials for user {user_id}")
        except OSError as e:
            logger.error(f"Failed to cache credentials: {e}")

    def _read_entry(self) -> Optional[CachedCredentials]:
        try:
            raw = self.store.get_item(self.cache_key)
            if raw is None:
                return None
            return CachedCredentials.model_validate_json(raw)
        except (PydanticValidationError, UnicodeDecodeError):
            logger.warning("Cached credentials are corrupt, clearing cache")
            self.clear_credential_cache()
            return None

    def get_cached_credentials(self, user_id: str) -> Optional[DatabaseCredentials]:
        """
        Cached credentials for this user, or None

        An entry written for a different user is cleared.
        """
        try:
            entry = self._read_entry()
        except OSError as e:
            logger.error(f"Failed to read credential cache: {e}")
            return None

        if entry is None:
            return None

        if entry.user_id != str(user_id):
            logger.info("Cached credentials belong to another user, clearing cache")
            self.clear_credential_cache()
            return None

        return entry.to_credentials()

    def clear_credential_cache(self) -> None:
        try:
            self.store.remove_item(self.cache_key)
        except OSError as e:
            logger.error(f"Failed to clear credential cache: {e}")

    def has_cached_credentials(self, user_id: str) -> bool:
        return self.get_cached_credentials(user_id) is not None

    def get_cache_info(self) -> Optional[Dict[str, Any]]:
        """Cache metadata for diagnostics; never includes the token"""
        try:
            raw = self.store.get_item(self.cache_key)
            if raw is None:
                return {"exists": False}
            data = json.loads(raw)
            return {
                "exists": True,
                "timestamp": data.get("timestamp"),
                "userId": data.get("userId"),
            }
        except (OSError, ValueError, AttributeError) as e:
            logger.error(f"Failed to read credential cache info: {e}")
            return None

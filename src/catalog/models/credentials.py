from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class DatabaseCredentials:
    """Per-tenant database name and access token"""
    turso_db_name: str
    turso_api_token: str
    user_id: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.turso_db_name and self.turso_api_token)

    def to_dict(self) -> Dict[str, Any]:
        """Camel-case keys, matching the cached blob and the profile record"""
        return {
            "tursoDbName": self.turso_db_name,
            "tursoApiToken": self.turso_api_token,
            "userId": self.user_id,
        }

    def __repr__(self) -> str:
        # Keep the token out of logs and tracebacks
        return f"<DatabaseCredentials db={self.turso_db_name!r} user={self.user_id!r}>"

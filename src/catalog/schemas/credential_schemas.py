from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from catalog.models.credentials import DatabaseCredentials


class CachedCredentials(BaseModel):
    """Blob stored under the credential cache key"""
    turso_db_name: str = Field(alias="tursoDbName", min_length=1)
    turso_api_token: str = Field(alias="tursoApiToken", min_length=1)
    user_id: Optional[str] = Field(default=None, alias="userId")
    timestamp: int = Field(description="Epoch milliseconds when the entry was written")

    model_config = ConfigDict(populate_by_name=True)

    def to_credentials(self) -> DatabaseCredentials:
        return DatabaseCredentials(
            turso_db_name=self.turso_db_name,
            turso_api_token=self.turso_api_token,
            user_id=self.user_id,
        )


class ProfileCredentials(BaseModel):
    """Credential fields of the first profile record returned after onboarding"""
    turso_db_name: Optional[str] = Field(default=None, alias="tursoDbName")
    turso_api_token: Optional[str] = Field(default=None, alias="tursoApiToken")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

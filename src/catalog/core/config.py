import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


@dataclass
class TursoConfig:
    """Turso database gateway settings"""
    organization: str = "tarframework"
    region: str = "aws-eu-west-1"
    platform_url: str = "https://api.turso.tech/v1"
    platform_token: Optional[str] = None  # Organization token for the platform API
    database_group: str = "tarapp"
    max_retries: int = 3
    backoff_base: float = 2.0
    request_timeout: float = 30.0

    def pipeline_url(self, database_name: str) -> str:
        return f"https://{database_name}-{self.organization}.{self.region}.turso.io/v2/pipeline"


@dataclass
class StorageConfig:
    """S3-compatible object storage (Cloudflare R2)"""
    endpoint: str = ""
    access_key: Optional[str] = None
    secret_key: Optional[str] = None
    bucket_name: str = "catalog-media"
    region: str = "auto"
    default_folder: str = "products"
    presign_expiration: int = 3600


@dataclass
class CacheConfig:
    """Local key-value storage for cached credentials"""
    directory: str = field(default_factory=lambda: os.path.join(os.path.expanduser("~"), ".catalog-service"))
    credentials_key: str = "turso_credentials"


@dataclass
class APIConfig:
    """API-specific configuration"""
    version: str = "v1"
    title: str = "Catalog API"
    max_page_size: int = 100
    default_page_size: int = 20


@dataclass
class AppConfig:
    """Application configuration"""
    debug: bool = False
    host: str = "0.0.0.0"
    port: int = 5000
    environment: str = "development"  # development, staging, production
    log_level: str = "INFO"


class Config:
    def __init__(self):
        self.environment = os.getenv("ENVIRONMENT", "development")

        self.turso = TursoConfig(
            organization=os.getenv("TURSO_ORGANIZATION", "tarframework"),
            region=os.getenv("TURSO_REGION", "aws-eu-west-1"),
            platform_url=os.getenv("TURSO_PLATFORM_URL", "https://api.turso.tech/v1"),
            platform_token=os.getenv("TURSO_PLATFORM_TOKEN"),
            database_group=os.getenv("TURSO_DATABASE_GROUP", "tarapp"),
            max_retries=int(os.getenv("TURSO_MAX_RETRIES", "3")),
            backoff_base=float(os.getenv("TURSO_BACKOFF_BASE", "2")),
            request_timeout=float(os.getenv("TURSO_REQUEST_TIMEOUT", "30")),
        )

        self.storage = StorageConfig(
            endpoint=os.getenv("R2_ENDPOINT", ""),
            access_key=os.getenv("R2_ACCESS_KEY_ID"),
            secret_key=os.getenv("R2_SECRET_ACCESS_KEY"),
            bucket_name=os.getenv("R2_BUCKET", "catalog-media"),
            region=os.getenv("R2_REGION", "auto"),
            presign_expiration=int(os.getenv("R2_PRESIGN_EXPIRATION", "3600")),
        )

        self.cache = CacheConfig(
            directory=os.getenv(
                "CATALOG_CACHE_DIR",
                os.path.join(os.path.expanduser("~"), ".catalog-service"),
            ),
            credentials_key=os.getenv("CATALOG_CREDENTIALS_KEY", "turso_credentials"),
        )

        self.api = APIConfig(
            max_page_size=int(os.getenv("MAX_PAGE_SIZE", "100")),
            default_page_size=int(os.getenv("DEFAULT_PAGE_SIZE", "20")),
        )

        self.app = AppConfig(
            debug=os.getenv("DEBUG", "false").lower() == "true",
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            environment=self.environment,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> None:
        """Validate critical configuration"""
        if self.is_production and not self.turso.platform_token:
            raise ValueError("TURSO_PLATFORM_TOKEN must be set in production")

        if self.is_production and not (self.storage.access_key and self.storage.secret_key):
            raise ValueError("R2_ACCESS_KEY_ID and R2_SECRET_ACCESS_KEY must be set in production")

        if self.turso.max_retries < 1:
            raise ValueError("TURSO_MAX_RETRIES must be at least 1")


config = Config()

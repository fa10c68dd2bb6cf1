"""Application settings and configuration."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_JWT_SECRET = "dev-jwt-secret-change-in-production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: Optional[str] = None
    postgres_user: str = "complaints"
    postgres_password: str = "complaints_dev_password"
    postgres_db: str = "complaint_system"
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    db_pool_size: int = 10
    db_max_overflow: int = 0

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 5000
    environment: str = "development"

    # Security
    jwt_secret_key: str = DEFAULT_JWT_SECRET
    jwt_algorithm: str = "HS256"
    jwt_expiration_hours: int = 24
    bcrypt_rounds: int = 10

    # Attachments
    storage_backend: str = "local"  # local, minio
    upload_dir: str = "uploads"
    upload_url_prefix: str = "/uploads"
    max_attachments: int = 5
    max_attachment_bytes: int = 5 * 1024 * 1024

    # MinIO / S3
    minio_endpoint: str = "localhost:9000"
    minio_access_key: Optional[str] = None  # Required in non-dev
    minio_secret_key: Optional[str] = None  # Required in non-dev
    minio_bucket: str = "complaint-attachments"
    minio_use_ssl: bool = False
    attachment_signed_url_ttl: int = 3600  # 1 hour

    # Complaints
    complaint_number_attempts: int = 3

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # json, text

    # CORS
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    @property
    def database_url_computed(self) -> str:
        """Compute database URL if not explicitly set."""
        if self.database_url:
            return self.database_url
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    def validate_production_settings(self):
        """Validate settings for production environment."""
        env = self.environment.lower()
        if env not in ("development", "test", "dev"):
            if self.jwt_secret_key == DEFAULT_JWT_SECRET:
                raise ValueError(
                    "JWT_SECRET_KEY must be set in production. "
                    "Do not use the development default."
                )
            if self.storage_backend == "minio" and (
                not self.minio_access_key or not self.minio_secret_key
            ):
                raise ValueError(
                    "MINIO_ACCESS_KEY and MINIO_SECRET_KEY are required in production. "
                    "Do not use default credentials."
                )
        if self.storage_backend not in ("local", "minio"):
            raise ValueError(
                f"Unknown STORAGE_BACKEND={self.storage_backend}. Use 'local' or 'minio'."
            )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List


class Settings(BaseSettings):
    # Supabase
    supabase_url: str = ""
    supabase_key: str = ""  # anon key, row-level security applies
    supabase_service_role_key: Optional[str] = None  # bypasses RLS; only used behind the role checks

    # Auth
    jwt_secret: str = Field(
        default="change-this-secret-in-production",
        validation_alias=AliasChoices("jwt_secret", "session_secret"),
    )
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 7
    bcrypt_rounds: int = 10
    protected_admin_username: str = "admin"

    # Image uploads
    image_storage_backend: str = "local"  # local | s3
    upload_dir: str = "public/images/uploaded"
    upload_url_prefix: str = "/images/uploaded"
    max_image_bytes: int = 5 * 1024 * 1024

    # AWS S3 (will read from uppercase env vars automatically)
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: str = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # App
    app_name: str = "gear-exchange-backend"
    debug: bool = False
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    rate_limit: str = "100/minute"  # slowapi format, e.g. "100/minute"
    auth_rate_limit: str = "5 per 15 minutes"
    rate_limit_enabled: bool = True

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def get_cors_origins_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        env_prefix="",  # No prefix needed
        extra="ignore"
    )


settings = Settings()

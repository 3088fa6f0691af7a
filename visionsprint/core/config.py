"""
Configuration management using Pydantic Settings
"""
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# config.py is at: visionsprint/core/config.py -> project root is two levels up
_current_file = Path(__file__).resolve()
_project_root = _current_file.parent.parent.parent
ENV_FILE = _project_root / ".env"
if ENV_FILE.exists():
    load_dotenv(ENV_FILE, override=False)


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "VisionSprint"
    app_env: str = Field(default="development", description="Application environment")
    log_level: str = Field(default="INFO", description="Logging level")
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="http://localhost:3000",
        description="Allowed CORS origins (comma-separated)"
    )
    frontend_url: str = Field(
        default="http://localhost:3000",
        description="Where the browser is sent after a successful sign-in"
    )

    # Logging
    log_sqlalchemy: bool = Field(default=False, description="Enable SQLAlchemy query logging")
    log_uvicorn_access: bool = Field(default=False, description="Enable Uvicorn access logging")
    log_module_levels: Optional[str] = Field(
        default=None,
        description='Module-specific log levels (JSON string, e.g., {"visionsprint.api": "DEBUG"})'
    )
    log_format: str = Field(
        default="json",
        description="Log format: 'json' for structured logging, 'text' for plain text"
    )
    log_file_enabled: bool = Field(default=False, description="Enable file logging")
    log_file_path: str = Field(
        default="logs/visionsprint.log",
        description="Path to log file (relative to project root)"
    )
    log_file_rotation: str = Field(
        default="midnight",
        description="Log file rotation: 'midnight' or 'W0'..'W6' (weekly)"
    )
    log_file_retention: int = Field(default=30, ge=1, description="Number of log files to keep")
    log_sensitive_data: bool = Field(
        default=False,
        description="Enable logging of sensitive data (tokens, passwords) - NOT RECOMMENDED"
    )

    # Database
    database_url_override: Optional[str] = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Full SQLAlchemy URL; takes precedence over POSTGRES_* parts"
    )
    postgres_host: str = Field(default="localhost", description="PostgreSQL host")
    postgres_db: str = Field(default="visionsprint", description="PostgreSQL database name")
    postgres_user: str = Field(default="postgres", description="PostgreSQL user")
    postgres_password: str = Field(default="postgres", description="PostgreSQL password")
    postgres_port: int = Field(default=5432, ge=1, le=65535, description="PostgreSQL port")
    database_pool_size: int = Field(default=5, ge=1, description="Database pool size")
    database_max_overflow: int = Field(default=10, ge=0, description="Database max overflow")

    # Authentication
    google_client_id: Optional[str] = Field(default=None, description="Google OAuth client id")
    google_client_secret: Optional[str] = Field(default=None, description="Google OAuth client secret")
    google_redirect_uri: str = Field(
        default="http://localhost:8000/api/auth/google/callback",
        description="OAuth redirect URI registered with Google"
    )
    google_api_key: Optional[str] = Field(
        default=None,
        description="API key used to read metadata of publicly shared Drive files"
    )
    enable_dev_login: bool = Field(default=True, description="Allow email-only login outside production")
    dev_admin_email: str = Field(default="alice@example.com", description="Dev-login email granted admin")
    access_password: str = Field(default="lets-think-far-away", description="Shared access password")
    enable_access_gate: bool = Field(default=False, description="Require access verification for signed-in users")
    session_duration_hours: int = Field(default=24 * 7, ge=1, description="Session lifetime in hours")
    session_cookie_secure: bool = Field(default=False, description="Mark session cookie as Secure")

    # Business rules
    max_video_duration_seconds: int = Field(default=240, ge=1, description="Longest pitch/demo video allowed")
    max_votes_per_user: Optional[int] = Field(default=None, ge=1, description="Votes per user per sprint")
    max_joins_per_user: Optional[int] = Field(default=None, ge=1, description="Joins per user per sprint")
    max_team_size: Optional[int] = Field(default=None, ge=1, description="Members per team")

    @field_validator("max_votes_per_user", "max_joins_per_user", "max_team_size", mode="before")
    @classmethod
    def parse_optional_limit(cls, v):
        """Treat 0 / empty as unlimited"""
        if v in ("", "0", 0):
            return None
        return v

    @property
    def database_url(self) -> str:
        """Construct database URL"""
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def google_oauth_configured(self) -> bool:
        """Google sign-in is available only with real client credentials"""
        return bool(
            self.google_client_id
            and self.google_client_secret
            and self.google_client_id != "your-google-client-id"
            and self.google_client_secret != "your-google-client-secret"
        )

    @property
    def dev_login_enabled(self) -> bool:
        return self.enable_dev_login and not self.is_production

    @property
    def allowed_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return [origin.strip() for origin in self.allowed_origins.split(",") if origin.strip()]

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE) if ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
        populate_by_name=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()

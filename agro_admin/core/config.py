"""Centralized dashboard settings using pydantic settings."""

from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
# Look for .env in the working directory first, then next to the package
env_path = Path.cwd() / ".env"
if not env_path.exists():
    env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path, override=False)

SUPPORTED_LANGUAGES = ("uz", "ru")


class Settings(BaseSettings):
    """Environment-aware configuration (API endpoint, locale, local storage paths)."""

    # Application settings
    app_name: str = "Agro Admin"
    log_level: str = "INFO"

    # Backend API settings
    api_base_url: str = Field(
        default="https://horeca.felixits.uz/api/v1/admin",
        description="Base URL of the admin REST API",
    )
    media_base_url: str = Field(
        default="https://horeca.felixits.uz",
        description="Prefix for relative image paths returned by the API",
    )
    request_timeout: float = Field(default=15.0, gt=0, description="Seconds")

    # UI settings
    default_language: str = Field(default="uz", description="uz or ru")
    page_size: int = Field(default=10, ge=1, description="Rows per list page")

    # Local storage settings
    token_file: str = Field(
        default="~/.agro_admin/auth.json",
        description="Where the bearer token pair is persisted between runs",
    )
    exports_dir: str = Field(
        default="exports",
        description="Directory for generated spreadsheets (absolute or relative path)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    @field_validator("api_base_url", "media_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Endpoint paths always start with '/', so the base must not end with one."""
        return v.rstrip("/")

    @field_validator("default_language", mode="before")
    @classmethod
    def check_language(cls, v: str | None) -> str:
        """Only Uzbek and Russian are supported by the backend."""
        if v is None:
            return "uz"
        code = str(v).strip().lower()
        if code not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language '{v}', expected one of {SUPPORTED_LANGUAGES}")
        return code

    @field_validator("token_file", mode="after")
    @classmethod
    def expand_token_file(cls, v: str) -> str:
        """Expand '~' so the token store gets a concrete path."""
        return str(Path(v).expanduser())

    @field_validator("exports_dir", mode="after")
    @classmethod
    def resolve_exports_dir(cls, v: str) -> str:
        """Resolve exports_dir to an absolute path for consistency across commands."""
        path = Path(v).expanduser()
        if not path.is_absolute():
            path = (Path.cwd() / path).resolve()
        else:
            path = path.resolve()
        return str(path)


@lru_cache
def get_settings() -> Settings:
    """Provide singleton-like access for dependency injection."""
    return Settings()

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

FIREBASE_CERTS_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )

    environment: str = Field(default="development", alias="ENVIRONMENT")

    # Firebase project that owns both the Firestore database and the ID tokens
    project_id: str = Field(default="talkit-199f9", alias="FIREBASE_PROJECT_ID")

    # Storage
    store_backend: Literal["firestore", "sql"] = Field(default="firestore", alias="STORE_BACKEND")
    database_url: str = Field(default="sqlite+aiosqlite:///./talkit.db", alias="DATABASE_URL")

    # Authentication
    auth_backend: Literal["firebase", "jwt"] = Field(default="firebase", alias="AUTH_BACKEND")
    jwt_secret: str = Field(default="", alias="JWT_SECRET")
    firebase_certs_url: str = Field(default=FIREBASE_CERTS_URL, alias="FIREBASE_CERTS_URL")

    # Free trial provisioned with every new profile
    trial_timezone: str = Field(default="America/Buenos_Aires", alias="TRIAL_TIMEZONE")
    trial_days: int = Field(default=7 * 12, alias="TRIAL_DAYS")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=8000, alias="PORT")
    # idle keep-alive connections are dropped after this many seconds
    request_timeout: int = Field(default=10, alias="REQUEST_TIMEOUT")

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


@lru_cache
def get_settings() -> Settings:
    settings = Settings()
    if settings.is_production and settings.auth_backend == "jwt":
        raise RuntimeError("AUTH_BACKEND=jwt is not allowed in production. Use firebase.")
    return settings

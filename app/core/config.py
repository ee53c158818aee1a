import json
from email.utils import formataddr
from typing import Annotated, Any, List, Literal, Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Contact Relay"
    VERSION: str = "1.0.0"
    API_V1_PREFIX: str = "/api/v1"
    CONTACT_PATH: str = "/contact"

    # --- Environment & Debug ---
    ENVIRONMENT: str = "local"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # --- Email provider (Resend) ---
    RESEND_API_KEY: Optional[SecretStr] = None
    RESEND_API_URL: str = "https://api.resend.com/emails"
    RESEND_TIMEOUT: float = 10.0

    # --- Message routing ---
    RECIPIENT_EMAIL: Optional[str] = None
    FROM_EMAIL: Optional[str] = None
    FROM_NAME: Optional[str] = None
    MAX_MESSAGE_LENGTH: int = 2000

    # --- CORS ---
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=list,
        description="Origins allowed to call the contact endpoint. Empty means any origin.",
    )

    # --- Rate Limiting ---
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0
    RATE_LIMIT_MAX_REQUESTS: int = 5
    RATE_LIMIT_BACKEND: Literal["memory", "redis"] = "memory"
    REDIS_URL: str = "redis://localhost:6379/0"
    CLIENT_KEY_HEADERS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["client-ip", "x-forwarded-for"],
        description="Request headers checked, in order, to derive the rate-limit client key.",
    )

    model_config = SettingsConfigDict(
        env_file=".env", case_sensitive=True, extra="ignore"
    )

    @field_validator("ALLOWED_ORIGINS", "CLIENT_KEY_HEADERS", mode="before")
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        # Accept "a,b" as well as a JSON list
        if isinstance(v, str):
            raw = v.strip()
            if raw.startswith("["):
                v = json.loads(raw)
            else:
                v = raw.split(",")
        if isinstance(v, (list, tuple)):
            return [str(item).strip() for item in v if str(item).strip()]
        return v

    @field_validator("CLIENT_KEY_HEADERS", mode="after")
    @classmethod
    def lowercase_headers(cls, v: List[str]) -> List[str]:
        return [header.lower() for header in v]

    @field_validator("LOG_LEVEL", mode="after")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("RATE_LIMIT_MAX_REQUESTS", mode="after")
    @classmethod
    def validate_max_requests(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RATE_LIMIT_MAX_REQUESTS must be at least 1")
        return v

    @property
    def sender(self) -> Optional[str]:
        """Sender identity in the ``Name <address>`` form the provider accepts."""
        if not self.FROM_EMAIL:
            return None
        if self.FROM_NAME:
            return formataddr((self.FROM_NAME, self.FROM_EMAIL))
        return self.FROM_EMAIL


settings = Settings()

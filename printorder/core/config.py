# printorder/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - SUPABASE_URL
      - SUPABASE_KEY (anon key)
      - SUPABASE_JWT_SECRET (JWT signing secret from Supabase project settings)

    Optional:
      - SUPABASE_SERVICE_ROLE_KEY (backend client bypasses RLS when set)
      - SMTP_* + OPERATOR_ALERT_EMAIL (partial-failure alerts)
    """

    PROJECT_NAME: str = "Print Order Backend"
    API_V1_STR: str = "/api/v1"

    # Supabase config
    SUPABASE_URL: str
    SUPABASE_KEY: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Table names in the hosted database
    ORDERS_TABLE: str = "orders"
    ORDER_ITEMS_TABLE: str = "order_item"
    MEMBERS_TABLE: str = "members"

    # Storage call policy
    STORAGE_TIMEOUT_SECONDS: float = 10.0
    STORAGE_READ_RETRIES: int = 1

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Outgoing mail (operator alerts)
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: str | None = None
    SMTP_PASSWORD: str | None = None
    SMTP_FROM_EMAIL: str | None = None
    SMTP_FROM_NAME: str = "Print Order Backend"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    OPERATOR_ALERT_EMAIL: str | None = None

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()

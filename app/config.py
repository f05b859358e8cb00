from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database (Postgres do Supabase)
    DATABASE_URL: str = "sqlite:///./madadgar.db"

    ENVIRONMENT: str = "development"
    DEV_MODE: bool = False  # Modo desenvolvimento (permite token "test"); ligar só no .env local
    DEBUG: bool = False

    # API
    API_V1_PREFIX: str = "/api/v1"
    FUNCTIONS_PREFIX: str = "/functions/v1"

    # CORS
    CORS_ORIGINS: list[str] = ["*"]

    # Supabase
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""

    # Supabase Auth
    SUPABASE_JWKS_URL: str = ""  # endpoint para pegar chaves públicas (/.well-known/jwks.json)
    SUPABASE_AUDIENCE: str = "authenticated"

    # Firebase Cloud Messaging (API legada)
    FCM_SERVER_KEY: str = ""
    FCM_SEND_URL: str = "https://fcm.googleapis.com/fcm/send"
    FCM_TIMEOUT: float = 10.0
    PUSH_CHANNEL_ID: str = "madadgar_notifications"
    PUSH_ICON: str = "ic_notification"

    # Redis / Celery
    REDIS_URL: str = "redis://localhost:6379/0"
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # Outbox de notificações
    OUTBOX_MAX_ATTEMPTS: int = 5
    OUTBOX_DRAIN_INTERVAL_SECONDS: int = 60
    OUTBOX_STALE_SECONDS: int = 900  # processing sem conclusão por mais que isso volta para a fila

    # Remoção periódica de itens de comida vencidos
    FOOD_EXPIRY_INTERVAL_SECONDS: int = 1800

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    RATE_LIMIT_PER_IP: str = "60/minute"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )


@lru_cache
def get_settings() -> Settings:
    """Settings do processo (lidos uma vez do ambiente/.env)."""
    return Settings()

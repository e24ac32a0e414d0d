from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "gym-billing"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/gym_billing.db"
    REDIS_URL: str = "redis://localhost:6379"

    # Operator session tokens
    SESSION_JWT_SECRET: str = "change-me-session-secret"
    SESSION_TOKEN_TTL_MINUTES: int = 720

    # Billing cycle
    BILLING_CYCLE_DAY: int = 1  # day of month automatic generation is offered
    BILLING_DUE_DAY: int = 10  # charges fall due on this day, clamped to month length
    BILLING_DEFAULT_TIMEZONE: str = "UTC"
    BILLING_CRON_HOUR: int = 6  # worker hour for automatic generation

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "thirdplace-webhooks"
    version: str = "0.1.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/database.db"
    REDIS_URL: str = "redis://localhost:6379"
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Webhook dispatcher
    WEBHOOK_BATCH_SIZE: int = 50
    WEBHOOK_MAX_ATTEMPTS: int = 3
    WEBHOOK_TIMEOUT_SECONDS: float = 10.0
    WEBHOOK_USER_AGENT: str = "MyThirdPlace-Webhook/1.0"

    # Optional row claiming (guards against overlapping dispatcher runs)
    WEBHOOK_CLAIM_DELIVERIES: bool = False
    WEBHOOK_CLAIM_LEASE_SECONDS: int = 300


settings = Settings()

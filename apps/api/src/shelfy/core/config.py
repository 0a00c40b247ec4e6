from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "local"
    APP_NAME: str = "shelfy-groups"
    LOG_LEVEL: str = "INFO"

    # Public URL of the web client, used for links in emails.
    APP_BASE_URL: str = "http://localhost:3000"

    DATABASE_URL: str = "postgresql+psycopg://postgres:postgres@db:5432/shelfy"
    REDIS_URL: str = "redis://redis:6379/0"
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"

    JWT_SECRET: str = "dev_secret_change_me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    CORS_ORIGINS: str = "http://localhost:3000"

    EMAIL_BACKEND: str = "log"  # log | resend
    RESEND_API_URL: str = "https://api.resend.com"
    RESEND_API_KEY: str = ""
    RESEND_FROM_EMAIL: str = "noreply@shelfy.fr"
    EMAIL_FROM_NAME: str = "Shelfy"
    NOTIFICATION_TIMEOUT_SECONDS: float = 10.0
    NOTIFICATION_MAX_WORKERS: int = 4


settings = Settings()

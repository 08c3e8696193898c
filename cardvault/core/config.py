from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    PROJECT_NAME: str = "CardVault"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = ""  # Must be set via environment variable
    ALGORITHM: str = "HS256"

    # Relational store holding the collection ledger and snapshot history
    DATABASE_URL: str = "sqlite:///./cardvault.db"
    DATABASE_ECHO: bool = False

    # "production" switches logging to JSON output
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # Sentry error tracking (disabled when empty)
    SENTRY_DSN: str = ""
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    # Comma-separated list of origins allowed by CORS
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    model_config = SettingsConfigDict(case_sensitive=True, env_file=".env", extra="ignore")

    @property
    def allowed_origins(self) -> list[str]:
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]


settings = Settings()

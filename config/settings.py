from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEV_SECRETS = {"temp-access-secret", "temp-refresh-secret"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    APP_NAME: str = "FinanceFlow"
    ENV: str = "development"  # development | production | test
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # CORS: the browser client; dev also allows the alternate local port
    FRONTEND_URL: str = "http://localhost:5173"

    # Database: empty means the in-memory store (local dev / tests)
    DATABASE_URL: str = ""

    # Redis: empty means the in-process cache fallback
    REDIS_URL: str = ""

    # JWT: kind-specific secrets, MUST be overridden in production
    JWT_ACCESS_SECRET: str = "temp-access-secret"
    JWT_REFRESH_SECRET: str = "temp-refresh-secret"
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 15
    JWT_REFRESH_EXPIRE_DAYS: int = 7
    TOKEN_BLACKLIST_TTL_SECONDS: int = 7 * 24 * 60 * 60  # >= refresh token lifetime

    # MFA
    MFA_ISSUER: str = "FinanceFlow"
    MFA_SETUP_TTL_SECONDS: int = 600
    MFA_AMOUNT_THRESHOLD: str = "5000.00"

    # Cache TTLs
    CACHE_TTL_SECONDS: int = 300
    CATEGORY_CACHE_TTL_SECONDS: int = 3600

    # AI insights
    AI_MODEL_PROVIDER: str = "mock"
    INSIGHT_FRESHNESS_HOURS: int = 24

    @model_validator(mode="after")
    def _require_real_secrets_in_production(self) -> "Settings":
        if self.ENV == "production":
            weak = [
                name
                for name in ("JWT_ACCESS_SECRET", "JWT_REFRESH_SECRET")
                if getattr(self, name) in _DEV_SECRETS
            ]
            if weak:
                raise ValueError(f"Missing required secrets in production: {', '.join(weak)}")
        return self

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"

    @property
    def cors_origins(self) -> list[str]:
        if self.is_production:
            return [self.FRONTEND_URL]
        return [self.FRONTEND_URL, "http://localhost:3000"]


settings = Settings()

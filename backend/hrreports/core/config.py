from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # External workforce API (KYC roster, attendance, leave)
    ZENAPI_BASE_URL: str = "https://cafm.zenapi.co.in/api"
    ZENAPI_TIMEOUT_SEC: float = 15.0
    ZENAPI_RETRIES: int = 2
    ZENAPI_MAX_CONCURRENCY: int = 8

    SECRET_KEY: str = "change-me-in-production"
    ALGORITHM: str = "HS256"
    ALLOWED_ROLES: list[str] = ["Admin", "Manager", "Manager-Ops", "HR"]

    # Projects where only Sundays are week-offs (all Saturdays are working days)
    EXCEPTION_PROJECTS: list[str] = ["Exozen - Ops"]

    TIMEZONE: str = "Asia/Kolkata"

    FUZZY_MATCH_THRESHOLD: int = 80
    REPORT_PAGE_SIZE: int = 50

    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost:5173"]


settings = Settings()

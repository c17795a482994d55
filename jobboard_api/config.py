from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Safe defaults; override via environment or .env file
    APP_NAME: str = "Job Board API"
    APP_ENV: str = "dev"
    CORS_ALLOW_ORIGINS: str = "*"  # comma-separated
    LOG_LEVEL: str = "INFO"

    # SQL backend (used when BACKEND_URL is empty)
    DATABASE_URL: str = "sqlite:///./data/jobboard.db"

    # Hosted REST backend (PostgREST + GoTrue); leave empty to use DATABASE_URL
    BACKEND_URL: str = ""
    BACKEND_ANON_KEY: str = ""
    BACKEND_TIMEOUT_SECONDS: float = 10.0

    SESSION_TTL_HOURS: int = 24 * 7

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    @property
    def use_rest_backend(self) -> bool:
        return bool(self.BACKEND_URL.strip())


settings = Settings()

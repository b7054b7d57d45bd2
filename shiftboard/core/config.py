from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Auth
    SECRET_KEY: str = "dev-secret-change-me"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str = "sqlite:///./shiftboard.db"

    # Scheduling
    COPY_SKIP_PREVIEW_LIMIT: int = 50
    MAX_WEEKS_AHEAD: int = 8
    # advisory locks on PostgreSQL, the database write lock on SQLite
    SERIALIZE_SHIFT_WRITES: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Database (DATABASE_HOST, DATABASE_PORT, ...)
    database_host: str = "localhost"
    database_port: int = 5432
    database_user: str = "postgres"
    database_password: str = "pass123"
    database_name: str = "postgres"
    database_url: Optional[str] = None  # Overrides the individual parts

    # Create missing tables at startup. Dev only, use alembic otherwise.
    db_auto_create: bool = False

    # HTTP
    request_timeout_seconds: float = 3.0
    rate_limit_enabled: bool = True
    write_rate_limit: str = "120/minute"

    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def sqlalchemy_url(self) -> str:
        if self.database_url:
            return self.database_url
        return (
            f"postgresql+psycopg2://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )


settings = Settings()

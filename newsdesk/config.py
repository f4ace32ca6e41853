from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    # Application settings
    app_name: str = "Newsdesk"
    app_version: str = "1.0.0"
    app_url: str = "http://localhost:3000"
    debug: bool = False
    environment: str = "development"

    # Database settings
    database_url: str

    # Security settings
    secret_key: str

    # Sentinel roles: never updated or deleted through the role endpoints
    default_role_id: int = 1
    superuser_role_id: int = 2

    # Mail settings
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_user: str | None = None
    smtp_password: str | None = None
    smtp_from: str = "newsdesk@localhost"

    # Stored cover images and other binary assets
    media_root: str = "media"

    # Background promotion of approved content; 0 disables the job
    sweep_interval_seconds: int = 60

    # CORS settings
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:8000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


settings = Settings()

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 3000

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "fitscore"
    db_username: str = "fitscore"
    db_password: str = "secret"

    files_root: Path = Path("/app/files")
    blob_write_timeout_seconds: float = 5.0

    inference_provider: str = "openai"
    inference_api_key: str = ""
    inference_model_name: str = "gpt-4o-mini"
    inference_base_url: str = ""
    inference_temperature: float = 0.0
    inference_timeout_seconds: float = 60.0

    ledger_write_timeout_seconds: float = 5.0

    @property
    def debug(self) -> bool:
        return self.app_env == "dev"

"""Application settings."""

from pathlib import Path
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    host: str = "127.0.0.1"
    port: int = 8787
    debug: bool = False
    database_url: str = f"sqlite:///{Path.home() / '.snipvault' / 'snipvault.db'}"
    retention_days: int = 30
    default_limit: int = 50
    max_limit: int = 100
    max_categories: int = 20
    owner_header: str = "X-Owner-Id"
    api_base_url: str = "http://127.0.0.1:8787/api"

    model_config = {"env_prefix": "SNIPVAULT_"}


settings = Settings()

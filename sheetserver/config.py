from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    transport: str = "stdio"
    host: str = "127.0.0.1"
    port: int = 9000
    log_level: str = "INFO"
    google_project_id: str | None = None
    service_account_file: Path | None = None
    token_file: Path = Path("tokens.json")
    # Upper bound, in characters, for the JSON-serialized values of a read.
    max_response_size: int = 30000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # API
    API_KEY: Optional[str] = None
    API_URL: str = "https://api.journy.io"
    TIMEOUT_MS: int = 5000

    # Dispatch queue
    QUEUE_ENABLED: bool = False
    QUEUE_CONCURRENCY: int = 1

    # Ops
    LOG_LEVEL: str = "INFO"
    LOG_REQUESTS: bool = False

    SDK_VERSION: str = "0.1.0"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="JOURNY_")

    @property
    def USER_AGENT(self) -> str:  # type: ignore
        return f"python-sdk/{self.SDK_VERSION}"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REQUEST_LOGGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    log_level: str = "INFO"
    default_sink: Literal["stderr", "logging"] = "stderr"
    logger_name: str = "request_logger.http"
    body_encoding: str = "utf-8"
    timeout: float = 30.0
    follow_redirects: bool = True
    max_redirects: int = 10


settings = Settings()

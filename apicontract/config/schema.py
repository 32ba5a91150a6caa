"""Configuration schema using Pydantic."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Loguru sinks for the apicontract logger."""
    enabled: bool = False
    level: Literal["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    file: str = ""  # Rotating log file path; empty disables the file sink


class ClientConfig(BaseModel):
    """Defaults for the httpx resolver."""
    base_url: str = "http://127.0.0.1:8000"
    timeout_seconds: float = Field(default=10.0, gt=0)


class ServerConfig(BaseModel):
    """Where `apicontract serve` listens."""
    host: str = "127.0.0.1"
    port: int = Field(default=8000, ge=0, le=65535)


class TopicsConfig(BaseModel):
    """Notification topic behaviour."""
    isolate_listener_errors: bool = True  # False: re-raise the first listener error after delivery


class ApiContractConfig(BaseSettings):
    """Root configuration. Environment: APICONTRACT_<SECTION>__<FIELD>."""
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    topics: TopicsConfig = Field(default_factory=TopicsConfig)

    model_config = SettingsConfigDict(
        env_prefix="APICONTRACT_",
        env_nested_delimiter="__",
    )

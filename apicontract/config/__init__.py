"""Settings for apicontract hosts: JSON file, ``APICONTRACT_*`` env vars, defaults."""

from apicontract.config.access import clear_config_cache, get_config
from apicontract.config.loader import get_config_path, load_config, save_config
from apicontract.config.schema import (
    ApiContractConfig,
    ClientConfig,
    LoggingConfig,
    ServerConfig,
    TopicsConfig,
)

__all__ = [
    "ApiContractConfig",
    "ClientConfig",
    "LoggingConfig",
    "ServerConfig",
    "TopicsConfig",
    "clear_config_cache",
    "get_config",
    "get_config_path",
    "load_config",
    "save_config",
]

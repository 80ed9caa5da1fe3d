"""Sabre configuration."""

from .loader import (
    CONFIG_PATH_ENV,
    ConfigLoader,
    deep_merge,
    get_config_loader,
    load_config,
    resolve_env_vars,
)
from .models import (
    CacheConfig,
    EngineConfig,
    LoggingComponentsConfig,
    LoggingConfig,
    LoggingOptionsConfig,
    SabreConfig,
)

__all__ = [
    "ConfigLoader",
    "CONFIG_PATH_ENV",
    "deep_merge",
    "get_config_loader",
    "load_config",
    "resolve_env_vars",
    "SabreConfig",
    "EngineConfig",
    "CacheConfig",
    "LoggingConfig",
    "LoggingComponentsConfig",
    "LoggingOptionsConfig",
]

"""Configuration system for the codemode proxy."""

from .adaptation import expand_env_vars
from .manager import CONFIG_PATH_ENV, ConfigManager
from .models import BackendConfig, CodemodeConfig, ProxySettings

__all__ = [
    "BackendConfig",
    "CodemodeConfig",
    "ProxySettings",
    "ConfigManager",
    "CONFIG_PATH_ENV",
    "expand_env_vars",
]

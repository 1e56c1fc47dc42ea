"""Configuration manager."""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import ValidationError

from ..errors import ConfigError
from .models import BackendConfig, CodemodeConfig

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "CODEMODE_SERVERS"


class ConfigManager:
    def __init__(self, config_path: Optional[str] = None):
        if config_path is None:
            config_path = os.environ.get(CONFIG_PATH_ENV) or None
        self.config_path = Path(config_path) if config_path else None
        self.config: Optional[CodemodeConfig] = None
        self.invalid_servers: Dict[str, str] = {}

    def load_config(self) -> CodemodeConfig:
        """Load and validate configuration.

        YAML is a superset of JSON, so both file formats are accepted.
        """
        self.invalid_servers = {}
        if self.config_path is None:
            raise ConfigError(f"No configuration path given and {CONFIG_PATH_ENV} is not set")
        if not self.config_path.exists():
            raise ConfigError(f"Configuration file not found: {self.config_path}")

        try:
            with open(self.config_path, "r") as f:
                config_data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read {self.config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid configuration syntax: {e}") from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigError(
                f"Configuration root must be a mapping, got {type(config_data).__name__}"
            )

        servers = config_data.pop("servers", None)
        if servers is None:
            servers = {}
        if not isinstance(servers, dict):
            raise ConfigError(f"'servers' must be a mapping, got {type(servers).__name__}")

        try:
            config = CodemodeConfig(**config_data)
        except ValidationError as e:
            raise ConfigError(f"Configuration validation failed: {e}") from e

        config.servers = self._load_servers(servers)
        self.config = config
        return self.config

    def _load_servers(self, servers: Dict[Any, Any]) -> Dict[str, BackendConfig]:
        """Validate each server entry on its own; invalid entries are skipped."""
        loaded = {}

        for key, entry in servers.items():
            backend_id = str(key)
            try:
                backend = BackendConfig.model_validate(entry if entry is not None else {})
            except ValidationError as e:
                logger.warning(f"Server {backend_id} skipped: invalid configuration: {e}")
                self.invalid_servers[backend_id] = f"Invalid configuration: {e}"
                continue
            backend.identifier = backend_id
            loaded[backend_id] = backend

        return loaded

    def load_or_empty(self) -> CodemodeConfig:
        """Load configuration, degrading to an empty one on any config error."""
        try:
            return self.load_config()
        except ConfigError as e:
            logger.warning(f"{e}; starting with no backends")
            self.config = CodemodeConfig()
            return self.config

    def validate_config(self) -> List[str]:
        """Validate configuration and return any issues."""
        issues = []

        try:
            config = self.load_config()
        except ConfigError as e:
            return [str(e)]

        issues.extend(
            f"Server {backend_id}: skipped: {error}"
            for backend_id, error in self.invalid_servers.items()
        )
        if not config.servers and not self.invalid_servers:
            issues.append("No servers configured")

        for backend_id, backend in config.servers.items():
            issues.extend(
                f"Server {backend_id}: {issue}" for issue in self._check_backend(backend)
            )

        return issues

    def _check_backend(self, backend: BackendConfig) -> List[str]:
        """Check for settings that load but are ignored or contradictory."""
        issues = []

        if backend.url and backend.command:
            issues.append("both 'url' and 'command' set; 'command' is ignored")
        if backend.url and backend.env:
            issues.append("'env' has no effect on a url backend")
        if not backend.url and backend.headers:
            issues.append("'headers' have no effect on a command backend")
        if backend.allow is not None and backend.deny:
            issues.append("'allow' is set, so 'deny' is ignored")

        return issues

"""
standin Server Configuration

Settings for the embedded server, constructible in code or loaded from YAML:

    server:
      host: 127.0.0.1
      port: 0
      report_to_console: true
      verify_timeout: 2.5
"""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from ..errors import ConfigurationError

LOG_LEVELS = ('critical', 'error', 'warning', 'info', 'debug', 'trace')


@dataclass
class ServerConfig:
    """Configuration for mock server behavior."""

    # Network
    host: str = "127.0.0.1"
    port: int = 0  # 0 picks an ephemeral port
    ssl_keyfile: Optional[str] = None
    ssl_certfile: Optional[str] = None

    # Lifecycle
    auto_start: bool = True  # Start when expectations are configured
    startup_timeout: float = 5.0

    # Diagnostics
    report_to_console: bool = False  # Also print unmatched reports to stdout
    log_response_content: bool = False
    log_level: str = "warning"

    # Verification
    verify_timeout: float = 1.0
    poll_interval: float = 0.25

    def __post_init__(self):
        if self.log_level.lower() not in LOG_LEVELS:
            raise ConfigurationError(
                f"Unknown log level '{self.log_level}'",
                suggestion=f"use one of: {', '.join(LOG_LEVELS)}"
            )
        if not 0 <= self.port <= 65535:
            raise ConfigurationError(f"Port out of range: {self.port}")
        if bool(self.ssl_keyfile) != bool(self.ssl_certfile):
            raise ConfigurationError("ssl_keyfile and ssl_certfile must be configured together")
        if self.verify_timeout < 0 or self.poll_interval <= 0 or self.startup_timeout <= 0:
            raise ConfigurationError("Timeouts must be positive")

    @property
    def secure(self) -> bool:
        return bool(self.ssl_certfile)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'ServerConfig':
        """
        Create a config from a dictionary, optionally nested under a 'server' key.

        Raises:
            ConfigurationError: On unknown keys or invalid values
        """
        data = dict(data or {})
        if set(data) == {'server'}:
            data = dict(data['server'] or {})

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(
                f"Unknown server configuration keys: {', '.join(unknown)}",
                suggestion=f"valid keys are: {', '.join(sorted(known))}"
            )

        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid server configuration: {e}") from e

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> 'ServerConfig':
        """Load config from a YAML file."""
        try:
            with open(yaml_path, 'r') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {yaml_path}: {e}") from e

        if data is not None and not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {yaml_path}, got {type(data).__name__}")

        return cls.from_dict(data)

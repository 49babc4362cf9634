"""
Configuration management for the dead link monitor.
"""

import os
from typing import Dict, Any, Optional
from dataclasses import dataclass, field
from pathlib import Path
import json
import logging

from jsonschema import validate, ValidationError as SchemaValidationError

from dead_link_monitor.utils.errors import ConfigurationError
from dead_link_monitor.transport.http_client import DEFAULT_USER_AGENT


@dataclass
class PipelineConfig:
    """Fetch pipeline settings."""
    max_connections: int = 4
    request_timeout: float = 30.0
    user_agent: str = DEFAULT_USER_AGENT
    tick_interval: float = 0.01
    status_interval: float = 5.0


@dataclass
class ReportConfig:
    """Post-run reporting settings."""
    console_report: bool = False
    # Destination for the JSON export; "-" means stdout
    json_output: Optional[str] = None
    fail_on_broken: bool = False


@dataclass
class SystemConfig:
    """Main system configuration."""
    pipeline: PipelineConfig = field(default_factory=PipelineConfig)
    report: ReportConfig = field(default_factory=ReportConfig)
    log_level: str = "INFO"
    log_file: Optional[str] = None


# Configuration schema for validation
CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "pipeline": {
            "type": "object",
            "properties": {
                "max_connections": {"type": "integer", "minimum": 1, "maximum": 1000},
                "request_timeout": {"type": "number", "exclusiveMinimum": 0, "maximum": 3600},
                "user_agent": {"type": "string", "minLength": 1},
                "tick_interval": {"type": "number", "minimum": 0, "maximum": 10},
                "status_interval": {"type": "number", "minimum": 0.1, "maximum": 3600}
            },
            "additionalProperties": False
        },
        "report": {
            "type": "object",
            "properties": {
                "console_report": {"type": "boolean"},
                "json_output": {"type": ["string", "null"], "minLength": 1},
                "fail_on_broken": {"type": "boolean"}
            },
            "additionalProperties": False
        },
        "log_level": {
            "type": "string",
            "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        },
        "log_file": {"type": ["string", "null"]}
    },
    "additionalProperties": False
}

# Environment variable -> (section, key, type)
ENV_OVERRIDES = {
    "DEAD_LINK_MAX_CONNECTIONS": ("pipeline", "max_connections", int),
    "DEAD_LINK_REQUEST_TIMEOUT": ("pipeline", "request_timeout", float),
    "DEAD_LINK_USER_AGENT": ("pipeline", "user_agent", str),
    "DEAD_LINK_LOG_LEVEL": (None, "log_level", str),
    "DEAD_LINK_LOG_FILE": (None, "log_file", str),
}


class ConfigManager:
    """Configuration manager with schema validation and environment overrides."""

    def __init__(self, config_path: str = "dead_link_monitor.json"):
        self.config_path = Path(config_path)
        self._config: Optional[SystemConfig] = None

    def validate_config(self, config_data: Dict[str, Any]) -> None:
        """Validate configuration data against schema."""
        try:
            validate(instance=config_data, schema=CONFIG_SCHEMA)
        except SchemaValidationError as e:
            raise ConfigurationError(
                f"Configuration validation failed: {e.message}",
                {"path": list(e.absolute_path)}
            )

    def load_config(self) -> SystemConfig:
        """Load configuration from file, then apply environment overrides."""
        if self.config_path.exists():
            config_data = self._read_file()
            logging.info(f"Configuration loaded from {self.config_path}")
        else:
            config_data = {}

        self._apply_env_overrides(config_data)
        self.validate_config(config_data)
        self._config = self._dict_to_config(config_data)
        return self._config

    def _read_file(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                config_data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read configuration file {self.config_path}: {e}")
        if not isinstance(config_data, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")
        return config_data

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> None:
        for env_name, (section, key, cast) in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw == "":
                continue
            try:
                value = cast(raw)
            except ValueError:
                raise ConfigurationError(f"Invalid value for {env_name}: {raw!r}")
            if key == "log_level":
                value = value.upper()
            if section is None:
                config_data[key] = value
            else:
                config_data.setdefault(section, {})[key] = value

    def _dict_to_config(self, data: Dict[str, Any]) -> SystemConfig:
        """Convert dictionary to SystemConfig object."""
        config = SystemConfig()

        if "pipeline" in data:
            config.pipeline = PipelineConfig(**data["pipeline"])

        if "report" in data:
            config.report = ReportConfig(**data["report"])

        config.log_level = data.get("log_level", config.log_level)
        config.log_file = data.get("log_file", config.log_file)

        return config


"""
Sampler Configuration
Loads collector settings from YAML. The polling interval is fixed and is
not part of the configuration.
"""

import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from hwstats.core.errors import ConfigError

logger = logging.getLogger(__name__)

GPU_BACKENDS = ("auto", "rocm", "nvidia", "ioreg")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass
class SamplerConfig:
    """Settings for the default host telemetry source."""

    gpu_backend: str = "auto"
    gpu_device_id: int = 0
    cache_ttl_ms: int = 500
    query_timeout_s: float = 10.0
    read_thermal: bool = True
    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if self.gpu_backend not in GPU_BACKENDS:
            raise ConfigError(
                f"Unknown gpu_backend '{self.gpu_backend}', expected one of {GPU_BACKENDS}"
            )
        if self.gpu_device_id < 0:
            raise ConfigError(f"gpu_device_id must be >= 0, got {self.gpu_device_id}")
        if self.cache_ttl_ms < 0:
            raise ConfigError(f"cache_ttl_ms must be >= 0, got {self.cache_ttl_ms}")
        if self.query_timeout_s <= 0:
            raise ConfigError(f"query_timeout_s must be > 0, got {self.query_timeout_s}")
        if not isinstance(self.read_thermal, bool):
            raise ConfigError(f"read_thermal must be true or false, got {self.read_thermal!r}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level '{self.log_level}'")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SamplerConfig":
        section = data.get("sampler", data) or {}
        if not isinstance(section, dict):
            raise ConfigError("sampler section must be a mapping")

        unknown = set(section) - set(cls.__dataclass_fields__)
        if "interval_ms" in unknown:
            logger.warning("interval_ms is fixed and cannot be configured, ignoring")
            unknown.discard("interval_ms")
        if unknown:
            raise ConfigError(f"Unknown config keys: {sorted(unknown)}")

        kwargs = {k: v for k, v in section.items() if k != "interval_ms"}
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError(str(e)) from e

    @classmethod
    def from_yaml(cls, config_path: Optional[Union[str, Path]]) -> "SamplerConfig":
        """Load configuration from a YAML file, defaults if it is missing."""
        if config_path is None:
            return cls()

        path = Path(config_path)
        if not path.exists():
            logger.warning(f"Config not found: {config_path}, using defaults")
            return cls()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be a mapping: {config_path}")

        config = cls.from_dict(data)
        logger.info(f"Loaded sampler config from {config_path}")
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

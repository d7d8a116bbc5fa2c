"""Configuration model for perfscope sessions."""

import os
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .perf_logging import get_logger

logger = get_logger()

ENV_PREFIX = "PERFSCOPE_"

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
_LOG_FORMATS = {"text", "json"}
_SCORE_STRATEGIES = {"linear", "threshold"}


class PerfScopeConfig(BaseModel):
    """Session configuration with validation."""

    # Benchmarking
    default_iterations: int = Field(default=1000, ge=1)

    # Aggregation and scoring
    recent_window_size: int = Field(default=100, ge=1, le=100_000)
    score_strategy: str = Field(default="linear")

    # Memory probing
    enable_memory_probe: bool = Field(default=True)
    memory_window_size: int = Field(default=10, ge=2, le=1000)

    # Measurement pairing
    strict_measurements: bool = Field(default=False)
    reject_overlapping_starts: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="text")

    @field_validator("score_strategy")
    @classmethod
    def validate_score_strategy(cls, v: str) -> str:
        strategy = v.lower()
        if strategy not in _SCORE_STRATEGIES:
            raise ValueError(f"score_strategy must be one of {sorted(_SCORE_STRATEGIES)}")
        return strategy

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(_LOG_LEVELS)}")
        return level

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        fmt = v.lower()
        if fmt not in _LOG_FORMATS:
            raise ValueError(f"log_format must be one of {sorted(_LOG_FORMATS)}")
        return fmt

    @classmethod
    def from_env(cls, **overrides: Any) -> "PerfScopeConfig":
        """Create config from PERFSCOPE_* environment variables.

        Precedence (highest to lowest):
        1. Explicit overrides
        2. Environment variables
        3. Defaults
        """
        config_dict: dict[str, Any] = {}
        for name in cls.model_fields:
            value = os.environ.get(f"{ENV_PREFIX}{name.upper()}")
            if value is not None:
                config_dict[name] = value

        if config_dict:
            logger.debug(f"Applied {len(config_dict)} environment variables")

        config_dict.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**config_dict)


__all__ = ["ENV_PREFIX", "PerfScopeConfig"]

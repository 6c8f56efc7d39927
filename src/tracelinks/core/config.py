"""
Configuration schema and loading for tracelinks jobs.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class LoggingSettings(BaseModel):
    """Structured logging configuration.

    Applied once per worker process by LogInitializer.
    """

    model_config = {"frozen": True}

    json_output: bool = Field(default=False, description="Emit JSON lines instead of console output")
    level: str = Field(default="INFO", description="Root log level")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        normalized = v.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v!r}")
        return normalized


class JobSettings(BaseModel):
    """Dependencies job execution configuration.

    Example YAML:
        job:
          executor: process
          max_workers: 8
    """

    model_config = {"frozen": True}

    executor: Literal["thread", "process"] = Field(
        default="thread",
        description="Worker pool used to link trace groups in parallel",
    )
    max_workers: int = Field(
        default=4,
        gt=0,
        description="Maximum parallel workers",
    )
    max_logged_failures: int = Field(
        default=100,
        ge=0,
        description="Skipped rows listed individually in the job summary log",
    )


class TracelinksSettings(BaseModel):
    """Top-level tracelinks configuration."""

    model_config = {"frozen": True}

    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    job: JobSettings = Field(default_factory=JobSettings)


def load_settings(config_path: Path) -> TracelinksSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (TRACELINKS_*) - highest priority
    2. Config file (settings.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: TRACELINKS_JOB__MAX_WORKERS for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated TracelinksSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="TRACELINKS",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {
        k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys
    }

    return TracelinksSettings(**raw_config)


def _lower_keys(value: object) -> object:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value

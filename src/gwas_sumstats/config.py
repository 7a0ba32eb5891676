"""Configuration file and environment support for gwas-sumstats."""

import logging
import os
import tomllib
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from .client import DEFAULT_BASE_URL
from .downloader import DEFAULT_CHUNK_SIZE, DEFAULT_MAX_CONCURRENCY
from .errors import ConfigValidationError, MalformedURLError
from .urls import validate_base_url

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

ENV_PREFIX = "GWAS_SUMSTATS_"

ENV_VARS = {
    "base_url": f"{ENV_PREFIX}BASE_URL",
    "max_concurrency": f"{ENV_PREFIX}MAX_CONCURRENCY",
    "chunk_size": f"{ENV_PREFIX}CHUNK_SIZE",
    "log_level": f"{ENV_PREFIX}LOG_LEVEL",
}

INT_FIELDS = {"max_concurrency", "chunk_size"}


@dataclass
class Settings:
    """Runtime settings for API access and downloads."""

    base_url: str = DEFAULT_BASE_URL
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "INFO"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def validate_settings(config_dict: dict[str, Any]) -> None:
    """Validate configuration values.

    Raises:
        ConfigValidationError: If any configuration value is invalid.
    """
    for key in INT_FIELDS:
        if key not in config_dict:
            continue
        value = config_dict[key]
        if not isinstance(value, int) or isinstance(value, bool):
            raise ConfigValidationError(f"{key} must be an integer, got {type(value).__name__}")
        if value <= 0:
            raise ConfigValidationError(f"{key} must be positive, got {value}")

    if "log_level" in config_dict:
        log_level = config_dict["log_level"]
        if not isinstance(log_level, str):
            raise ConfigValidationError(
                f"log_level must be a string, got {type(log_level).__name__}"
            )
        if log_level.upper() not in VALID_LOG_LEVELS:
            raise ConfigValidationError(
                f"log_level must be one of {VALID_LOG_LEVELS}, got '{log_level}'"
            )

    if "base_url" in config_dict:
        base_url = config_dict["base_url"]
        if not isinstance(base_url, str):
            raise ConfigValidationError(
                f"base_url must be a string, got {type(base_url).__name__}"
            )
        try:
            validate_base_url(base_url)
        except MalformedURLError as e:
            raise ConfigValidationError(f"base_url is invalid: {e}") from e


def settings_from_env(environ: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect settings from ``GWAS_SUMSTATS_*`` environment variables.

    Raises:
        ConfigValidationError: If an integer setting is not a number.
    """
    environ = os.environ if environ is None else environ
    values: dict[str, Any] = {}

    for key, var in ENV_VARS.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        if key in INT_FIELDS:
            try:
                values[key] = int(raw)
            except ValueError:
                raise ConfigValidationError(f"{var} must be an integer, got '{raw}'") from None
        else:
            values[key] = raw

    return values


def load_settings(
    config_path: Path | None = None,
    overrides: dict[str, Any] | None = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Load settings from a TOML file, the environment and explicit overrides.

    Later sources win: file, then environment, then ``overrides``.

    Args:
        config_path: Optional TOML file with a ``[gwas_sumstats]`` table.
        overrides: Values that take precedence over everything else.
        environ: Environment mapping (defaults to ``os.environ``).

    Returns:
        Settings instance with loaded values.

    Raises:
        FileNotFoundError: If ``config_path`` is given and doesn't exist.
        ConfigValidationError: If any configuration value is invalid.
    """
    config_dict: dict[str, Any] = {}

    if config_path is not None:
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)
        config_dict.update(toml_data.get("gwas_sumstats", {}))
        logger.debug("Loaded settings from %s", config_path)

    config_dict.update(settings_from_env(environ))

    if overrides:
        config_dict.update({k: v for k, v in overrides.items() if v is not None})

    valid_fields = {f.name for f in fields(Settings)}
    unknown = sorted(set(config_dict) - valid_fields)
    if unknown:
        logger.warning("Ignoring unknown settings: %s", ", ".join(unknown))

    filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
    validate_settings(filtered)

    if "log_level" in filtered:
        filtered["log_level"] = filtered["log_level"].upper()

    return Settings(**filtered)

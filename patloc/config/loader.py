"""Configuration loader: YAML file merging plus environment overrides.

`load_config_from_files` only reads and deep-merges YAML files (base plus an
optional environment overlay). Environment variables and validation are
applied in `get_config()` so tests that inspect raw file merging see an
unmodified merge output.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..exceptions import ConfigurationError, ErrorCode
from .schemas import PipelineConfig


ENV_PREFIX = "PATLOC"


def _deep_merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _convert_env_value(value: str) -> Any:
    """Convert environment variable string to appropriate type."""
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("null", "none"):
        return None

    try:
        return int(value)
    except ValueError:
        pass

    try:
        return float(value)
    except ValueError:
        pass

    # Comma-separated lists (e.g. PATLOC__SCOPE__JURISDICTIONS=DE,FR)
    if "," in value:
        return [part.strip() for part in value.split(",") if part.strip()]

    return value


def _apply_env_overrides(config_dict: dict[str, Any], prefix: str = ENV_PREFIX) -> dict[str, Any]:
    """Apply environment variable overrides to configuration dictionary.

    Example:
      PATLOC__DUCKDB__DATABASE_PATH=/data/patstat.duckdb
        -> config_dict["duckdb"]["database_path"] = "/data/patstat.duckdb"
    """
    result = config_dict.copy()

    for env_key, env_value in os.environ.items():
        if not env_key.startswith(f"{prefix}__"):
            continue

        config_path = env_key[len(f"{prefix}__") :].lower().split("__")

        current = result
        for path_part in config_path[:-1]:
            if path_part not in current or not isinstance(current[path_part], dict):
                current[path_part] = {}
            else:
                current[path_part] = dict(current[path_part])
            current = current[path_part]

        current[config_path[-1]] = _convert_env_value(env_value)

    return result


def default_config_dir() -> Path:
    """Return ``./config`` when present, else the directory shipped with the repository."""
    local = Path("config")
    if (local / "base.yaml").exists():
        return local
    return Path(__file__).resolve().parents[2] / "config"


def load_config_from_files(
    environment: str | None = None, config_dir: Path | None = None
) -> dict[str, Any]:
    """Load configuration from YAML files with environment-specific overrides."""
    if config_dir is None:
        config_dir = default_config_dir()

    base_file = Path(config_dir) / "base.yaml"
    if not base_file.exists():
        raise ConfigurationError(
            f"Base configuration file not found: {base_file}",
            operation="load_config_from_files",
            status_code=ErrorCode.CONFIG_LOAD_FAILED,
            details={"file_path": str(base_file), "config_dir": str(config_dir)},
        )

    try:
        with open(base_file, encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Failed to parse base config: {e}",
            operation="load_config_from_files",
            status_code=ErrorCode.CONFIG_LOAD_FAILED,
            details={"file_path": str(base_file)},
            cause=e,
        ) from e

    if environment:
        env_file = Path(config_dir) / f"{environment}.yaml"
        if env_file.exists():
            try:
                with open(env_file, encoding="utf-8") as f:
                    env_config = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Failed to parse {environment} config: {e}",
                    operation="load_config_from_files",
                    status_code=ErrorCode.CONFIG_LOAD_FAILED,
                    details={"file_path": str(env_file), "environment": environment},
                    cause=e,
                ) from e
            config = _deep_merge_dicts(config, env_config)

    return config


@lru_cache(maxsize=1)
def get_config(
    environment: str | None = None,
    config_dir: Path | None = None,
    apply_env_overrides_flag: bool = True,
) -> PipelineConfig:
    """Get validated configuration with caching.

    - Load merged file config via `load_config_from_files`
    - Apply environment variable overrides (if requested)
    - Validate and return a PipelineConfig instance
    """
    if environment is None:
        environment = os.getenv(f"{ENV_PREFIX}__PIPELINE__ENVIRONMENT", "development")

    config_dict = load_config_from_files(environment=environment, config_dir=config_dir)
    config_dict.setdefault("pipeline", {})
    config_dict["pipeline"]["environment"] = environment

    if apply_env_overrides_flag:
        config_dict = _apply_env_overrides(config_dict)

    try:
        return PipelineConfig(**config_dict)
    except ValidationError as e:
        raise ConfigurationError(
            f"Configuration validation failed: {e}",
            operation="get_config",
            details={"environment": environment, "errors": e.error_count()},
            cause=e,
        ) from e


def reload_config() -> None:
    """Clear configuration cache to force reload on next access."""
    get_config.cache_clear()

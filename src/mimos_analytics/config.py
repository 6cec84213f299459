"""Client configuration for mimos-analytics.

Configuration is immutable once built. It can be constructed directly or
loaded from a YAML file with environment overrides.

Example mimos-analytics.yaml:

    base_url: https://analytics.example.com
    project_id: my-project
    api_key: sk-...          # backend client only
    timeout_ms: 5000
    disabled: false

Environment overrides (applied on top of the YAML file):

    MIMOS_ANALYTICS_BASE_URL, MIMOS_ANALYTICS_PROJECT_ID, MIMOS_ANALYTICS_API_KEY,
    MIMOS_ANALYTICS_TIMEOUT_MS, MIMOS_ANALYTICS_DISABLED

DO_NOT_TRACK=1 or MIMOS_ANALYTICS_DISABLED=1 forces ``disabled=True``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, TypeVar

import yaml
from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, ValidationError

__all__ = [
    "BACKEND_METRICS_PATH",
    "DEFAULT_TIMEOUT_MS",
    "FRONTEND_METRICS_PATH",
    "AnalyticsConfig",
    "FrontendConfig",
    "is_tracking_allowed",
    "load_config",
    "metrics_url",
]

BACKEND_METRICS_PATH = "/v1/backend-metrics/write/"
FRONTEND_METRICS_PATH = "/v1/frontend-metrics/write/"

DEFAULT_TIMEOUT_MS = 5000

CONFIG_ENV_VAR = "MIMOS_ANALYTICS_CONFIG"
DEFAULT_CONFIG_FILENAME = "mimos-analytics.yaml"
ENV_PREFIX = "MIMOS_ANALYTICS_"

_TRUTHY = {"1", "true", "yes", "on"}


class FrontendConfig(BaseModel):
    """Configuration for the frontend (UI) analytics client."""

    model_config = ConfigDict(frozen=True)

    base_url: str = Field(
        ..., description="Base URL of the analytics service (e.g., http://localhost:8080)"
    )
    project_id: str = Field(..., description="Anonymous project identifier")
    timeout_ms: int = Field(
        default=DEFAULT_TIMEOUT_MS,
        ge=1,
        description="Per-request timeout in milliseconds",
    )
    disabled: bool = Field(
        default=False,
        description="Skip all network calls (useful for development)",
    )


class AnalyticsConfig(FrontendConfig):
    """Configuration for the backend (tool call) analytics client."""

    api_key: str = Field(..., description="API key sent in the api-key header")


def metrics_url(base_url: str, path: str) -> str:
    """Build an endpoint URL from a base URL and a fixed metrics path.

    A single trailing slash on ``base_url`` is dropped so the result has
    exactly one slash between base and path.

    Args:
        base_url: Service base URL, with or without one trailing slash
        path: Metrics path starting with "/"

    Returns:
        Full endpoint URL
    """
    base = base_url[:-1] if base_url.endswith("/") else base_url
    return f"{base}{path}"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def is_tracking_allowed() -> bool:
    """Check the environment opt-outs.

    Tracking is not allowed if:
    - DO_NOT_TRACK=1 environment variable is set (industry standard)
    - MIMOS_ANALYTICS_DISABLED is set to a truthy value

    Returns:
        True if no opt-out is present
    """
    if os.getenv("DO_NOT_TRACK") == "1":
        return False
    return not _env_flag(f"{ENV_PREFIX}DISABLED")


def _resolve_path(config_path: Path | str | None) -> tuple[Path, bool]:
    """Return the config path and whether it was explicitly requested."""
    if config_path is not None:
        return Path(config_path), True
    env_config = os.getenv(CONFIG_ENV_VAR)
    if env_config:
        return Path(env_config), True
    return Path(DEFAULT_CONFIG_FILENAME), False


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open() as f:
            raw_data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e
    except OSError as e:
        raise ValueError(f"Error reading {path}: {e}") from e

    if raw_data is None:
        return {}
    if not isinstance(raw_data, dict):
        raise ValueError(
            f"Config file {path} must be a YAML mapping, not {type(raw_data).__name__}"
        )
    return raw_data


def _env_overrides(model_class: type[BaseModel]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field_name in model_class.model_fields:
        value = os.getenv(f"{ENV_PREFIX}{field_name.upper()}")
        if value is not None and value != "":
            overrides[field_name] = value
    return overrides


T = TypeVar("T", bound=FrontendConfig)


def load_config(model_class: type[T], config_path: Path | str | None = None) -> T:
    """Load and validate client configuration.

    Args:
        model_class: AnalyticsConfig or FrontendConfig
        config_path: Explicit path to a YAML config file

    Returns:
        Validated, frozen config instance

    Raises:
        FileNotFoundError: If an explicitly requested config file doesn't exist
        ValueError: If YAML is invalid or validation fails
    """
    path, explicit = _resolve_path(config_path)

    raw_data: dict[str, Any] = {}
    source = "environment"
    if path.exists():
        logger.debug(f"Loading analytics config from {path}")
        raw_data = _read_yaml(path)
        source = str(path)
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")

    raw_data.update(_env_overrides(model_class))
    if not is_tracking_allowed():
        logger.debug("Analytics disabled by environment")
        raw_data["disabled"] = True

    try:
        return model_class.model_validate(raw_data)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {source}: {e}") from e

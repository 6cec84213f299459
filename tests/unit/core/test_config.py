"""Unit tests for analytics configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from mimos_analytics.config import (
    BACKEND_METRICS_PATH,
    FRONTEND_METRICS_PATH,
    AnalyticsConfig,
    FrontendConfig,
    is_tracking_allowed,
    load_config,
    metrics_url,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the developer's environment and working directory."""
    for name in (
        "DO_NOT_TRACK",
        "MIMOS_ANALYTICS_CONFIG",
        "MIMOS_ANALYTICS_BASE_URL",
        "MIMOS_ANALYTICS_PROJECT_ID",
        "MIMOS_ANALYTICS_API_KEY",
        "MIMOS_ANALYTICS_TIMEOUT_MS",
        "MIMOS_ANALYTICS_DISABLED",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


def _write(path: Path, data: dict) -> Path:
    path.write_text(yaml.dump(data))
    return path


@pytest.mark.unit
@pytest.mark.core
class TestMetricsUrl:
    """Tests for endpoint URL derivation."""

    def test_without_trailing_slash(self) -> None:
        url = metrics_url("http://localhost:8080", BACKEND_METRICS_PATH)
        assert url == "http://localhost:8080/v1/backend-metrics/write/"

    def test_with_trailing_slash(self) -> None:
        url = metrics_url("http://localhost:8080/", FRONTEND_METRICS_PATH)
        assert url == "http://localhost:8080/v1/frontend-metrics/write/"

    def test_only_one_trailing_slash_stripped(self) -> None:
        url = metrics_url("http://localhost:8080//", BACKEND_METRICS_PATH)
        assert url == "http://localhost:8080//v1/backend-metrics/write/"


@pytest.mark.unit
@pytest.mark.core
class TestConfigModels:
    """Tests for config defaults and immutability."""

    def test_backend_defaults(self) -> None:
        config = AnalyticsConfig(base_url="http://x", project_id="p", api_key="k")
        assert config.timeout_ms == 5000
        assert config.disabled is False

    def test_frontend_has_no_api_key(self) -> None:
        config = FrontendConfig(base_url="http://x", project_id="p")
        assert not hasattr(config, "api_key")

    def test_backend_requires_api_key(self) -> None:
        with pytest.raises(ValidationError):
            AnalyticsConfig(base_url="http://x", project_id="p")

    def test_frozen(self) -> None:
        config = FrontendConfig(base_url="http://x", project_id="p")
        with pytest.raises(ValidationError):
            config.disabled = True  # type: ignore[misc]

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            FrontendConfig(base_url="http://x", project_id="p", timeout_ms=0)

    def test_direct_construction_ignores_environment(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DO_NOT_TRACK", "1")
        config = FrontendConfig(base_url="http://x", project_id="p")
        assert config.disabled is False


@pytest.mark.unit
@pytest.mark.core
class TestLoadConfig:
    """Tests for YAML and environment loading."""

    def test_load_from_yaml(self, tmp_path: Path) -> None:
        path = _write(
            tmp_path / "analytics.yaml",
            {
                "base_url": "https://analytics.example.com/",
                "project_id": "proj",
                "api_key": "secret",
                "timeout_ms": 1500,
            },
        )

        config = load_config(AnalyticsConfig, path)

        assert config.base_url == "https://analytics.example.com/"
        assert config.project_id == "proj"
        assert config.api_key == "secret"
        assert config.timeout_ms == 1500
        assert config.disabled is False

    def test_default_file_in_cwd(self, tmp_path: Path) -> None:
        _write(tmp_path / "mimos-analytics.yaml", {"base_url": "http://x", "project_id": "p"})

        config = load_config(FrontendConfig)

        assert config.project_id == "p"

    def test_config_path_from_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path / "other.yaml", {"base_url": "http://x", "project_id": "env-file"})
        monkeypatch.setenv("MIMOS_ANALYTICS_CONFIG", str(path))

        config = load_config(FrontendConfig)

        assert config.project_id == "env-file"

    def test_environment_only(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MIMOS_ANALYTICS_BASE_URL", "http://env")
        monkeypatch.setenv("MIMOS_ANALYTICS_PROJECT_ID", "env-proj")
        monkeypatch.setenv("MIMOS_ANALYTICS_API_KEY", "env-key")
        monkeypatch.setenv("MIMOS_ANALYTICS_TIMEOUT_MS", "250")

        config = load_config(AnalyticsConfig)

        assert config.base_url == "http://env"
        assert config.api_key == "env-key"
        assert config.timeout_ms == 250

    def test_environment_overrides_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write(tmp_path / "a.yaml", {"base_url": "http://file", "project_id": "p"})
        monkeypatch.setenv("MIMOS_ANALYTICS_BASE_URL", "http://env")

        config = load_config(FrontendConfig, path)

        assert config.base_url == "http://env"

    def test_do_not_track_forces_disabled(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        path = _write(
            tmp_path / "a.yaml", {"base_url": "http://x", "project_id": "p", "disabled": False}
        )
        monkeypatch.setenv("DO_NOT_TRACK", "1")

        assert is_tracking_allowed() is False
        assert load_config(FrontendConfig, path).disabled is True

    def test_disabled_env_flag(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = _write(tmp_path / "a.yaml", {"base_url": "http://x", "project_id": "p"})
        monkeypatch.setenv("MIMOS_ANALYTICS_DISABLED", "true")

        assert load_config(FrontendConfig, path).disabled is True

    def test_tracking_allowed_by_default(self) -> None:
        assert is_tracking_allowed() is True

    def test_missing_explicit_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(FrontendConfig, tmp_path / "missing.yaml")

    def test_invalid_yaml_raises_value_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("base_url: [unclosed")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_config(FrontendConfig, path)

    def test_non_mapping_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="must be a YAML mapping"):
            load_config(FrontendConfig, path)

    def test_missing_required_field_raises(self, tmp_path: Path) -> None:
        path = _write(tmp_path / "a.yaml", {"base_url": "http://x", "project_id": "p"})

        with pytest.raises(ValueError, match="Invalid configuration"):
            load_config(AnalyticsConfig, path)

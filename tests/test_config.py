"""Tests for configuration loading and validation."""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from labelscan.utils.config import (
    APIConfig,
    DEFAULT_CONFIG_PATH,
    AppConfig,
    ExtractionConfig,
    ValidationConfig,
    load_config,
)


class TestExtractionConfig:
    """Tests for ExtractionConfig defaults and overrides."""

    def test_defaults(self) -> None:
        cfg = ExtractionConfig()
        assert cfg.fallback_enabled is True
        assert cfg.loose_item_pattern is True
        assert cfg.trace_matches is False

    def test_override(self) -> None:
        cfg = ExtractionConfig(loose_item_pattern=False)
        assert cfg.loose_item_pattern is False
        assert cfg.fallback_enabled is True


class TestValidationConfig:
    """Tests for ValidationConfig defaults."""

    def test_defaults(self) -> None:
        cfg = ValidationConfig()
        assert cfg.rules_path == "configs/validation_rules.yaml"
        assert cfg.profile == "receiving"


class TestAPIConfig:
    """Tests for APIConfig defaults and type checks."""

    def test_defaults(self) -> None:
        cfg = APIConfig()
        assert cfg.host == "0.0.0.0"
        assert cfg.port == 8000

    def test_invalid_port_rejected(self) -> None:
        with pytest.raises(ValidationError):
            APIConfig(port="not-a-port")


class TestAppConfig:
    """Tests for the top-level AppConfig."""

    def test_defaults(self) -> None:
        cfg = AppConfig()
        assert isinstance(cfg.extraction, ExtractionConfig)
        assert isinstance(cfg.validation, ValidationConfig)
        assert isinstance(cfg.api, APIConfig)
        assert cfg.log_level == "INFO"

    def test_nested_override(self) -> None:
        cfg = AppConfig(
            extraction=ExtractionConfig(fallback_enabled=False),
            log_level="DEBUG",
        )
        assert cfg.extraction.fallback_enabled is False
        assert cfg.log_level == "DEBUG"


class TestLoadConfig:
    """Tests for the load_config function."""

    def test_load_project_config(self, config_dir: Path) -> None:
        cfg = load_config(config_dir / "config.yaml")
        assert isinstance(cfg, AppConfig)
        assert cfg.extraction.loose_item_pattern is True
        assert cfg.validation.profile == "receiving"

    def test_load_missing_file_returns_defaults(self) -> None:
        cfg = load_config(Path("/nonexistent/path/config.yaml"))
        assert isinstance(cfg, AppConfig)
        assert cfg.api.port == 8000

    def test_load_custom_yaml(self, tmp_path: Path) -> None:
        config_data = {
            "extraction": {"fallback_enabled": False, "trace_matches": True},
            "api": {"port": 9001},
            "log_level": "DEBUG",
        }
        config_file = tmp_path / "config.yaml"
        with open(config_file, "w") as f:
            yaml.dump(config_data, f)

        cfg = load_config(config_file)
        assert cfg.extraction.fallback_enabled is False
        assert cfg.extraction.trace_matches is True
        assert cfg.api.port == 9001
        assert cfg.log_level == "DEBUG"

    def test_load_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        cfg = load_config(config_file)
        assert isinstance(cfg, AppConfig)

    def test_load_invalid_value_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("extraction:\n  fallback_enabled: [1, 2]\n")
        with pytest.raises(ValidationError):
            load_config(config_file)

    def test_load_none_defaults_to_standard_path(self) -> None:
        cfg = load_config()
        assert isinstance(cfg, AppConfig)

    def test_default_path_points_at_project_config(self, project_root: Path) -> None:
        assert (project_root / DEFAULT_CONFIG_PATH).exists()

"""Settings for the label scan CLI and API.

Controls the extraction passes (joined-text fallback, loose ``item:``
matching, match tracing), which review profile applies, and where the
HTTP service listens. Values come from ``configs/config.yaml``.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class ExtractionConfig(BaseModel):
    """Configuration for label field extraction."""

    fallback_enabled: bool = True
    loose_item_pattern: bool = True
    trace_matches: bool = False


class ValidationConfig(BaseModel):
    """Configuration for the review rules engine."""

    rules_path: str = "configs/validation_rules.yaml"
    profile: str = "receiving"


class APIConfig(BaseModel):
    """Configuration for the HTTP service."""

    host: str = "0.0.0.0"
    port: int = 8000


class AppConfig(BaseModel):
    """Top-level application configuration."""

    extraction: ExtractionConfig = Field(default_factory=ExtractionConfig)
    validation: ValidationConfig = Field(default_factory=ValidationConfig)
    api: APIConfig = Field(default_factory=APIConfig)
    log_level: str = "INFO"


DEFAULT_CONFIG_PATH = Path("configs/config.yaml")


def load_config(path: Path | None = None) -> AppConfig:
    """Read the label scan settings used by the CLI and API.

    A missing file is not an error: every section has defaults that
    reproduce the standard extraction behaviour (fallback pass on,
    loose ``item:`` pattern on, no match tracing).

    Args:
        path: YAML file to read. Defaults to ``configs/config.yaml``
            relative to the working directory.

    Returns:
        Validated application configuration.

    Raises:
        pydantic.ValidationError: If a value has the wrong type.
    """
    path = path or DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.info("No config file at %s, using default extraction settings", path)
        return AppConfig()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}
    config = AppConfig(**raw)
    logger.info(
        "Loaded %s (fallback=%s, loose_item_pattern=%s)",
        path,
        config.extraction.fallback_enabled,
        config.extraction.loose_item_pattern,
    )
    return config

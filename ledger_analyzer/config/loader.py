from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import AnalyzerConfig
from .vocabulary import build_classifier_vocabulary, build_keyword_vocabulary

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/ledger.yml``)
- Validate against the bundled JSON schema
- Apply defaults and freeze keyword vocabularies into AnalyzerConfig
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/ledger.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (missing required keys, wrong types,
            unknown keys).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_dict(data: dict[str, Any]) -> AnalyzerConfig:
    """Build an AnalyzerConfig from already-parsed config data (validated first)."""
    _validate_config_schema(data)
    return AnalyzerConfig(
        source_directory=data["source_directory"],
        keywords=build_keyword_vocabulary(data.get("keywords")),
        classifier=build_classifier_vocabulary(data.get("classifier")),
        header_scan_rows=data.get("header_scan_rows", 20),
        lookahead_rows=data.get("lookahead_rows", 5),
        role_sample_rows=data.get("role_sample_rows"),
        mask_account_numbers=data.get("mask_account_numbers", True),
        keep_na_strings=tuple(data.get("keep_na_strings", ())),
    )


def default_config(source_directory: str = ".") -> AnalyzerConfig:
    """Config with every vocabulary at its default, for library use without YAML."""
    return config_from_dict({"source_directory": source_directory})


def load_config(path: Path) -> AnalyzerConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    return config_from_dict(data)

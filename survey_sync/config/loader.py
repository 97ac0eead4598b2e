from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    CollectionMapping,
    DatabaseConfig,
    DataverseConfig,
    UploadConfig,
)

"""Config loader for the survey response uploader.

Responsibilities:
- Load YAML config (default config/upload.yml)
- Validate against the packaged JSON schema (config_schema.json)
- Apply defaults for every optional key
"""

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/upload.yml")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or not valid JSON, or the
            config data fails validation (unknown keys, wrong types, bad enum).
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


def config_from_dict(data: dict[str, Any]) -> UploadConfig:
    """Build an UploadConfig from already-parsed mapping data."""
    _validate_config_schema(data)

    defaults = CollectionMapping()
    alternate = data.get("alternate_collection", defaults.alternate_collection)
    mapping = CollectionMapping(
        primary_collection=data.get("primary_collection", defaults.primary_collection),
        alternate_collection=alternate or None,  # "" disables the fallback
        key_field=data.get("key_field", defaults.key_field),
        id_field=data.get("id_field", defaults.id_field),
        response_field=data.get("response_field", defaults.response_field),
        notes_field=data.get("notes_field", defaults.notes_field),
    )

    dv_raw = data.get("dataverse", {})
    dataverse = DataverseConfig(
        base_url=dv_raw.get("base_url"),
        token=dv_raw.get("token"),
        timeout_seconds=float(dv_raw.get("timeout_seconds", 30.0)),
    )

    db_raw = data.get("database", {})
    database = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )

    return UploadConfig(
        backend=data.get("backend", "dataverse"),
        mapping=mapping,
        dataverse=dataverse,
        database=database,
        sheet_name=data.get("sheet_name"),
    )


def load_config(path: Path) -> UploadConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    return config_from_dict(data)

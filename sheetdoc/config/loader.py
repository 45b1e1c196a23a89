from __future__ import annotations

import json
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader.

Responsibilities:
- Load YAML ``config/app.yml``
- Validate against the packaged JSON schema (``app_schema.json``)
- Apply defaults for missing keys
- Let TEMPLATE_DIR / OUTPUT_DIR / UPLOAD_DIR from the environment win over the file
"""

__all__ = [
    "SCHEMA_PATH",
    "DEFAULT_TEMPLATE_DIR",
    "ConfigError",
    "DatabaseConfig",
    "AppConfig",
    "default_config",
    "load_config",
    "apply_env_overrides",
]

SCHEMA_PATH = Path(__file__).parent / "app_schema.json"
# sheetdoc/config/loader.py -> sheetdoc/templates
DEFAULT_TEMPLATE_DIR = Path(__file__).parent.parent / "templates"

DEFAULT_OUTPUT_DIR = "output"
DEFAULT_UPLOAD_DIR = "uploads"
DEFAULT_URL_PREFIX = "/output"
DEFAULT_MAX_ROWS = 1000
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024
DEFAULT_FILE_MAX_AGE_HOURS = 48.0


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DatabaseConfig:
    """Fallback connection settings; environment variables take precedence."""
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class AppConfig:
    template_dir: Path
    output_dir: Path
    upload_dir: Path
    public_url_prefix: str = DEFAULT_URL_PREFIX
    max_rows: int = DEFAULT_MAX_ROWS
    max_file_size: int = DEFAULT_MAX_FILE_SIZE  # bytes
    file_max_age_hours: float = DEFAULT_FILE_MAX_AGE_HOURS
    database: DatabaseConfig = DatabaseConfig()


def default_config() -> AppConfig:
    """Configuration used when no config file is present."""
    return AppConfig(
        template_dir=DEFAULT_TEMPLATE_DIR,
        output_dir=Path(DEFAULT_OUTPUT_DIR),
        upload_dir=Path(DEFAULT_UPLOAD_DIR),
    )


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or not valid JSON, or the data violates it
            (unknown keys, wrong types, out-of-range limits)
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


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return AppConfig(
        template_dir=Path(data.get("template_dir") or DEFAULT_TEMPLATE_DIR),
        output_dir=Path(data.get("output_dir", DEFAULT_OUTPUT_DIR)),
        upload_dir=Path(data.get("upload_dir", DEFAULT_UPLOAD_DIR)),
        public_url_prefix=data.get("public_url_prefix", DEFAULT_URL_PREFIX),
        max_rows=data.get("max_rows", DEFAULT_MAX_ROWS),
        max_file_size=data.get("max_file_size", DEFAULT_MAX_FILE_SIZE),
        file_max_age_hours=float(data.get("file_max_age_hours", DEFAULT_FILE_MAX_AGE_HOURS)),
        database=db,
    )


def apply_env_overrides(cfg: AppConfig) -> AppConfig:
    """Directory settings from TEMPLATE_DIR / OUTPUT_DIR / UPLOAD_DIR win over the file."""
    overrides: dict[str, Path] = {}
    for env_name, field_name in (
        ("TEMPLATE_DIR", "template_dir"),
        ("OUTPUT_DIR", "output_dir"),
        ("UPLOAD_DIR", "upload_dir"),
    ):
        value = os.getenv(env_name)
        if value:
            overrides[field_name] = Path(value)
    return replace(cfg, **overrides) if overrides else cfg

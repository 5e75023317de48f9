"""Lineage Desk configuration — reads from lineagedesk.toml, env vars, and CLI args."""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, Any
from pydantic_settings import BaseSettings
from pydantic import Field

# Handle tomli import for Python < 3.11 compatibility
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger("lineagedesk.config")

CONFIG_FILENAME = "lineagedesk.toml"

# toml section -> settings field
_TOML_FIELDS = {
    "feishu": {
        "base_url": "feishu_base_url",
        "app_id": "app_id",
        "app_secret": "app_secret",
        "spreadsheet_token": "spreadsheet_token",
        "timeout": "request_timeout",
        "token_refresh_margin": "token_refresh_margin",
    },
    "sheets": {
        "config": "config_sheet",
        "models": "models_sheet",
        "lineage": "lineage_sheet",
    },
    "schema": {
        "active_status": "active_status",
        "layer_kind": "layer_kind",
        "subject_kind": "subject_kind",
        "default_creator": "default_creator",
    },
}


class LineageDeskSettings(BaseSettings):
    """Daemon settings."""

    # Server
    host: str = "0.0.0.0"
    port: int = 8500
    log_level: str = "info"

    # Auth for the daemon's own API
    api_key: str = Field(default="lineagedesk_dev_key", alias="LINEAGEDESK_API_KEY")

    # Feishu open platform app
    feishu_base_url: str = "https://open.feishu.cn/open-apis"
    app_id: str = Field(default="", alias="LINEAGEDESK_APP_ID")
    app_secret: str = Field(default="", alias="LINEAGEDESK_APP_SECRET")
    request_timeout: int = 30
    # Seconds shaved off the provider's token lifetime before refreshing
    token_refresh_margin: int = 300

    # Spreadsheet and its worksheets
    spreadsheet_token: str = Field(default="", alias="LINEAGEDESK_SPREADSHEET_TOKEN")
    config_sheet: str = ""
    models_sheet: str = ""
    lineage_sheet: str = ""

    # Vocabulary used inside the sheets
    active_status: str = "有效"
    layer_kind: str = "层级"
    subject_kind: str = "主题域"
    default_creator: str = "system"

    model_config = {"env_prefix": "LINEAGEDESK_", "env_file": ".env", "populate_by_name": True}


class ClientSettings(BaseSettings):
    """CLI client settings."""

    host: str = Field(default="http://localhost:8500", alias="LINEAGEDESK_HOST")
    api_key: str = Field(default="lineagedesk_dev_key", alias="LINEAGEDESK_API_KEY")

    model_config = {"env_prefix": "LINEAGEDESK_"}


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}


def _load_toml_config() -> Dict[str, Any]:
    """Load configuration from lineagedesk.toml files.

    Searches for lineagedesk.toml in:
    1. LINEAGEDESK_HOME (~/.lineagedesk/lineagedesk.toml by default)
    2. Current directory (./lineagedesk.toml)

    Returns:
        Combined configuration dict from found files, section by section
    """
    config: Dict[str, Dict[str, Any]] = {}

    home = Path(os.environ.get("LINEAGEDESK_HOME", "~/.lineagedesk")).expanduser()
    for path in (home / CONFIG_FILENAME, Path(CONFIG_FILENAME)):
        if not path.exists():
            continue
        # Later files win per key, not per section
        for section, values in _read_toml(path).items():
            if isinstance(values, dict):
                config.setdefault(section, {}).update(values)

    return config


def _toml_overrides(toml_config: Dict[str, Any]) -> Dict[str, Any]:
    overrides = {}
    for section, fields in _TOML_FIELDS.items():
        values = toml_config.get(section, {})
        for key, field_name in fields.items():
            if key in values:
                overrides[field_name] = values[key]
    return overrides


def get_settings() -> LineageDeskSettings:
    settings = LineageDeskSettings()

    # Env vars beat the toml file; only fill what the environment left unset
    for field_name, value in _toml_overrides(_load_toml_config()).items():
        if field_name not in settings.model_fields_set:
            setattr(settings, field_name, value)

    return settings


def get_client_settings() -> ClientSettings:
    return ClientSettings()

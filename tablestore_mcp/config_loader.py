"""Shared helpers for loading server configuration."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_PRIORITY_FIELDS",
    "Settings",
    "load_config",
    "load_dotenv_if_available",
    "load_settings",
    "select_value",
]

CONFIG_PATH_ENV = "TABLESTORE_MCP_CONFIG"

DEFAULT_API_URL = "https://api.airtable.com"
DEFAULT_WEB_URL = "https://airtable.com"
DEFAULT_TOOLSET = "full"
DEFAULT_SEARCH_MAX_TOTAL = 100
DEFAULT_SEARCH_PER_TABLE_LIMIT = 10
DEFAULT_HTTP_TIMEOUT = 30.0

# Field names that usually carry a human-readable summary of a row.
DEFAULT_PRIORITY_FIELDS: Tuple[str, ...] = (
    "Name",
    "Project Name",
    "Address",
    "Project Complete Address",
    "Notes",
    "Project Additional Notes",
    "Company Name",
    "Property Name",
    "Client",
    "Client Name",
    "Owner",
    "Status",
)

# settings attribute -> environment variable
_ENV_NAMES: Dict[str, str] = {
    "api_key": "TABLESTORE_API_KEY",
    "api_url": "TABLESTORE_API_URL",
    "web_url": "TABLESTORE_WEB_URL",
    "toolset": "TABLESTORE_MCP_TOOLSET",
    "search_base_ids": "TABLESTORE_SEARCH_BASE_IDS",
    "search_max_total": "TABLESTORE_SEARCH_MAX_TOTAL",
    "search_per_table_limit": "TABLESTORE_SEARCH_PER_TABLE_LIMIT",
    "search_priority_fields": "TABLESTORE_SEARCH_PRIORITY_FIELDS",
    "http_timeout": "TABLESTORE_HTTP_TIMEOUT",
}


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at start-up."""

    api_key: str
    api_url: str = DEFAULT_API_URL
    web_url: str = DEFAULT_WEB_URL
    toolset: str = DEFAULT_TOOLSET
    search_base_ids: Tuple[str, ...] = ()
    search_max_total: int = DEFAULT_SEARCH_MAX_TOTAL
    search_per_table_limit: int = DEFAULT_SEARCH_PER_TABLE_LIMIT
    search_priority_fields: Tuple[str, ...] = field(default=DEFAULT_PRIORITY_FIELDS)
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    def __repr__(self) -> str:  # keep the credential out of logs
        return (
            f"Settings(api_url={self.api_url!r}, toolset={self.toolset!r}, "
            f"search_base_ids={self.search_base_ids!r}, "
            f"search_max_total={self.search_max_total}, "
            f"search_per_table_limit={self.search_per_table_limit})"
        )


def load_dotenv_if_available() -> None:
    try:
        from dotenv import find_dotenv, load_dotenv
    except Exception:
        return
    resolved = find_dotenv(usecwd=True)
    if resolved:
        load_dotenv(resolved, override=False)
    else:
        load_dotenv(override=False)


def load_config(path: Optional[str]) -> Dict[str, Any]:
    """Load a JSON configuration object from *path*.

    When *path* is falsy or does not exist, an empty dictionary is returned so
    that callers can rely on default values.
    """

    if not path:
        return {}
    if not os.path.exists(path):
        logger.info("Configuration file '%s' not found; using defaults", path)
        return {}
    logger.info("Loading configuration from %s", path)
    with open(path, "r", encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must contain a JSON object")
    return data


def select_value(
    cli_value: Optional[Any],
    env: Mapping[str, str],
    file_config: Optional[Mapping[str, Any]],
    key: str,
    default: Optional[Any] = None,
) -> Optional[Any]:
    """Resolve precedence for a setting: CLI, environment, file, default."""

    if cli_value is not None:
        return cli_value
    env_name = _ENV_NAMES.get(key)
    if env_name:
        raw = env.get(env_name)
        if raw is not None and raw.strip():
            return raw
    if file_config and key in file_config:
        return file_config[key]
    return default


def _split_list(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        items: List[Any] = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]
    return tuple(str(item).strip() for item in items if str(item).strip())


def _parse_positive_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer setting value %r; using %s", value, default)
        return default
    return parsed if parsed > 0 else default


def _parse_float(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def load_settings(
    overrides: Optional[Mapping[str, Any]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    config_path: Optional[str] = None,
) -> Settings:
    """Build :class:`Settings` from CLI overrides, environment and config file.

    Raises :class:`ConfigurationError` when no API key can be found.
    """

    if env is None:
        load_dotenv_if_available()
        env = os.environ
    overrides = overrides or {}
    file_config = load_config(config_path or env.get(CONFIG_PATH_ENV))

    def pick(key: str, default: Any = None) -> Any:
        return select_value(overrides.get(key), env, file_config, key, default)

    api_key = str(pick("api_key") or "").strip()
    if not api_key:
        raise ConfigurationError(
            f"No API key provided. Set it in the `{_ENV_NAMES['api_key']}` environment variable"
        )

    priority = _split_list(pick("search_priority_fields"))
    settings = Settings(
        api_key=api_key,
        api_url=str(pick("api_url", DEFAULT_API_URL)).rstrip("/"),
        web_url=str(pick("web_url", DEFAULT_WEB_URL)).rstrip("/"),
        toolset=str(pick("toolset", DEFAULT_TOOLSET)).strip().lower(),
        search_base_ids=_split_list(pick("search_base_ids")),
        search_max_total=_parse_positive_int(pick("search_max_total"), DEFAULT_SEARCH_MAX_TOTAL),
        search_per_table_limit=_parse_positive_int(
            pick("search_per_table_limit"), DEFAULT_SEARCH_PER_TABLE_LIMIT
        ),
        search_priority_fields=priority or DEFAULT_PRIORITY_FIELDS,
        http_timeout=_parse_float(pick("http_timeout"), DEFAULT_HTTP_TIMEOUT),
    )
    logger.debug("Loaded %r", settings)
    return settings

"""
Configuration loader for the leak monitor.

Loads the monitor configuration from a JSON (or YAML) file, merges it over the
built-in defaults, and applies command-line overrides. Webhook secrets may also
be supplied through environment variables (or a .env file) and fill whatever
the config file leaves empty.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .schemas import MonitorConfig
from .utils import is_valid_domain

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "domains": [],
    "interval": 30,
    "verbose": False,
    "alerts": {"console": True, "email": None},
}

SCHEME_PREFIX = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")


class NotificationSettings(BaseSettings):
    """Webhook secrets read from the environment."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    slack_webhook_url: Optional[str] = Field(None, alias="SLACK_WEBHOOK_URL")
    teams_webhook_url: Optional[str] = Field(None, alias="TEAMS_WEBHOOK_URL")


def _read_config_file(path: Path) -> Any:
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_load(text)
    return json.loads(text)


def _apply_notification_settings(config: MonitorConfig) -> MonitorConfig:
    settings = NotificationSettings()  # type: ignore
    alerts = config.alerts
    updates = {}
    if not alerts.slack_webhook_url and settings.slack_webhook_url:
        updates["slack_webhook_url"] = settings.slack_webhook_url
    if not alerts.teams_webhook_url and settings.teams_webhook_url:
        updates["teams_webhook_url"] = settings.teams_webhook_url
    if not updates:
        return config
    return config.model_copy(update={"alerts": alerts.model_copy(update=updates)})


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> MonitorConfig:
    """
    Loads the configuration from *config_path*.

    The file's top-level keys replace the defaults (a shallow merge). A missing
    file yields the defaults; an unreadable or invalid file yields the defaults
    and a warning.
    """
    path = Path(config_path)
    config = MonitorConfig.model_validate(DEFAULT_CONFIG)

    if not path.exists():
        logger.info("Config file %s not found. Using default settings.", config_path)
        return _apply_notification_settings(config)

    try:
        user_config = _read_config_file(path)
        if not isinstance(user_config, dict):
            raise ValueError("top-level value must be an object")
        config = MonitorConfig.model_validate({**DEFAULT_CONFIG, **user_config})
    except (OSError, ValueError, yaml.YAMLError, ValidationError) as e:
        logger.warning("Could not load config from %s: %s", config_path, e)
        config = MonitorConfig.model_validate(DEFAULT_CONFIG)

    return _apply_notification_settings(config)


def save_config(config_path: str, config: MonitorConfig) -> Path:
    """Writes *config* to *config_path* as indented JSON and returns the path."""
    path = Path(config_path)
    path.write_text(
        json.dumps(config.model_dump(mode="json"), indent=2) + "\n", encoding="utf-8"
    )
    logger.info("Saved configuration to %s", path)
    return path


def merge_cli_overrides(
    config: MonitorConfig,
    domains: Optional[List[str]] = None,
    interval: Optional[int] = None,
    verbose: bool = False,
) -> MonitorConfig:
    """Returns a copy of *config* with the command-line values taking precedence."""
    updates: Dict[str, Any] = {}
    if domains:
        updates["domains"] = domains
    if interval is not None:
        updates["interval"] = interval
    if verbose:
        updates["verbose"] = True
    return config.model_copy(update=updates)


def normalize_domain(domain: str) -> str:
    """Strips scheme, path and trailing slash from *domain* and lowercases it."""
    domain = domain.strip()
    domain = SCHEME_PREFIX.sub("", domain)
    domain = domain.rstrip("/")
    domain = domain.split("/")[0]
    return domain.lower()


def validate_domains(domains: Iterable[Any]) -> List[str]:
    """
    Normalizes each entry and keeps only valid hostnames, in their first
    order of appearance and without duplicates.
    """
    if domains is None or isinstance(domains, (str, bytes)):
        return []

    valid: List[str] = []
    for raw in domains:
        if not isinstance(raw, str):
            logger.warning("Ignoring non-string domain entry: %r", raw)
            continue
        domain = normalize_domain(raw)
        if not is_valid_domain(domain):
            if domain:
                logger.warning("Ignoring invalid domain: %s", raw)
            continue
        if domain not in valid:
            valid.append(domain)
    return valid

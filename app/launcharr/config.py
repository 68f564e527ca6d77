"""
Central configuration module for Launcharr.

This module provides a single source of configuration loading from:
- YAML settings file
- Environment variables
- Defaults

Key features:
- Sonarr connection settings (API key, server, protocol)
- Refresh pacing and overdue grace buffer
- Connection probe interval
- Notification endpoints
- Logging setup

The settings file is created with defaults on first load so the setup wizard
always has somewhere to persist to.
"""

from __future__ import annotations
import os
import logging
import yaml
from typing import Optional, Dict, Any
from dataclasses import dataclass, field

APP_NAME = "Launcharr"
APP_VERSION = "1.4.0"
APP_DESCRIPTION = "Search, browse and refresh your Sonarr library from a launcher"

DEFAULT_SERVER_URL = "localhost:8989"
DEFAULT_CONFIG_PATH = os.path.join("~", ".config", "launcharr", "settings.yaml")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

logger = logging.getLogger(__name__)


def normalize_server_url(url: str) -> str:
    """Strip any protocol prefix and trailing slash from a server address."""
    url = (url or "").strip()
    for prefix in ("http://", "https://"):
        if url.lower().startswith(prefix):
            url = url[len(prefix):]
    return url.rstrip("/")


@dataclass
class SonarrConfig:
    """Sonarr connection settings."""
    api_key: str = ""
    server_url: str = DEFAULT_SERVER_URL
    use_https: bool = False
    request_timeout: int = 15

    def __post_init__(self):
        self.server_url = normalize_server_url(self.server_url)

    @property
    def scheme(self) -> str:
        return "https" if self.use_https else "http"

    @property
    def web_base_url(self) -> str:
        return f"{self.scheme}://{self.server_url}"

    @property
    def base_url(self) -> str:
        return f"{self.web_base_url}/api/v3"


@dataclass
class RefreshConfig:
    """Bulk refresh pacing."""
    delay_seconds: float = 0.1
    overdue_buffer_minutes: int = 10


@dataclass
class ProbeConfig:
    """Connection probe settings."""
    interval_seconds: int = 60
    timeout_seconds: int = 5


@dataclass
class NotificationConfig:
    """Notification configuration."""
    discord_webhook: str = ""
    enabled: bool = True

    def __post_init__(self):
        # Load from environment if not set
        if not self.discord_webhook:
            self.discord_webhook = os.environ.get("DISCORD_WEBHOOK", "")


@dataclass
class LaunchConfig:
    """Main Launcharr configuration."""
    sonarr: SonarrConfig = field(default_factory=SonarrConfig)
    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    probe: ProbeConfig = field(default_factory=ProbeConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)

    log_level: str = "INFO"
    log_file: str = ""

    # Where this config was loaded from / is saved to
    path: str = ""

    def __post_init__(self):
        self.log_level = os.environ.get("LAUNCHARR_LOG_LEVEL", self.log_level)

    def has_credential(self) -> bool:
        return bool(self.sonarr.api_key.strip())


def default_config_path() -> str:
    return os.path.expanduser(os.environ.get("LAUNCHARR_CONFIG", DEFAULT_CONFIG_PATH))


def load_yaml_config(config_path: str) -> dict:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Dictionary containing the parsed YAML configuration, or empty dict on error
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                logger.warning("Settings file %s is not a mapping; using defaults", config_path)
                return {}
            return data
    except FileNotFoundError:
        return {}
    except yaml.YAMLError as e:
        logger.error("Error parsing YAML config at %s: %s", config_path, e)
        return {}
    except OSError as e:
        logger.error("Error loading config from %s: %s", config_path, e)
        return {}


def _as_bool(value: Any, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def parse_sonarr_config(data: dict) -> SonarrConfig:
    """Parse Sonarr connection settings, applying environment overrides."""
    sonarr_data = data.get("sonarr") or {}

    api_key = os.environ.get("SONARR_API_KEY") or sonarr_data.get("api_key") or ""
    server_url = os.environ.get("SONARR_URL") or sonarr_data.get("server_url") or DEFAULT_SERVER_URL
    use_https = _as_bool(os.environ.get("SONARR_HTTPS", sonarr_data.get("use_https")), False)

    try:
        timeout = int(sonarr_data.get("request_timeout", 15))
    except (ValueError, TypeError):
        timeout = 15

    return SonarrConfig(
        api_key=str(api_key),
        server_url=str(server_url),
        use_https=use_https,
        request_timeout=timeout
    )


def parse_refresh_config(data: dict) -> RefreshConfig:
    """Parse refresh pacing from YAML data."""
    refresh_data = data.get("refresh") or {}
    try:
        delay = float(refresh_data.get("delay_seconds", 0.1))
    except (ValueError, TypeError):
        delay = 0.1
    try:
        buffer_minutes = int(refresh_data.get("overdue_buffer_minutes", 10))
    except (ValueError, TypeError):
        buffer_minutes = 10
    return RefreshConfig(delay_seconds=max(0.0, delay), overdue_buffer_minutes=buffer_minutes)


def parse_probe_config(data: dict) -> ProbeConfig:
    """Parse connection probe settings from YAML data."""
    probe_data = data.get("probe") or {}
    try:
        interval = int(probe_data.get("interval_seconds", 60))
    except (ValueError, TypeError):
        interval = 60
    try:
        timeout = int(probe_data.get("timeout_seconds", 5))
    except (ValueError, TypeError):
        timeout = 5
    return ProbeConfig(interval_seconds=interval, timeout_seconds=timeout)


def parse_notification_config(data: dict) -> NotificationConfig:
    """Parse notification configuration from YAML data."""
    notif_data = data.get("notifications") or {}

    return NotificationConfig(
        discord_webhook=notif_data.get("discord_webhook", "") or "",
        enabled=_as_bool(notif_data.get("enabled"), True)
    )


def load_config(config_path: Optional[str] = None, create: bool = True) -> LaunchConfig:
    """
    Load the complete Launcharr configuration.

    Configuration is loaded from:
    1. YAML file (if provided or found at LAUNCHARR_CONFIG env var)
    2. Environment variables (override YAML)
    3. Defaults

    Args:
        config_path: Optional path to YAML settings file
        create: Write a default settings file when none exists

    Returns:
        LaunchConfig object with complete configuration
    """
    if config_path is None:
        config_path = default_config_path()

    exists = os.path.exists(config_path)
    yaml_data = load_yaml_config(config_path)

    config = LaunchConfig(
        sonarr=parse_sonarr_config(yaml_data),
        refresh=parse_refresh_config(yaml_data),
        probe=parse_probe_config(yaml_data),
        notifications=parse_notification_config(yaml_data),
        log_level=str(yaml_data.get("log_level", "INFO")),
        log_file=str(yaml_data.get("log_file", "") or ""),
        path=config_path
    )

    if not exists and create:
        try:
            save_config(config)
            logger.info("Created default settings at %s", config_path)
        except OSError as e:
            logger.warning("Could not create settings file %s: %s", config_path, e)

    return config


# Values that may come from the environment; these are never written back to the file
ENV_OVERRIDES = (
    ("sonarr", "api_key", "SONARR_API_KEY", str),
    ("sonarr", "server_url", "SONARR_URL", normalize_server_url),
    ("sonarr", "use_https", "SONARR_HTTPS", _as_bool),
    ("notifications", "discord_webhook", "DISCORD_WEBHOOK", str),
)


def _keep_file_values(data: dict, path: str) -> None:
    """Swap environment-sourced values in ``data`` for what the file already holds."""
    existing = load_yaml_config(path) if os.path.exists(path) else {}
    for section, key, env_var, convert in ENV_OVERRIDES:
        raw = os.environ.get(env_var)
        if not raw or data[section][key] != convert(raw):
            continue
        stored = existing.get(section) or {}
        if key in stored:
            data[section][key] = stored[key]
        else:
            del data[section][key]


def save_config(config: LaunchConfig, config_path: Optional[str] = None) -> str:
    """
    Persist the configuration as YAML.

    Args:
        config: LaunchConfig instance
        config_path: Optional override for the destination

    Returns:
        Path the settings were written to
    """
    path = config_path or config.path or default_config_path()
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)

    data = {
        "sonarr": {
            "api_key": config.sonarr.api_key,
            "server_url": config.sonarr.server_url,
            "use_https": config.sonarr.use_https,
            "request_timeout": config.sonarr.request_timeout
        },
        "refresh": {
            "delay_seconds": config.refresh.delay_seconds,
            "overdue_buffer_minutes": config.refresh.overdue_buffer_minutes
        },
        "probe": {
            "interval_seconds": config.probe.interval_seconds,
            "timeout_seconds": config.probe.timeout_seconds
        },
        "notifications": {
            "discord_webhook": config.notifications.discord_webhook,
            "enabled": config.notifications.enabled
        },
        "log_level": config.log_level,
        "log_file": config.log_file
    }
    _keep_file_values(data, path)

    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)

    config.path = path
    return path


def reload_into(config: LaunchConfig) -> LaunchConfig:
    """Re-read settings from disk into an existing instance (shared by reference)."""
    fresh = load_config(config.path or None, create=False)
    config.sonarr = fresh.sonarr
    config.refresh = fresh.refresh
    config.probe = fresh.probe
    config.notifications = fresh.notifications
    config.log_level = fresh.log_level
    config.log_file = fresh.log_file
    return config


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Install the standard log format on the root logger."""
    level = (level or os.environ.get("LAUNCHARR_LOG_LEVEL", "INFO")).upper()
    handlers = [logging.StreamHandler()]
    if log_file:
        directory = os.path.dirname(os.path.expanduser(log_file))
        if directory:
            os.makedirs(directory, exist_ok=True)
        handlers.append(logging.FileHandler(os.path.expanduser(log_file), encoding="utf-8"))
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


# Singleton pattern for global config access
_global_config: Optional[LaunchConfig] = None


def get_config(config_path: Optional[str] = None, reload: bool = False) -> LaunchConfig:
    """
    Get the global configuration instance.

    Args:
        config_path: Optional path to settings file (only used on first load or reload)
        reload: If True, force reload the configuration

    Returns:
        LaunchConfig instance
    """
    global _global_config

    if _global_config is None or reload:
        _global_config = load_config(config_path)

    return _global_config


def to_dict(config: LaunchConfig) -> Dict[str, Any]:
    """
    Convert LaunchConfig to a dictionary for serialization (e.g., JSON API).

    Args:
        config: LaunchConfig instance

    Returns:
        Dictionary representation of the configuration
    """
    return {
        "sonarr": {
            "server_url": config.sonarr.server_url,
            "use_https": config.sonarr.use_https,
            "api_key_set": bool(config.sonarr.api_key),  # Don't expose the actual key
            "request_timeout": config.sonarr.request_timeout
        },
        "refresh": {
            "delay_seconds": config.refresh.delay_seconds,
            "overdue_buffer_minutes": config.refresh.overdue_buffer_minutes
        },
        "probe": {
            "interval_seconds": config.probe.interval_seconds,
            "timeout_seconds": config.probe.timeout_seconds
        },
        "notifications": {
            "discord_webhook_set": bool(config.notifications.discord_webhook),
            "enabled": config.notifications.enabled
        },
        "log_level": config.log_level,
        "log_file": config.log_file,
        "path": config.path
    }

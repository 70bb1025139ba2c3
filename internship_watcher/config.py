"""
Configuration for the Internship Watcher.

All settings come from environment variables and fall back to the
defaults below when unset or invalid.
"""

from dataclasses import dataclass

from internship_watcher.utils import env_flag, get_env_var, get_logger


logger = get_logger("config")

DEFAULT_FEED_URL = (
    "https://raw.githubusercontent.com/vanshb03/Summer2026-Internships/main/README.md"
)
DEFAULT_POLL_INTERVAL = 300  # seconds
DEFAULT_FETCH_TIMEOUT = 30  # seconds
DEFAULT_PREFERENCES_PATH = "data/preferences.json"


@dataclass
class WatcherConfig:
    """
    Runtime settings for the watcher.

    Attributes:
        feed_url: URL of the published internship document.
        poll_interval: Seconds between polling cycles.
        fetch_timeout: Per-request timeout in seconds.
        preferences_path: JSON file holding the notification toggle.
        log_level: Logging level name.
        dry_run: If True, alerts are logged instead of delivered.
        run_once: If True, run a single cycle and exit.
    """
    feed_url: str = DEFAULT_FEED_URL
    poll_interval: int = DEFAULT_POLL_INTERVAL
    fetch_timeout: int = DEFAULT_FETCH_TIMEOUT
    preferences_path: str = DEFAULT_PREFERENCES_PATH
    log_level: str = "INFO"
    dry_run: bool = False
    run_once: bool = False


def _positive_int(name: str, default: int) -> int:
    raw = get_env_var(name, required=False)
    if raw is None:
        return default

    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"{name} must be an integer, got '{raw}'; using {default}")
        return default

    if value <= 0:
        logger.warning(f"{name} must be positive, got {value}; using {default}")
        return default

    return value


def load_config() -> WatcherConfig:
    """
    Build a WatcherConfig from the environment.

    Recognised variables: FEED_URL, POLL_INTERVAL, FETCH_TIMEOUT,
    PREFERENCES_PATH, LOG_LEVEL, DRY_RUN and RUN_ONCE.

    Returns:
        Populated WatcherConfig.
    """
    config = WatcherConfig(
        feed_url=get_env_var("FEED_URL", required=False, default=DEFAULT_FEED_URL),
        poll_interval=_positive_int("POLL_INTERVAL", DEFAULT_POLL_INTERVAL),
        fetch_timeout=_positive_int("FETCH_TIMEOUT", DEFAULT_FETCH_TIMEOUT),
        preferences_path=get_env_var(
            "PREFERENCES_PATH", required=False, default=DEFAULT_PREFERENCES_PATH
        ),
        log_level=get_env_var("LOG_LEVEL", required=False, default="INFO").upper(),
        dry_run=env_flag("DRY_RUN"),
        run_once=env_flag("RUN_ONCE"),
    )

    logger.debug(f"Loaded configuration: {config}")
    return config

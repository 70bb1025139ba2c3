"""
Notification preference for the Internship Watcher.

The watcher consults a single boolean before dispatching alerts. The
preference is persisted as a small JSON file and defaults to enabled.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

from internship_watcher.utils import get_logger, safe_read_json, safe_write_json


# Module logger
logger = get_logger("settings")

NOTIFICATIONS_ENABLED_KEY = "notifications_enabled"


class EnablementFlag(ABC):
    """Read-only view of whether alerts should be sent."""

    @abstractmethod
    def is_enabled(self) -> bool:
        """Return True if alerts should be dispatched."""


class StaticFlag(EnablementFlag):
    """Fixed in-memory value."""

    def __init__(self, enabled: bool = True):
        self.enabled = enabled

    def is_enabled(self) -> bool:
        return self.enabled


class PreferenceStore(EnablementFlag):
    """
    JSON-file backed notification toggle.

    The file holds ``{"notifications_enabled": true|false}``. A missing
    file, invalid JSON or a non-boolean value all read as enabled.
    """

    def __init__(self, filepath: str):
        self.filepath = filepath

    def _load(self) -> Dict[str, Any]:
        data = safe_read_json(self.filepath, default={})
        if not isinstance(data, dict):
            logger.warning(f"Unexpected preference format in {self.filepath}, ignoring")
            return {}
        return data

    def is_enabled(self) -> bool:
        value = self._load().get(NOTIFICATIONS_ENABLED_KEY, True)

        if not isinstance(value, bool):
            logger.warning(
                f"'{NOTIFICATIONS_ENABLED_KEY}' should be a boolean, got {value!r}; treating as enabled"
            )
            return True

        return value

    def set_enabled(self, enabled: bool) -> bool:
        """
        Persist the toggle, keeping any other keys in the file.

        Returns:
            True if the write succeeded.
        """
        data = self._load()
        data[NOTIFICATIONS_ENABLED_KEY] = bool(enabled)

        success = safe_write_json(self.filepath, data)
        if success:
            logger.info(f"Notifications {'enabled' if enabled else 'disabled'}")

        return success

#!/usr/bin/env python3
"""
Main entry point for the Internship Watcher.

This module wires the collaborators together and starts polling:
fetch → parse → compare → notify → present

It handles logging setup, configuration loading, and error handling
for the process as a whole.
"""

import sys

from internship_watcher.config import WatcherConfig, load_config
from internship_watcher.notify import (
    EmailNotifier,
    LoggingNotifier,
    Notifier,
    is_email_configured,
)
from internship_watcher.present import ConsolePresenter
from internship_watcher.scheduler import Watcher
from internship_watcher.settings import PreferenceStore
from internship_watcher.utils import get_logger, setup_logging


# Exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_ENV_ERROR = 2


def build_notifier() -> Notifier:
    """
    Choose the alert channel.

    Email is used when all SMTP variables are set, otherwise alerts go
    to the log.

    Raises:
        ValueError: If email is configured with invalid values.
    """
    logger = get_logger("main")

    if is_email_configured():
        logger.info("Email alerts enabled")
        return EmailNotifier.from_env()

    logger.info("Email alerts not configured, logging alerts instead")
    return LoggingNotifier()


def build_watcher(config: WatcherConfig) -> Watcher:
    """Create a Watcher with the default collaborators."""
    return Watcher(
        config=config,
        notifier=build_notifier(),
        presenter=ConsolePresenter(),
        enablement=PreferenceStore(config.preferences_path),
    )


def main() -> int:
    """
    Main entry point for the Internship Watcher.

    Sets up logging and runs the watcher with proper error handling.

    Returns:
        Exit code for the process.
    """
    config = load_config()

    setup_logging(config.log_level)
    logger = get_logger("main")

    if config.dry_run:
        logger.info("Running in DRY RUN mode - alerts will only be logged")

    try:
        watcher = build_watcher(config)
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_ENV_ERROR

    try:
        if config.run_once:
            result = watcher.run_cycle()
            return EXIT_SUCCESS if result.success else EXIT_FAILURE

        watcher.start()
        return EXIT_SUCCESS

    except KeyboardInterrupt:
        logger.warning("Watcher interrupted by user")
        return EXIT_FAILURE

    except Exception as e:
        logger.exception(f"Unexpected error in watcher: {e}")
        return EXIT_FAILURE

    finally:
        watcher.shutdown()


if __name__ == "__main__":
    sys.exit(main())

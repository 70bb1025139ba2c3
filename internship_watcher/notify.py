"""
Notify module for the Internship Watcher.

This module delivers one alert per newly detected posting. An alert is a
(title, body) pair handed to a Notifier. Two delivery channels exist:
- Logging (default, also used for dry runs)
- Email via SMTP with TLS (when SMTP settings are configured)

Delivery failures are logged and reported as False; they never crash
the polling cycle.
"""

import html
import os
import smtplib
import ssl
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import List, Tuple

from internship_watcher.models import Record
from internship_watcher.utils import get_env_var, get_logger


# Module logger
logger = get_logger("notify")

ALERT_TITLE = "New Internship Posted!"

SMTP_TIMEOUT = 30  # seconds

EMAIL_ENV_VARS = [
    "SMTP_HOST", "SMTP_PORT", "SMTP_USER",
    "SMTP_PASSWORD", "EMAIL_FROM", "EMAIL_TO"
]


def format_alert(record: Record) -> Tuple[str, str]:
    """
    Build the alert for a new posting.

    Args:
        record: The newly detected record.

    Returns:
        Tuple of (title, body).
    """
    return ALERT_TITLE, f"{record.company} - {record.role}"


class Notifier(ABC):
    """Delivers a single alert."""

    @abstractmethod
    def send(self, title: str, body: str) -> bool:
        """
        Deliver one alert.

        Returns:
            True if the alert was delivered, False otherwise.
        """


class LoggingNotifier(Notifier):
    """Writes alerts to the application log."""

    def send(self, title: str, body: str) -> bool:
        logger.info(f"ALERT: {title} {body}")
        return True


class RecordingNotifier(Notifier):
    """Keeps every alert in memory, in delivery order."""

    def __init__(self):
        self.alerts: List[Tuple[str, str]] = []

    def send(self, title: str, body: str) -> bool:
        self.alerts.append((title, body))
        return True


# =============================================================================
# Email Notification
# =============================================================================


def get_email_credentials() -> Tuple[str, int, str, str, str, str]:
    """
    Get email credentials from environment variables.

    Returns:
        Tuple of (smtp_host, smtp_port, smtp_user, smtp_password, email_from, email_to).

    Raises:
        ValueError: If any required environment variable is not set.
    """
    smtp_host = get_env_var("SMTP_HOST", required=True)
    smtp_port_str = get_env_var("SMTP_PORT", required=True)
    smtp_user = get_env_var("SMTP_USER", required=True)
    smtp_password = get_env_var("SMTP_PASSWORD", required=True)
    email_from = get_env_var("EMAIL_FROM", required=True)
    email_to = get_env_var("EMAIL_TO", required=True)

    # get_env_var with required=True raises ValueError if None
    assert smtp_host is not None
    assert smtp_port_str is not None
    assert smtp_user is not None
    assert smtp_password is not None
    assert email_from is not None
    assert email_to is not None

    try:
        smtp_port = int(smtp_port_str)
    except ValueError:
        raise ValueError(f"SMTP_PORT must be a valid integer, got: {smtp_port_str}")

    return smtp_host, smtp_port, smtp_user, smtp_password, email_from, email_to


def is_email_configured() -> bool:
    """
    Check if email notification is configured.

    Returns:
        True if all email environment variables are set, False otherwise.
    """
    for var in EMAIL_ENV_VARS:
        value = os.environ.get(var)
        if not value or value.strip() == "":
            return False

    return True


def format_email_body_html(title: str, body: str) -> str:
    """Wrap an alert in a minimal HTML document."""
    return "\n".join([
        "<!DOCTYPE html>",
        "<html>",
        '<head><meta charset="utf-8"></head>',
        "<body>",
        f"  <h2>{html.escape(title)}</h2>",
        f"  <p>{html.escape(body)}</p>",
        '  <p style="font-size: 12px; color: #666;">Sent by Internship Watcher.</p>',
        "</body>",
        "</html>",
    ])


class EmailNotifier(Notifier):
    """
    Sends each alert as an email via SMTP with TLS.

    Supports both:
    - Port 465: SMTP_SSL (implicit TLS)
    - Other ports: SMTP with STARTTLS (explicit TLS)
    """

    def __init__(
        self,
        smtp_host: str,
        smtp_port: int,
        smtp_user: str,
        smtp_password: str,
        email_from: str,
        email_to: str
    ):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.smtp_user = smtp_user
        self.smtp_password = smtp_password
        self.email_from = email_from
        self.email_to = email_to

    @classmethod
    def from_env(cls) -> "EmailNotifier":
        """
        Build a notifier from SMTP environment variables.

        Raises:
            ValueError: If the configuration is incomplete or invalid.
        """
        return cls(*get_email_credentials())

    def build_message(self, title: str, body: str) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = title
        msg["From"] = self.email_from
        msg["To"] = self.email_to
        msg["Date"] = datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S +0000")
        msg.set_content(body)
        msg.add_alternative(format_email_body_html(title, body), subtype="html")
        return msg

    def send(self, title: str, body: str) -> bool:
        msg = self.build_message(title, body)
        ssl_context = ssl.create_default_context()

        try:
            if self.smtp_port == 465:
                logger.debug("Using SMTP_SSL (implicit TLS) for port 465")
                with smtplib.SMTP_SSL(
                    self.smtp_host, self.smtp_port, timeout=SMTP_TIMEOUT, context=ssl_context
                ) as server:
                    server.login(self.smtp_user, self.smtp_password)
                    server.send_message(msg)
            else:
                logger.debug(f"Using SMTP with STARTTLS for port {self.smtp_port}")
                with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=SMTP_TIMEOUT) as server:
                    server.starttls(context=ssl_context)
                    server.login(self.smtp_user, self.smtp_password)
                    server.send_message(msg)

            logger.info(f"Email alert sent to {self.email_to}: {body}")
            return True

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed: {e}")
            return False

        except smtplib.SMTPConnectError as e:
            logger.error(f"Failed to connect to SMTP server: {e}")
            return False

        except smtplib.SMTPException as e:
            logger.error(f"SMTP error while sending email: {e}")
            return False

        except ssl.SSLError as e:
            logger.error(f"SSL/TLS error while sending email: {e}")
            return False

        except (TimeoutError, OSError) as e:
            logger.error(f"Network error while sending email: {e}")
            return False


def notify_new_records(
    records: List[Record],
    notifier: Notifier,
    dry_run: bool = False
) -> int:
    """
    Send one alert per new record, in order.

    A failed alert is logged and does not prevent the remaining alerts.

    Args:
        records: Newly detected records.
        notifier: Delivery channel.
        dry_run: If True, log the alerts instead of sending them.

    Returns:
        Number of alerts delivered.
    """
    if not records:
        logger.info("No new postings to notify about")
        return 0

    delivered = 0

    for record in records:
        title, body = format_alert(record)

        if dry_run:
            logger.info(f"[DRY RUN] Would send alert: {title} {body}")
            continue

        try:
            sent = notifier.send(title, body)
        except Exception as e:
            logger.error(f"Notifier raised while sending alert for {body}: {e}")
            sent = False

        if sent:
            delivered += 1
        else:
            logger.warning(f"Alert not delivered: {body}")

    logger.info(f"Delivered {delivered}/{len(records)} alert(s)")

    return delivered

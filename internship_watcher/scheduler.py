"""
Polling scheduler for the Internship Watcher.

A Watcher owns the session state and runs the cycle:
fetch → parse → compare → notify → present

The first cycle runs as soon as polling starts and then repeats on a
fixed interval via APScheduler. Cycles never overlap: the job is limited
to one instance and run_cycle itself refuses to start while another
cycle holds the busy lock.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

import requests
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.interval import IntervalTrigger

from internship_watcher.compare import SessionState, detect_new_records, get_comparison_summary
from internship_watcher.config import WatcherConfig
from internship_watcher.fetch import create_session, fetch_feed
from internship_watcher.models import Record
from internship_watcher.notify import Notifier, notify_new_records
from internship_watcher.parse import parse_fetch_result
from internship_watcher.present import Presenter
from internship_watcher.settings import EnablementFlag
from internship_watcher.utils import get_logger


# Module logger
logger = get_logger("scheduler")

JOB_ID = "internship-feed-poll"

STATE_IDLE = "idle"
STATE_POLLING = "polling"


@dataclass
class CycleResult:
    """
    Outcome of one polling cycle.

    Attributes:
        success: True if the feed was fetched and parsed.
        snapshot: Records parsed in this cycle.
        new_records: Records not seen in the previous snapshot.
        alerts_sent: Number of alerts delivered.
        skipped: True if the cycle did not run because another was active.
        error: Failure description, if any.
    """
    success: bool
    snapshot: List[Record] = field(default_factory=list)
    new_records: List[Record] = field(default_factory=list)
    alerts_sent: int = 0
    skipped: bool = False
    error: Optional[str] = None


class Watcher:
    """
    Runs polling cycles and delivers results to its collaborators.

    Args:
        config: Feed URL, poll interval and fetch timeout.
        notifier: Receives one alert per new record.
        presenter: Receives the full snapshot after each successful cycle.
        enablement: Consulted once per cycle before alerts are sent.
        session: Optional requests session reused across cycles.
    """

    def __init__(
        self,
        config: WatcherConfig,
        notifier: Notifier,
        presenter: Presenter,
        enablement: EnablementFlag,
        session: Optional[requests.Session] = None
    ):
        self.config = config
        self.notifier = notifier
        self.presenter = presenter
        self.enablement = enablement
        self.session = session or create_session()
        self.session_state = SessionState()
        self.state = STATE_IDLE
        self._busy = threading.Lock()
        self._scheduler: Optional[BaseScheduler] = None

    def run_cycle(self) -> CycleResult:
        """
        Run one fetch → parse → compare → notify → present pass.

        Never raises. A fetch failure leaves the session state and the
        presenter untouched.

        Returns:
            CycleResult describing what happened.
        """
        if not self._busy.acquire(blocking=False):
            logger.warning("Previous cycle still running, skipping this one")
            return CycleResult(success=False, skipped=True)

        try:
            return self._run_cycle()
        except Exception as e:
            logger.exception(f"Unexpected error during cycle: {e}")
            return CycleResult(success=False, error=str(e))
        finally:
            self._busy.release()

    def _run_cycle(self) -> CycleResult:
        logger.info(f"Polling {self.config.feed_url}")

        fetch_result = fetch_feed(
            self.config.feed_url,
            session=self.session,
            timeout=self.config.fetch_timeout
        )
        snapshot = parse_fetch_result(fetch_result)

        if snapshot is None:
            logger.warning(f"Fetch failed ({fetch_result.error_message}), keeping previous state")
            return CycleResult(success=False, error=fetch_result.error_message)

        summary = get_comparison_summary(snapshot, self.session_state)
        new_records, self.session_state = detect_new_records(snapshot, self.session_state)

        logger.info(
            f"Cycle summary: {summary['current_count']} current, "
            f"{summary['previous_count']} previous, {len(new_records)} new, "
            f"{summary['removed_count']} removed"
        )

        alerts_sent = 0
        if new_records:
            if self.enablement.is_enabled():
                alerts_sent = notify_new_records(
                    new_records, self.notifier, dry_run=self.config.dry_run
                )
            else:
                logger.info(f"Notifications disabled, not alerting on {len(new_records)} new posting(s)")

        self.presenter.show(snapshot)

        return CycleResult(
            success=True,
            snapshot=snapshot,
            new_records=new_records,
            alerts_sent=alerts_sent
        )

    def start(self, scheduler: Optional[BaseScheduler] = None) -> None:
        """
        Enter the polling state.

        Adds an interval job whose first run is immediate, then starts the
        scheduler. With the default BlockingScheduler this call blocks
        until the process ends.

        Args:
            scheduler: APScheduler instance to use. Defaults to a new
                       BlockingScheduler.
        """
        if self.state == STATE_POLLING:
            logger.warning("Watcher is already polling")
            return

        if scheduler is None:
            scheduler = BlockingScheduler(timezone=timezone.utc)

        scheduler.add_job(
            self.run_cycle,
            trigger=IntervalTrigger(seconds=self.config.poll_interval, timezone=timezone.utc),
            id=JOB_ID,
            name="Poll internship feed",
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )

        self._scheduler = scheduler
        self.state = STATE_POLLING
        logger.info(f"Polling every {self.config.poll_interval}s")

        scheduler.start()

    def shutdown(self) -> None:
        """Stop the scheduler and release the HTTP session at process exit."""
        if self._scheduler is not None and self._scheduler.running:
            logger.info("Shutting down scheduler...")
            self._scheduler.shutdown(wait=False)
        self.session.close()

"""
Stampede Slot Monitor
Checks availability once per invocation and pings Discord when slots change.
Designed for GitHub Actions / cron but works anywhere
"""

import logging
import time
from datetime import datetime, timezone
from typing import Any, List, Tuple

from .changes import Diff, diff_keys
from .client import AvailabilityClient
from .config import MonitorConfig
from .keyspace import KeySpace, build_key_space, date_window
from .notifier import DiscordWebhook, DispatchResult, NotificationDispatcher
from .snapshot import Snapshot, SnapshotStore

logger = logging.getLogger(__name__)


def setup_logging(log_file: str = None):
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.insert(0, logging.FileHandler(log_file))
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers
    )


class SlotMonitor:
    def __init__(self, config: MonitorConfig, client: AvailabilityClient = None,
                 store: SnapshotStore = None, dispatcher: NotificationDispatcher = None):
        self.config = config
        self.client = client or AvailabilityClient(config)
        self.store = store or SnapshotStore(config.state_file)
        self.dispatcher = dispatcher or NotificationDispatcher(
            config, DiscordWebhook(config.webhook_url, config.webhook_timeout)
        )

    def fetch_window(self, today=None) -> List[Tuple[Any, List[Any]]]:
        """Fetch raw slots for every date in the scan window"""
        dates = date_window(self.config.days_ahead, self.config.tz, today)
        logger.info(f"Scanning {len(dates)} days from {dates[0]} (party size {self.config.party_size})")

        results = []
        for i, day in enumerate(dates):
            # Small delay between dates to avoid rate limiting
            if i > 0 and self.config.request_delay > 0:
                time.sleep(self.config.request_delay)
            results.append((day, self.client.times_for_date(day.isoformat())))
        return results

    def run_single_check(self, now: datetime = None, today=None) -> DispatchResult:
        """Run one fetch / diff / notify / save cycle"""
        now = now or datetime.now(timezone.utc)
        logger.info("Starting availability check...")

        space = build_key_space(self.fetch_window(today), self.config.tz)
        logger.info(f"Found {len(space.keys)} available slots")

        previous = self.store.load()
        diff = diff_keys(previous.keys, space.keys)

        # Saved before dispatch: an unwritable state file aborts the run with nothing sent
        new_snapshot = Snapshot(
            keys=sorted(space.keys),
            last_notification_hash=previous.last_notification_hash,
            last_notification_at=previous.last_notification_at,
            last_check=now,
            check_count=previous.check_count + 1,
        )
        self.store.save(new_snapshot)

        result = self.dispatcher.dispatch(diff, space.meta, previous, now)

        if result.notification_hash:
            new_snapshot.last_notification_hash = result.notification_hash
            new_snapshot.last_notification_at = result.notified_at
            self.store.save(new_snapshot)

        self.print_summary(space, diff, result)
        return result

    def print_summary(self, space: KeySpace, diff: Diff, result: DispatchResult):
        """Print summary of current status"""
        print("\n" + "=" * 70)
        print("STAMPEDE AVAILABILITY SUMMARY")
        print("=" * 70)
        print(f"Check time: {datetime.now(self.config.tz).strftime('%Y-%m-%d %H:%M:%S')}")
        print(f"Window: {self.config.days_ahead} days, party size {self.config.party_size}")
        print(f"Available slots: {len(space.keys)}")
        if space.discarded:
            print(f"Discarded records: {space.discarded}")

        if diff.has_changes:
            print("\nCHANGES DETECTED:")
            print(f"  New: {len(diff.added)} slots")
            print(f"  Gone: {len(diff.removed)} slots")

        print(f"Notification: {result.action}")
        print("=" * 70)


def main() -> int:
    config = MonitorConfig.from_env()
    setup_logging(config.log_file)

    monitor = SlotMonitor(config)
    try:
        monitor.run_single_check()
    except OSError:
        logger.exception("Could not persist state, aborting run")
        return 1
    return 0


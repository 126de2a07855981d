"""Discord webhook sink and the send / suppress / keepalive policy"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional

import requests

from .changes import Diff
from .composer import compose_lines, content_hash, truncate
from .config import MonitorConfig
from .keyspace import SlotMeta
from .snapshot import Snapshot

logger = logging.getLogger(__name__)

COLOR_ADDED = 0x2ecc71
COLOR_REMOVED = 0xe74c3c

ACTION_SENT = 'sent'
ACTION_SUPPRESSED = 'suppressed'
ACTION_FAILED = 'failed'
ACTION_FIRST_RUN = 'first_run_silent'
ACTION_KEEPALIVE = 'keepalive'
ACTION_IDLE = 'idle'


class DiscordWebhook:
    def __init__(self, webhook_url: Optional[str], timeout: float = 10, session=None):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self.session = session or requests

    def _post(self, payload: dict) -> bool:
        if not self.webhook_url:
            logger.warning("Missing Discord webhook, skipping notification")
            return False

        try:
            response = self.session.post(self.webhook_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            logger.info("Discord notification sent")
            return True
        except requests.RequestException as e:
            logger.error(f"Failed to send Discord notification: {e}")
            return False

    def send_text(self, content: str) -> bool:
        return self._post({"content": content})

    def send_embed(self, title: str, description: str, color: int, url: str = None) -> bool:
        embed = {
            "title": title,
            "description": description,
            "color": color,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        if url:
            embed["url"] = url
        return self._post({"embeds": [embed]})


@dataclass(frozen=True)
class DispatchResult:
    action: str
    notification_hash: str = ""
    notified_at: Optional[datetime] = None


def in_keepalive_window(now: datetime, every_hours: int, first_minutes: int) -> bool:
    """True during the first few minutes of every N-th hour"""
    return now.hour % every_hours == 0 and now.minute < first_minutes


class NotificationDispatcher:
    def __init__(self, config: MonitorConfig, sink: DiscordWebhook):
        self.config = config
        self.sink = sink

    def is_duplicate(self, notification_hash: str, snapshot: Snapshot, now: datetime) -> bool:
        if not snapshot.last_notification_hash or snapshot.last_notification_at is None:
            return False
        if notification_hash != snapshot.last_notification_hash:
            return False
        elapsed = now - snapshot.last_notification_at
        return elapsed <= timedelta(seconds=self.config.cooldown_seconds)

    def dispatch(self, diff: Diff, meta: Dict[str, SlotMeta], snapshot: Snapshot,
                 now: datetime = None) -> DispatchResult:
        """Decide on and perform at most one round of notifications for this run"""
        now = now or datetime.now(timezone.utc)
        limit = self.config.message_limit

        added_lines = compose_lines(diff.added, meta, markdown=True)
        removed_lines = compose_lines(diff.removed, meta, markdown=True)

        if diff.has_changes and not (added_lines or removed_lines):
            logger.warning(f"{len(diff.added) + len(diff.removed)} changed keys could not be rendered, nothing sent")
            return DispatchResult(ACTION_IDLE)

        if added_lines or removed_lines:
            # Hash the full text so large diffs sharing a truncated prefix stay distinct
            notification_hash = content_hash("\n".join(added_lines), "\n".join(removed_lines))
            added_text = truncate("\n".join(added_lines), limit)
            removed_text = truncate("\n".join(removed_lines), limit)

            if self.is_duplicate(notification_hash, snapshot, now):
                logger.info("Identical notification sent within cooldown, suppressing")
                return DispatchResult(ACTION_SUPPRESSED)

            if snapshot.is_first_run and not self.config.notify_on_first_run:
                logger.info(f"First run: recording {len(diff.added)} slots as baseline without notifying")
                return DispatchResult(ACTION_FIRST_RUN)

            sent = False
            if added_text:
                sent |= self.sink.send_embed(
                    f"🎟️ New availability (party size {self.config.party_size})",
                    added_text,
                    COLOR_ADDED,
                    self.config.booking_url,
                )
                logger.info(f"{len(diff.added)} new slots")
            if removed_text:
                sent |= self.sink.send_embed(
                    "❌ No longer available",
                    removed_text,
                    COLOR_REMOVED,
                )
                logger.info(f"{len(diff.removed)} slots gone")

            if not sent:
                return DispatchResult(ACTION_FAILED)
            return DispatchResult(ACTION_SENT, notification_hash, now)

        local_now = now.astimezone(self.config.tz)
        if in_keepalive_window(local_now, self.config.keepalive_hours, self.config.keepalive_minutes):
            message = f"✅ Still running at {local_now.strftime('%H:%M:%S')}"
            logger.info(message)
            self.sink.send_text(message)
            return DispatchResult(ACTION_KEEPALIVE)

        logger.info("No changes detected. Still monitoring...")
        return DispatchResult(ACTION_IDLE)

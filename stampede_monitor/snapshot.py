"""Persisted state between runs"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class Snapshot:
    keys: List[str] = field(default_factory=list)
    last_notification_hash: str = ""
    last_notification_at: Optional[datetime] = None
    last_check: Optional[datetime] = None
    check_count: int = 0

    @property
    def is_first_run(self) -> bool:
        return self.last_check is None

    def to_dict(self) -> dict:
        return {
            'keys': sorted(set(self.keys)),
            'last_notification_hash': self.last_notification_hash,
            'last_notification_at': self.last_notification_at.isoformat() if self.last_notification_at else None,
            'last_check': self.last_check.isoformat() if self.last_check else None,
            'check_count': self.check_count,
        }


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def snapshot_from_data(data: Any) -> Snapshot:
    """Build a Snapshot from decoded JSON, falling back to empty on bad shapes"""
    # Older state files stored only the key list
    if isinstance(data, list):
        data = {'keys': data}
    if not isinstance(data, dict):
        logger.warning("State file has unexpected shape, starting fresh")
        return Snapshot()

    keys = data.get('keys', [])
    if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
        logger.warning("State file keys are malformed, starting fresh")
        return Snapshot()

    last_hash = data.get('last_notification_hash')
    check_count = data.get('check_count')

    return Snapshot(
        keys=keys,
        last_notification_hash=last_hash if isinstance(last_hash, str) else "",
        last_notification_at=_parse_timestamp(data.get('last_notification_at')),
        last_check=_parse_timestamp(data.get('last_check')),
        check_count=check_count if isinstance(check_count, int) and not isinstance(check_count, bool) else 0,
    )


class SnapshotStore:
    def __init__(self, path: str):
        self.path = path

    def load(self) -> Snapshot:
        """Load previous state from file"""
        if not os.path.exists(self.path):
            logger.info(f"No state file at {self.path}, treating as first run")
            return Snapshot()
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not load state: {e}")
            return Snapshot()
        return snapshot_from_data(data)

    def save(self, snapshot: Snapshot):
        """Save current state to file, replacing the old one in a single rename"""
        tmp = self.path + '.tmp'
        with open(tmp, 'w', encoding='utf-8') as f:
            json.dump(snapshot.to_dict(), f, indent=2)
        os.replace(tmp, self.path)
        logger.debug(f"Saved {len(snapshot.keys)} keys to {self.path}")

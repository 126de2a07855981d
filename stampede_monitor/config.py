"""Monitor configuration"""

import os
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo

# Venue being watched
ORG_ID = "b2706404-e8f5-4e57-986d-0769e149bad0"
SERIAL = "GJRPJ1VIUNLJ"
PARTY_SIZE = 2

TIMEZONE = "Europe/London"  # timezone for messages
DAYS_AHEAD = 90             # how far ahead to scan

API_URL = "https://booking.stampede.ai/api/v2/times"


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class MonitorConfig:
    org_id: str = ORG_ID
    serial: str = SERIAL
    party_size: int = PARTY_SIZE
    timezone: str = TIMEZONE
    days_ahead: int = DAYS_AHEAD
    api_url: str = API_URL

    webhook_url: Optional[str] = None
    state_file: str = "last.json"
    log_file: str = "slot_monitor.log"

    request_timeout: float = 30.0
    request_delay: float = 0.25   # pause between per-date requests
    webhook_timeout: float = 10.0

    cooldown_seconds: int = 120
    keepalive_hours: int = 4
    keepalive_minutes: int = 5
    message_limit: int = 1990
    notify_on_first_run: bool = True

    booking_url: str = "https://booking.stampede.ai/"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> "MonitorConfig":
        """Build config from constants plus the environment-supplied secrets"""
        return cls(
            webhook_url=os.getenv('DISCORD_WEBHOOK') or None,
            state_file=os.getenv('STATE_FILE', 'last.json'),
            log_file=os.getenv('LOG_FILE', 'slot_monitor.log'),
            notify_on_first_run=_env_flag('NOTIFY_ON_FIRST_RUN', True),
        )

"""
Slot normalization

The availability API has changed shape a few times, so every field is
probed through an ordered list of accessors and the first usable value wins.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone, tzinfo
from typing import Any, Callable, List, Optional

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "_"
KEY_SEPARATOR = "|"

# Numbers at or above this are epoch milliseconds, below it epoch seconds
MILLIS_THRESHOLD = 10 ** 12

_CLOCK_RE = re.compile(r'^\d{2}:\d{2}(:\d{2})?$')
_ISO_DATETIME_RE = re.compile(r'^\d{4}-\d{2}-\d{2}T')

Accessor = Callable[[Any], Any]


def _field(*path: str) -> Accessor:
    """Accessor that walks nested dict keys and returns None on any miss"""
    def get(slot: Any) -> Any:
        node = slot
        for key in path:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node
    get.__name__ = '.'.join(path)
    return get


TYPE_ACCESSORS: List[Accessor] = [
    _field('type', 'name'),
    _field('booking_type', 'name'),
    _field('bookingType', 'name'),
    _field('booking_type_name'),
    _field('category', 'name'),
    _field('category'),
    _field('type'),
]

TIME_FIELDS = [
    'time', 'label', 'start', 'start_time', 'starts_at',
    'startsAt', 'startTime', 'datetime', 'value', 'slot',
]

TIME_ACCESSORS: List[Accessor] = [_field(name) for name in TIME_FIELDS]

REMAINING_FIELD = 'remaining'


def _is_scalar(value: Any) -> bool:
    return isinstance(value, (str, int, float)) and not isinstance(value, bool)


def first_match(slot: Any, accessors: List[Accessor]) -> Any:
    """Return the first non-empty scalar produced by the accessors"""
    for accessor in accessors:
        value = accessor(slot)
        if _is_scalar(value) and str(value).strip():
            return value
    return None


def extract_type(slot: Any) -> str:
    value = first_match(slot, TYPE_ACCESSORS)
    return str(value).strip() if value is not None else UNKNOWN_TYPE


def extract_time_value(slot: Any) -> Any:
    """Find the raw time value of a slot.

    A bare string or number is the time itself. Otherwise each time field
    is tried in order; a field holding a dict is searched one level down
    for the same field names.
    """
    if _is_scalar(slot):
        return slot
    if not isinstance(slot, dict):
        return None

    for accessor in TIME_ACCESSORS:
        value = accessor(slot)
        if isinstance(value, dict):
            value = first_match(value, TIME_ACCESSORS)
        if _is_scalar(value) and str(value).strip():
            return value
    return None


def extract_remaining(slot: Any) -> Optional[int]:
    if not isinstance(slot, dict):
        return None
    value = slot.get(REMAINING_FIELD)
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    elif isinstance(value, str):
        if not value.strip().isdigit():
            return None
        value = int(value.strip())
    if not isinstance(value, int) or value < 0:
        return None
    return value


def parse_instant(day: date, value: Any) -> Optional[datetime]:
    """Resolve a raw time value to an aware UTC datetime, or None"""
    if value is None or isinstance(value, bool):
        return None

    try:
        if isinstance(value, (int, float)):
            seconds = value / 1000 if value >= MILLIS_THRESHOLD else value
            return datetime.fromtimestamp(seconds, tz=timezone.utc)

        text = str(value).strip()

        # Plain clock times are taken as UTC on the requested date
        if _CLOCK_RE.match(text):
            hhmmss = text if len(text) == 8 else f"{text}:00"
            return datetime.fromisoformat(f"{day.isoformat()}T{hhmmss}+00:00")

        if _ISO_DATETIME_RE.match(text):
            parsed = datetime.fromisoformat(text.replace('Z', '+00:00'))
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError, OSError) as e:
        logger.debug(f"Unparseable time {value!r} on {day}: {e}")
        return None

    return None


def format_display_date(day: date) -> str:
    """e.g. 'Sun, 01 Jun 2025'"""
    return day.strftime('%a, %d %b %Y')


def make_key(day: date, slot_type: str, local_time: str) -> str:
    safe_type = slot_type.replace(KEY_SEPARATOR, '/')
    return KEY_SEPARATOR.join([day.isoformat(), safe_type, local_time])


@dataclass(frozen=True)
class NormalizedSlot:
    date: date
    type: str
    local_time: str  # HH:MM in the monitor timezone
    remaining: Optional[int] = None

    @property
    def key(self) -> str:
        return make_key(self.date, self.type, self.local_time)

    @property
    def display_date(self) -> str:
        return format_display_date(self.date)


def normalize_slot(raw: Any, day: date, tz: tzinfo) -> Optional[NormalizedSlot]:
    """Convert one raw API slot to a NormalizedSlot, or None to discard it"""
    instant = parse_instant(day, extract_time_value(raw))
    if instant is None:
        logger.debug(f"Discarding slot without usable time on {day}: {raw!r}")
        return None

    return NormalizedSlot(
        date=day,
        type=extract_type(raw),
        local_time=instant.astimezone(tz).strftime('%H:%M'),
        remaining=extract_remaining(raw),
    )

"""Builds the set of slot keys visible across the scan window"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .normalizer import KEY_SEPARATOR, format_display_date, normalize_slot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlotMeta:
    iso_date: str
    display_date: str
    type: str
    local_time: str
    remaining: Optional[int] = None


@dataclass
class KeySpace:
    keys: Set[str] = field(default_factory=set)
    meta: Dict[str, SlotMeta] = field(default_factory=dict)
    discarded: int = 0


def date_window(days: int, tz: tzinfo, today: date = None) -> List[date]:
    """Contiguous dates starting at today in the given timezone"""
    start = today or datetime.now(tz).date()
    return [start + timedelta(days=i) for i in range(days)]


def build_key_space(slots_by_date: Iterable[Tuple[date, List[Any]]], tz: tzinfo) -> KeySpace:
    space = KeySpace()

    for day, raw_slots in slots_by_date:
        for raw in raw_slots:
            slot = normalize_slot(raw, day, tz)
            if slot is None:
                space.discarded += 1
                continue

            key = slot.key
            space.keys.add(key)
            if key not in space.meta:
                space.meta[key] = SlotMeta(
                    iso_date=day.isoformat(),
                    display_date=slot.display_date,
                    type=slot.type,
                    local_time=slot.local_time,
                    remaining=slot.remaining,
                )

    if space.discarded:
        logger.warning(f"Discarded {space.discarded} slots without a usable time")
    return space


def meta_from_key(key: str) -> Optional[SlotMeta]:
    """Rebuild display metadata from a stored key (used for removed slots)"""
    parts = key.split(KEY_SEPARATOR)
    if len(parts) != 3:
        return None
    iso_date, slot_type, local_time = parts
    try:
        day = date.fromisoformat(iso_date)
    except ValueError:
        return None
    return SlotMeta(
        iso_date=iso_date,
        display_date=format_display_date(day),
        type=slot_type,
        local_time=local_time,
    )

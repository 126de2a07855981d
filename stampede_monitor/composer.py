"""Turns sets of slot keys into short grouped text blocks"""

import hashlib
from typing import Dict, Iterable, List, Optional, Tuple

from .keyspace import SlotMeta, meta_from_key
from .normalizer import UNKNOWN_TYPE

MESSAGE_LIMIT = 1990  # Discord caps content at 2000 characters

# (iso_date, type) -> group
GroupKey = Tuple[str, str]


def format_time(local_time: str, remaining: Optional[int]) -> str:
    if remaining is None:
        return local_time
    return f"{local_time} [{remaining} left]"


def _resolve_meta(key: str, meta: Dict[str, SlotMeta]) -> Optional[SlotMeta]:
    return meta.get(key) or meta_from_key(key)


def group_keys(keys: Iterable[str], meta: Dict[str, SlotMeta]) -> Dict[GroupKey, dict]:
    """Group keys by date and booking type.

    Returns an ordered mapping from (iso_date, type) to
    {'display_date', 'type', 'times'} where times are sorted, unique and
    annotated with the remaining count when it is known.
    """
    buckets: Dict[GroupKey, dict] = {}

    for key in keys:
        info = _resolve_meta(key, meta)
        if info is None:
            continue
        group = buckets.setdefault((info.iso_date, info.type), {
            'display_date': info.display_date,
            'type': info.type,
            'times': {},
        })
        # first remaining count seen for a time wins
        group['times'].setdefault(info.local_time, info.remaining)

    ordered = {}
    for group_key in sorted(buckets):
        group = buckets[group_key]
        ordered[group_key] = {
            'display_date': group['display_date'],
            'type': group['type'],
            'times': [format_time(t, group['times'][t]) for t in sorted(group['times'])],
        }
    return ordered


def format_group_line(display_date: str, slot_type: str, times: List[str], markdown: bool = False) -> str:
    if markdown:
        display_date = f"**{display_date}**"
    line = f"{display_date} — {', '.join(times)}"
    if slot_type and slot_type != UNKNOWN_TYPE:
        line += f" ({slot_type})"
    return line


def compose_lines(keys: Iterable[str], meta: Dict[str, SlotMeta], markdown: bool = False) -> List[str]:
    return [
        format_group_line(group['display_date'], group['type'], group['times'], markdown)
        for group in group_keys(keys, meta).values()
    ]


def truncate(text: str, limit: int = MESSAGE_LIMIT) -> str:
    if len(text) <= limit:
        return text
    return text[:limit - 1] + "…"


def compose_text(keys: Iterable[str], meta: Dict[str, SlotMeta], limit: int = MESSAGE_LIMIT,
                 markdown: bool = False) -> str:
    return truncate("\n".join(compose_lines(keys, meta, markdown)), limit)


def content_hash(added_text: str, removed_text: str) -> str:
    """Fingerprint of a notification, used to drop repeats inside the cooldown"""
    raw = f"added:\n{added_text}\n--\nremoved:\n{removed_text}"
    return hashlib.sha256(raw.encode('utf-8')).hexdigest()

"""Set difference between two scans"""

from dataclasses import dataclass, field
from typing import Iterable, Set


@dataclass(frozen=True)
class Diff:
    added: Set[str] = field(default_factory=set)
    removed: Set[str] = field(default_factory=set)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)


def diff_keys(previous: Iterable[str], current: Iterable[str]) -> Diff:
    """Keys that appeared since the previous scan and keys that disappeared"""
    previous, current = set(previous), set(current)
    return Diff(added=current - previous, removed=previous - current)

"""Entry index: plan entries grouped by canonical date string.

The index is rebuilt from scratch whenever the entry collection changes; it
is never patched in place. Visible months hold tens of entries, so a full
rebuild is cheap.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List

from coach.domain.PlanEntry import PlanEntry


def _sort_group(group: List[PlanEntry]) -> List[PlanEntry]:
    if not any(e.order is not None for e in group):
        return group
    # sorted() is stable: entries without an order keep insertion order, after the ordered ones
    return sorted(group, key=lambda e: (e.order is None, e.order if e.order is not None else 0))


class EntryIndex:
    def __init__(self, groups: Dict[str, List[PlanEntry]] = None):
        self._groups: Dict[str, List[PlanEntry]] = OrderedDict()
        for key, entries in (groups or {}).items():
            self._groups[key] = list(entries)

    def get(self, date_string: str) -> List[PlanEntry]:
        """Entries on the given day; an empty list for days without entries."""
        return list(self._groups.get(date_string, []))

    def dates(self) -> List[str]:
        return list(self._groups.keys())

    def __contains__(self, date_string) -> bool:
        return date_string in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def __iter__(self):
        return iter(self._groups)

    def to_dict(self):
        return {key: [e.to_dict() for e in entries] for key, entries in self._groups.items()}


def build_index(entries: Iterable[PlanEntry]) -> EntryIndex:
    groups: Dict[str, List[PlanEntry]] = OrderedDict()
    for entry in entries:
        groups.setdefault(entry.scheduled_date, []).append(entry)
    return EntryIndex({key: _sort_group(group) for key, group in groups.items()})


__all__ = ['EntryIndex', 'build_index']

"""Mutable bookkeeping for one search attempt."""

from __future__ import annotations

from typing import Dict, Iterable, Mapping, Optional, Set

from availability import EVENING, SHIFTS
from slots import Schedule, Slot, copy_schedule


class SearchState:
    """Partial schedule plus the counters the constraints read.

    ``week_usage[week][shift][person]`` is the set of scenarios the person
    already holds in that week and shift, across every training day of the week.
    """

    def __init__(self, skeleton: Schedule, people: Iterable[str], history: Optional[Mapping[str, int]] = None):
        self.schedule: Schedule = copy_schedule(skeleton)
        self.week_usage: Dict[int, Dict[str, Dict[str, Set[str]]]] = {}
        self.usage: Dict[str, int] = {p: 0 for p in people}
        self.evening: Dict[str, int] = {p: 0 for p in people}
        self.history: Dict[str, int] = {str(p): int(n) for p, n in (history or {}).items()}
        self.expansions = 0

    def held(self, week: int, shift: str, person: str) -> Set[str]:
        return self.week_usage.get(week, {}).get(shift, {}).get(person, set())

    def load(self, person: str) -> int:
        return self.usage.get(person, 0) + self.history.get(person, 0)

    def assign(self, slot: Slot, person: str) -> None:
        self.schedule[slot.week_key][slot.day_slot][slot.shift][slot.scenario] = person
        by_shift = self.week_usage.setdefault(slot.week, {s: {} for s in SHIFTS})
        by_shift[slot.shift].setdefault(person, set()).add(slot.scenario)
        self.usage[person] = self.usage.get(person, 0) + 1
        if slot.shift == EVENING:
            self.evening[person] = self.evening.get(person, 0) + 1

    def unassign(self, slot: Slot, person: str) -> None:
        self.schedule[slot.week_key][slot.day_slot][slot.shift][slot.scenario] = None
        held = self.week_usage[slot.week][slot.shift]
        held[person].discard(slot.scenario)
        if not held[person]:
            del held[person]
        self.usage[person] -= 1
        if slot.shift == EVENING:
            self.evening[person] -= 1

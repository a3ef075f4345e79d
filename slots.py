"""Slot enumeration and the schedule tree.

Schedule layout (JSON-safe, persisted verbatim by callers)::

    {"week0": {"slot1": None,                      # no training that day
               "slot2": {"date": "2026-03-11",
                         "morning": {"PTSD": "Mara", "Jumper": None},
                         "evening": {...}}}}
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Mapping, Optional, Tuple

from availability import SHIFTS
from roster import Roster
from week_plans import SLOT_KEYS, resolve_week_plan, weekday_name

Schedule = Dict[str, Optional[Dict[str, Optional[dict]]]]

_DAY_ABBR = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def week_key(week: int) -> str:
    return f"week{week}"


def short_date(iso_date: str) -> str:
    """``2026-03-10`` -> ``Tue 3/10``"""
    d = date.fromisoformat(iso_date)
    return f"{_DAY_ABBR[d.weekday()]} {d.month}/{d.day}"


@dataclass(frozen=True)
class Slot:
    week: int
    day_slot: str
    date: str
    shift: str
    scenario: str

    @property
    def week_key(self) -> str:
        return week_key(self.week)

    @property
    def weekday(self) -> str:
        return weekday_name(self.date)

    @property
    def label(self) -> str:
        return f"Wk{self.week + 1} {short_date(self.date)} {self.shift}"


def enumerate_slots(
    weeks: List[List[Mapping[str, str]]],
    week_plans: Mapping | None,
    roster: Roster,
) -> Tuple[List[Slot], Schedule]:
    """Flatten the month into slots (weeks -> day slots -> shifts -> scenarios)."""
    slots: List[Slot] = []
    skeleton: Schedule = {}
    for wi, week_days in enumerate(weeks):
        plan = resolve_week_plan(week_plans, wi, week_days, roster.default_days)
        days: Dict[str, Optional[dict]] = {}
        for slot_key in SLOT_KEYS:
            day = plan.get(slot_key)
            if not day:
                days[slot_key] = None
                continue
            cell = {"date": day}
            for shift in SHIFTS:
                cell[shift] = {}
                for scenario in roster.scenarios_for(slot_key):
                    cell[shift][scenario] = None
                    slots.append(Slot(week=wi, day_slot=slot_key, date=day, shift=shift, scenario=scenario))
            days[slot_key] = cell
        skeleton[week_key(wi)] = days
    return slots, skeleton


def copy_schedule(schedule: Schedule) -> Schedule:
    return copy.deepcopy(schedule)


def assigned_person(schedule: Schedule, slot: Slot) -> Optional[str]:
    day = (schedule.get(slot.week_key) or {}).get(slot.day_slot)
    if not day:
        return None
    return (day.get(slot.shift) or {}).get(slot.scenario)


def iter_assignments(schedule: Schedule):
    """Yield ``(week_key, day_slot, date, shift, scenario, person)`` for every cell."""
    for wk, days in (schedule or {}).items():
        if not days:
            continue
        for sk in SLOT_KEYS:
            day = days.get(sk)
            if not day:
                continue
            for shift in SHIFTS:
                for scenario, person in (day.get(shift) or {}).items():
                    yield wk, sk, day.get("date"), shift, scenario, person


def apply_overrides(schedule: Schedule, overrides: Mapping[str, Optional[str]]) -> Schedule:
    """Copy of ``schedule`` with manual ``"week0|slot1|morning|Mania" -> person`` edits.

    Keys that point at canceled days or unknown cells are ignored; an empty
    value clears the cell.
    """
    out = copy_schedule(schedule)
    for key, person in (overrides or {}).items():
        parts = key.split("|")
        if len(parts) != 4:
            continue
        wk, sk, shift, scenario = parts
        day = (out.get(wk) or {}).get(sk)
        if not day or scenario not in (day.get(shift) or {}):
            continue
        day[shift][scenario] = person or None
    return out


def person_stats(schedule: Schedule, people=()) -> Dict[str, Dict]:
    """Per-person ``total``/``morning``/``evening`` counts plus ``scenarios`` tallies.

    Everyone in ``people`` gets a row; names found only in the schedule are added.
    """
    stats: Dict[str, Dict] = {}

    def row(person: str) -> Dict:
        return stats.setdefault(person, {"total": 0, "morning": 0, "evening": 0, "scenarios": {}})

    for person in people:
        row(person)
    for _wk, _sk, _date, shift, scenario, person in iter_assignments(schedule):
        if not person:
            continue
        r = row(person)
        r["total"] += 1
        r[shift] = r.get(shift, 0) + 1
        r["scenarios"][scenario] = r["scenarios"].get(scenario, 0) + 1
    return stats

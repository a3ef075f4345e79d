"""Builders for roster configs, calendars and availability grids."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

from slots import iter_assignments

# 2026-03-09 is a Monday.
WEEK_DATES: Sequence[str] = ("2026-03-09", "2026-03-10", "2026-03-11", "2026-03-12", "2026-03-13")
DAY_NAMES: Sequence[str] = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday")


def one_week() -> List[Dict[str, str]]:
    return [{"date": d, "dayName": n} for d, n in zip(WEEK_DATES, DAY_NAMES)]


def roster_config(
    *,
    people: Iterable[str],
    approvals: Mapping[str, Iterable[str]],
    slot_scenarios: Mapping[str, Iterable[str]],
    conflicts: Iterable[Sequence[str]] = (),
    constraints: Mapping[str, dict] | None = None,
    default_days: Mapping[str, str] | None = None,
) -> Dict:
    """Build a roster dict in the saved-app shape."""

    return {
        "actors": list(people),
        "scenarioActors": {sc: list(p) for sc, p in approvals.items()},
        "slotScenarios": {sk: list(sc) for sk, sc in slot_scenarios.items()},
        "conflicts": [{"actor_cannot_play": list(pair), "scope": "same_shift"} for pair in conflicts],
        "actorConstraints": dict(constraints or {}),
        "defaultDays": dict(default_days or {"slot1": "Tuesday", "slot2": "Wednesday", "slot3": "Thursday"}),
    }


def availability_for(dates: Iterable[str], people: Iterable[str], value="both") -> Dict[str, Dict[str, object]]:
    people = list(people)
    return {d: {p: value for p in people} for d in dates}


def single_day_plan(date: str = "2026-03-10") -> Dict[str, Dict[str, str | None]]:
    return {"week0": {"slot1": date, "slot2": None, "slot3": None}}


def assignments(schedule) -> List[tuple]:
    """Filled cells as ``(week_key, date, shift, scenario, person)``."""
    return [(wk, date, shift, sc, p) for wk, _sk, date, shift, sc, p in iter_assignments(schedule) if p]


def write_json(path: Path, payload) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    return path

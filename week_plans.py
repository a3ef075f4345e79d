"""Month weeks and per-week training-day plans.

A week plan maps each of the three training-day slots to a concrete date or to
``None`` (no training that day). Plans are plain dicts so they round-trip
through the saved JSON untouched.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import Dict, List, Mapping, Optional

SLOT_KEYS = ("slot1", "slot2", "slot3")
WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

WeekPlan = Dict[str, Optional[str]]


def weekday_name(iso_date: str) -> str:
    return WEEKDAYS[date.fromisoformat(iso_date).weekday()]


def weeks_in_month(year: int, month: int) -> List[List[Dict[str, str]]]:
    """Business days of the month, split into weeks that start on Monday."""
    weeks: List[List[Dict[str, str]]] = []
    current: List[Dict[str, str]] = []
    d = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    while d <= last:
        dow = d.weekday()
        if dow == 0 and current:
            weeks.append(current)
            current = []
        if dow < 5:
            current.append({"date": d.isoformat(), "dayName": WEEKDAYS[dow]})
        d += timedelta(days=1)
    if current:
        weeks.append(current)
    return weeks


def default_week_plan(week_days: List[Mapping[str, str]], default_days: Mapping[str, str]) -> WeekPlan:
    plan: WeekPlan = {}
    for slot_key in SLOT_KEYS:
        target = default_days.get(slot_key)
        match = next((wd for wd in week_days if wd.get("dayName") == target), None)
        plan[slot_key] = match["date"] if match else None
    return plan


def resolve_week_plan(
    week_plans: Mapping | None,
    week_index: int,
    week_days: List[Mapping[str, str]],
    default_days: Mapping[str, str],
) -> WeekPlan:
    """Explicit plan for ``week_index`` (``"week<i>"`` or ``i``) or the default one."""
    week_plans = week_plans or {}
    explicit = week_plans.get(f"week{week_index}")
    if explicit is None:
        explicit = week_plans.get(week_index)
    if explicit is None:
        return default_week_plan(week_days, default_days)
    return {sk: (explicit.get(sk) or None) for sk in SLOT_KEYS}


def canceled_week_plan() -> WeekPlan:
    return {sk: None for sk in SLOT_KEYS}


def shift_week_plan(plan: Mapping[str, Optional[str]], week_days: List[Mapping[str, str]], step: int) -> WeekPlan:
    """Move every active slot one business day forward (``step=1``) or back (``step=-1``).

    Moving forward off the last day cancels the slot; moving back off the first
    day leaves it where it is. Dates outside ``week_days`` stay put.
    """
    dates = [wd["date"] for wd in week_days]
    out: WeekPlan = {}
    for sk in SLOT_KEYS:
        current = plan.get(sk)
        if not current:
            out[sk] = None
            continue
        if current not in dates:
            out[sk] = current
            continue
        idx = dates.index(current) + (1 if step > 0 else -1)
        if idx >= len(dates):
            out[sk] = None
        elif idx < 0:
            out[sk] = current
        else:
            out[sk] = dates[idx]
    return out


def week_plan_starting_at(week_days: List[Mapping[str, str]], start_date: str) -> WeekPlan:
    """Put the three slots on consecutive business days beginning at ``start_date``."""
    dates = [wd["date"] for wd in week_days]
    if start_date not in dates:
        return canceled_week_plan()
    start = dates.index(start_date)
    return {sk: (dates[start + i] if start + i < len(dates) else None) for i, sk in enumerate(SLOT_KEYS)}


def assign_slot_to_date(plan: Mapping[str, Optional[str]], slot_key: str, iso_date: Optional[str]) -> WeekPlan:
    """Point ``slot_key`` at ``iso_date`` (``None``/empty cancels it); a date holds one slot."""
    if slot_key not in SLOT_KEYS:
        raise ValueError(f"Unknown day slot {slot_key!r}")
    out: WeekPlan = {sk: plan.get(sk) for sk in SLOT_KEYS}
    if not iso_date:
        out[slot_key] = None
        return out
    for sk in SLOT_KEYS:
        if sk != slot_key and out[sk] == iso_date:
            out[sk] = None
    out[slot_key] = iso_date
    return out

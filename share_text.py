"""Plain-text renderings of a solved month for pasting into messages."""

from __future__ import annotations

from datetime import date
from typing import List

from availability import SHIFTS
from roster import Roster
from slots import Schedule
from week_plans import SLOT_KEYS, WEEKDAYS

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def long_date(iso_date: str) -> str:
    """``2026-03-10`` -> ``Tuesday Mar 10``"""
    d = date.fromisoformat(iso_date)
    return f"{WEEKDAYS[d.weekday()]} {_MONTHS[d.month - 1]} {d.day}"


def _shift_label(roster: Roster, shift: str) -> str:
    return roster.shift_times.get(shift) or shift.capitalize()


def format_schedule_text(schedule: Schedule, roster: Roster, month_name: str, year) -> str:
    lines: List[str] = ["ACTOR SCHEDULE", f"{month_name.upper()} {year}", "=" * 32]
    for wi, wk in enumerate(sorted(schedule, key=lambda k: int(k[4:]))):
        days = schedule.get(wk) or {}
        lines.append("")
        if not any(days.get(sk) for sk in SLOT_KEYS):
            lines.append(f"WEEK {wi + 1} - CANCELED")
            continue
        lines.append(f"WEEK {wi + 1}")
        lines.append("-" * 28)
        for si, sk in enumerate(SLOT_KEYS):
            day = days.get(sk)
            if not day:
                continue
            name = roster.slot_names.get(sk) or f"Day {si + 1}"
            lines.append(f"{long_date(day['date'])} - {name}")
            for shift in SHIFTS:
                lines.append(f"  {_shift_label(roster, shift)}:")
                for scenario, person in (day.get(shift) or {}).items():
                    icon = roster.scenario_icons.get(scenario, "*")
                    lines.append(f"    {icon} {scenario}: {person or 'UNASSIGNED'}")
    return "\n".join(lines)


def format_person_message(person: str, schedule: Schedule, roster: Roster, month_name: str, year) -> str:
    entries: List[str] = []
    for wk in sorted(schedule, key=lambda k: int(k[4:])):
        days = schedule.get(wk) or {}
        for sk in SLOT_KEYS:
            day = days.get(sk)
            if not day:
                continue
            for shift in SHIFTS:
                for scenario, assigned in (day.get(shift) or {}).items():
                    if assigned != person:
                        continue
                    icon = roster.scenario_icons.get(scenario, "*")
                    entries.append(
                        f"{long_date(day['date'])} - {_shift_label(roster, shift)}\n   {icon} Playing: {scenario}"
                    )

    if not entries:
        return "\n".join([
            f"Hi {person},",
            "",
            f"You're not scheduled in {month_name} {year}.",
            "Let me know if your availability changes.",
            "",
            "Thank you!",
        ])

    lines = [f"Hi {person},", "", f"Your schedule for {month_name} {year}:"]
    for entry in entries:
        lines.append("")
        lines.append(entry)
    lines.append("")
    lines.append(f"Total: {len(entries)} shift{'s' if len(entries) != 1 else ''}")
    lines.append("")
    lines.append("Please confirm receipt. Thank you!")
    return "\n".join(lines)

"""Greedy fill used when no relax level produced a complete schedule.

Slots are taken in enumeration order. Within each (week, day, shift) the day's
scenarios go scarcest first, and each gets the best-ranked candidate at the
fallback level or a diagnostic record explaining who was rejected and why.
"""

from __future__ import annotations

from itertools import groupby
from typing import Callable, Dict, List, Optional, Tuple

from availability import Availability
from constraints import ENFORCED_RULES, ConstraintFilter, RelaxLevel, Rule, day_not_allowed, evening_cap_reached
from decision_log import DecisionLogger
from slots import Schedule, Slot, short_date
from state import SearchState
from week_plans import WEEKDAYS

CONFLICT_REASON = "conflicts with an existing same-shift assignment"


def rejection_reason(
    cf: ConstraintFilter,
    person: str,
    slot: Slot,
    state: SearchState,
    level: RelaxLevel = RelaxLevel.STRICT,
) -> Optional[Tuple[str, str]]:
    """First failing check for ``person`` on ``slot`` as ``(code, message)``, or None.

    Checked in a fixed order: availability, already used this week/shift,
    allowed days, evening cap. Rules relaxed at ``level`` are skipped. A conflict
    always involves a scenario already held in the same week and shift, so it is
    reported as a suffix on the ``already_used`` reason rather than as its own code.
    """
    roster = cf.roster
    rules = ENFORCED_RULES[RelaxLevel(level)]
    when = short_date(slot.date)

    av = cf.availability_of(person, slot.date)
    if not av.covers(slot.shift):
        if av is Availability.MORNING:
            return "unavailable", f"only available morning on {when}"
        if av is Availability.EVENING:
            return "unavailable", f"only available evening on {when}"
        return "unavailable", f"not marked available for the {slot.shift} shift on {when}"

    held = state.held(slot.week, slot.shift, person)
    if held:
        msg = f"already used this week in the {slot.shift} shift ({', '.join(sorted(held))})"
        if Rule.CONFLICTS in rules and roster.conflict_partners(slot.scenario) & held:
            msg += f"; {CONFLICT_REASON}"
        return "already_used", msg

    if Rule.ALLOWED_DAYS in rules and day_not_allowed(roster, person, slot, state):
        allowed = roster.constraint(person).allowed_days
        days = "/".join(d for d in WEEKDAYS if d in allowed)
        return "day_not_allowed", f"day not in their allowed set ({days} only, this is {slot.weekday})"

    if Rule.EVENING_CAP in rules and evening_cap_reached(roster, person, slot, state):
        cap = roster.constraint(person).max_evening_ratio
        if cap == 0:
            return "evening_cap", "evening-ratio cap reached (evenings not permitted)"
        return "evening_cap", f"evening-ratio cap reached ({round(cap * 100)}% max)"

    return None


def build_diagnostic(
    cf: ConstraintFilter,
    slot: Slot,
    state: SearchState,
    level: RelaxLevel = RelaxLevel.STRICT,
) -> Dict:
    approved = list(cf.roster.approved(slot.scenario))
    eliminations = []
    for person in approved:
        found = rejection_reason(cf, person, slot, state, level)
        if found:
            code, reason = found
            eliminations.append({"person": person, "code": code, "reason": reason})

    if not approved:
        suggestion = f"No approved actors for {slot.scenario}. Approve at least one actor to fill this slot."
    else:
        open_count = len(approved) - len(eliminations)
        if open_count == 0:
            plural = "s" if len(approved) != 1 else ""
            suggestion = (
                f"All {len(approved)} approved actor{plural} blocked. "
                f"Approve more actors for {slot.scenario} or adjust availability."
            )
        else:
            plural = "s" if open_count != 1 else ""
            suggestion = (
                f"{open_count} actor{plural} eligible but already placed this shift. "
                f"Approve more actors for {slot.scenario}."
            )

    return {
        "slot": slot.label,
        "week": slot.week,
        "week_key": slot.week_key,
        "day_slot": slot.day_slot,
        "date": slot.date,
        "shift": slot.shift,
        "scenario": slot.scenario,
        "approved": approved,
        "eliminations": eliminations,
        "suggestion": suggestion,
    }


def greedy_fill(
    slots: List[Slot],
    skeleton: Schedule,
    cf: ConstraintFilter,
    rank: Callable[[List[str], Slot, SearchState], List[str]],
    people,
    level: RelaxLevel = RelaxLevel.STRICT,
    history=None,
    logger: Optional[DecisionLogger] = None,
) -> Tuple[SearchState, List[Dict]]:
    """Fill what can be filled at ``level``; return the state and one record per gap."""
    state = SearchState(skeleton, people, history)
    errors: List[Dict] = []

    for _, group in groupby(slots, key=lambda s: (s.week, s.day_slot, s.shift)):
        group = sorted(group, key=lambda s: cf.approved_and_available(s.scenario, s.date, s.shift))
        for slot in group:
            candidates = cf.eligible(slot, state, level)
            if not candidates:
                record = build_diagnostic(cf, slot, state, level)
                errors.append(record)
                if logger:
                    logger.log("fallback", slot, "", "Unfilled", record["suggestion"])
                continue
            person = rank(candidates, slot, state)[0]
            state.assign(slot, person)
            if logger:
                logger.log("fallback", slot, person, "Assigned", f"{len(candidates)} candidate(s)")
    return state, errors

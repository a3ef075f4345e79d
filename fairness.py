"""Load balancing: per-person opportunity counts and candidate ordering."""

from __future__ import annotations

from typing import Dict, Iterable, List, Mapping

from availability import EVENING, Availability
from roster import Roster
from slots import Slot
from state import SearchState


def eligibility_counts(
    slots: Iterable[Slot],
    roster: Roster,
    availability: Mapping[str, Mapping[str, Availability]],
) -> Dict[str, int]:
    """How many slots of the month each person could take, ignoring the partial schedule.

    Approval, shift availability and allowed weekdays count; everything that
    depends on other assignments does not. Computed once per solve.
    """
    counts: Dict[str, int] = {p: 0 for p in roster.people}
    for slot in slots:
        day = availability.get(slot.date, {})
        for person in roster.approved(slot.scenario):
            if not day.get(person, Availability.UNAVAILABLE).covers(slot.shift):
                continue
            allowed = roster.constraint(person).allowed_days
            if allowed and slot.weekday not in allowed:
                continue
            counts[person] = counts.get(person, 0) + 1
    return counts


def rank_candidates(
    candidates: List[str],
    slot: Slot,
    state: SearchState,
    roster: Roster,
    counts: Mapping[str, int],
) -> List[str]:
    """Least-loaded first; morning-preferrers last on evenings; then scarcest opportunity.

    ``sorted`` is stable, so remaining ties keep approval order.
    """
    evening = slot.shift == EVENING

    def key(person: str):
        pushed_back = 1 if evening and roster.constraint(person).prefer_morning else 0
        return (state.load(person), pushed_back, counts.get(person, 0))

    return sorted(candidates, key=key)

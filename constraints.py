"""Eligibility predicates and relax levels.

Hard rules (approval, availability, one scenario per person per shift per
week) hold at every level. The soft rules drop out one at a time as the relax
level rises; ``ENFORCED_RULES`` spells out which are active where.
"""

from __future__ import annotations

from enum import Enum, IntEnum
from typing import Callable, Dict, List, Mapping, Tuple

from availability import EVENING, Availability
from roster import Roster
from slots import Slot
from state import SearchState


class RelaxLevel(IntEnum):
    STRICT = 0
    NO_EVENING_CAP = 1
    NO_DAY_RESTRICTIONS = 2
    NO_CONFLICTS = 3


class Rule(Enum):
    CONFLICTS = "conflicts"
    ALLOWED_DAYS = "allowed_days"
    EVENING_CAP = "evening_cap"


ENFORCED_RULES: Dict[RelaxLevel, Tuple[Rule, ...]] = {
    RelaxLevel.STRICT: (Rule.CONFLICTS, Rule.ALLOWED_DAYS, Rule.EVENING_CAP),
    RelaxLevel.NO_EVENING_CAP: (Rule.CONFLICTS, Rule.ALLOWED_DAYS),
    RelaxLevel.NO_DAY_RESTRICTIONS: (Rule.CONFLICTS,),
    RelaxLevel.NO_CONFLICTS: (),
}


def conflict_violation(roster: Roster, person: str, slot: Slot, state: SearchState) -> bool:
    """True if ``person`` already holds a scenario that clashes with ``slot.scenario``."""
    held = state.held(slot.week, slot.shift, person)
    if not held:
        return False
    return bool(roster.conflict_partners(slot.scenario) & held)


def day_not_allowed(roster: Roster, person: str, slot: Slot, state: SearchState) -> bool:
    allowed = roster.constraint(person).allowed_days
    return bool(allowed) and slot.weekday not in allowed


def evening_cap_reached(roster: Roster, person: str, slot: Slot, state: SearchState) -> bool:
    if slot.shift != EVENING:
        return False
    cap = roster.constraint(person).max_evening_ratio
    if cap is None:
        return False
    if cap == 0:
        return True
    used = state.usage.get(person, 0)
    return used > 0 and state.evening.get(person, 0) / used >= cap


RULE_CHECKS: Dict[Rule, Callable[[Roster, str, Slot, SearchState], bool]] = {
    Rule.CONFLICTS: conflict_violation,
    Rule.ALLOWED_DAYS: day_not_allowed,
    Rule.EVENING_CAP: evening_cap_reached,
}


class ConstraintFilter:
    """Answers "who may take this slot right now" against a frozen snapshot."""

    def __init__(self, roster: Roster, availability: Mapping[str, Mapping[str, Availability]]):
        self.roster = roster
        self.availability = availability

    def availability_of(self, person: str, day: str) -> Availability:
        return self.availability.get(day, {}).get(person, Availability.UNAVAILABLE)

    def available(self, person: str, slot: Slot) -> bool:
        return self.availability_of(person, slot.date).covers(slot.shift)

    def approved_and_available(self, scenario: str, day: str, shift: str) -> int:
        return sum(1 for p in self.roster.approved(scenario) if self.availability_of(p, day).covers(shift))

    def eligible(self, slot: Slot, state: SearchState, level: RelaxLevel) -> List[str]:
        checks = [RULE_CHECKS[rule] for rule in ENFORCED_RULES[RelaxLevel(level)]]
        out: List[str] = []
        for person in self.roster.approved(slot.scenario):
            if not self.available(person, slot):
                continue
            if state.held(slot.week, slot.shift, person):
                continue
            if any(check(self.roster, person, slot, state) for check in checks):
                continue
            out.append(person)
        return out

    def count(self, slot: Slot, state: SearchState, level: RelaxLevel) -> int:
        return len(self.eligible(slot, state, level))

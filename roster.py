"""Read-only roster snapshot handed to the solver.

The app edits its configuration in place; a solve works on a private copy so a
change made mid-search is never observed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

from week_plans import SLOT_KEYS, WEEKDAYS

SAME_SHIFT = "same_shift"


@dataclass(frozen=True)
class PersonConstraint:
    allowed_days: FrozenSet[str] = frozenset()
    max_evening_ratio: Optional[float] = None
    prefer_morning: bool = False


NO_CONSTRAINT = PersonConstraint()


@dataclass(frozen=True)
class ConflictRule:
    scenarios: FrozenSet[str]
    scope: str = SAME_SHIFT

    def partners(self, scenario: str) -> FrozenSet[str]:
        """Scenarios that clash with ``scenario`` under this rule."""
        if self.scope != SAME_SHIFT or scenario not in self.scenarios:
            return frozenset()
        return self.scenarios - {scenario}


@dataclass(frozen=True)
class Roster:
    people: Tuple[str, ...]
    approvals: Dict[str, Tuple[str, ...]]
    day_slot_scenarios: Dict[str, Tuple[str, ...]]
    conflicts: Tuple[ConflictRule, ...] = ()
    constraints: Dict[str, PersonConstraint] = field(default_factory=dict)
    default_days: Dict[str, str] = field(default_factory=dict)
    colors: Dict[str, str] = field(default_factory=dict)
    slot_names: Dict[str, str] = field(default_factory=dict)
    scenario_icons: Dict[str, str] = field(default_factory=dict)
    shift_times: Dict[str, str] = field(default_factory=dict)

    def approved(self, scenario: str) -> Tuple[str, ...]:
        return self.approvals.get(scenario, ())

    def scenarios_for(self, day_slot: str) -> Tuple[str, ...]:
        return self.day_slot_scenarios.get(day_slot, ())

    def constraint(self, person: str) -> PersonConstraint:
        return self.constraints.get(person, NO_CONSTRAINT)

    def conflict_partners(self, scenario: str) -> FrozenSet[str]:
        out: set = set()
        for rule in self.conflicts:
            out |= rule.partners(scenario)
        return frozenset(out)

    @classmethod
    def from_config(cls, cfg: Mapping) -> "Roster":
        """Copy a saved configuration dict (app JSON shape) into a frozen snapshot."""
        approvals: Dict[str, Tuple[str, ...]] = {}
        for scenario, people in (cfg.get("scenarioActors") or {}).items():
            if not isinstance(people, (list, tuple)):
                raise ValueError(f"scenarioActors[{scenario!r}] must be a list of names")
            approvals[str(scenario)] = tuple(str(p) for p in people)

        day_slots: Dict[str, Tuple[str, ...]] = {}
        for slot_key, scenarios in (cfg.get("slotScenarios") or {}).items():
            if slot_key not in SLOT_KEYS:
                raise ValueError(f"Unknown day slot {slot_key!r} in slotScenarios")
            day_slots[slot_key] = tuple(dict.fromkeys(str(s) for s in (scenarios or [])))

        return cls(
            people=tuple(str(p) for p in (cfg.get("actors") or [])),
            approvals=approvals,
            day_slot_scenarios=day_slots,
            conflicts=tuple(_parse_conflicts(cfg.get("conflicts") or [])),
            constraints=_parse_constraints(cfg.get("actorConstraints") or {}),
            default_days=dict(cfg.get("defaultDays") or {}),
            colors=dict(cfg.get("actorColors") or {}),
            slot_names=dict(cfg.get("slotNames") or {}),
            scenario_icons=dict(cfg.get("scenarioIcons") or {}),
            shift_times=dict(cfg.get("shiftTimes") or {}),
        )


def _parse_conflicts(raw: List[Mapping]) -> List[ConflictRule]:
    rules: List[ConflictRule] = []
    for entry in raw:
        pair = entry.get("actor_cannot_play") or entry.get("scenarios") or []
        names = frozenset(str(s) for s in pair)
        # A rule needs two distinct scenarios to mean anything.
        if len(names) < 2:
            continue
        rules.append(ConflictRule(scenarios=names, scope=str(entry.get("scope") or SAME_SHIFT)))
    return rules


def _parse_constraints(raw: Mapping[str, Mapping]) -> Dict[str, PersonConstraint]:
    out: Dict[str, PersonConstraint] = {}
    for person, entry in raw.items():
        entry = entry or {}
        days = frozenset(str(d) for d in (entry.get("allowedDays") or []))
        unknown = days - set(WEEKDAYS)
        if unknown:
            raise ValueError(f"{person}: unknown weekday(s) in allowedDays: {sorted(unknown)}")
        ratio = entry.get("maxEveningRatio", entry.get("maxPMRatio"))
        if ratio is not None:
            ratio = float(ratio)
            if not 0.0 <= ratio <= 1.0:
                raise ValueError(f"{person}: maxEveningRatio must be within [0, 1], got {ratio}")
        prefer = bool(entry.get("preferMorning", entry.get("preferAM", False)))
        out[str(person)] = PersonConstraint(allowed_days=days, max_evening_ratio=ratio, prefer_morning=prefer)
    return out

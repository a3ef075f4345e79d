"""Monthly actor schedule solver.

``generate_schedule`` tries each relax level in turn with a fresh backtracking
search (most-constrained slot first, forward checking, expansion budget) and
returns the first complete schedule. If every level fails, a strict greedy
fill runs once and every gap comes back with a diagnostic record.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Dict, List, Mapping, Optional

from availability import normalize_availability_record
from config import build_config
from constraints import ConstraintFilter, RelaxLevel
from decision_log import DecisionLogger
from fairness import eligibility_counts, rank_candidates
from fallback import greedy_fill
from roster import Roster
from slots import Schedule, Slot, enumerate_slots
from state import SearchState


class SearchBudgetExceeded(Exception):
    """Raised inside a search once it has expanded more nodes than allowed."""


class BacktrackingSearch:
    """Chronological backtracking over a fixed slot list at one relax level.

    ``open`` holds indices into ``slots`` in enumeration order. The chosen slot
    is popped from it and put back at the same position when its candidates run
    out, so undoing a step never reorders the rest.
    """

    def __init__(
        self,
        slots: List[Slot],
        cf: ConstraintFilter,
        rank: Callable[[List[str], Slot, SearchState], List[str]],
        level: RelaxLevel,
        budget: int = 50_000,
    ):
        self.slots = slots
        self.cf = cf
        self.rank = rank
        self.level = RelaxLevel(level)
        self.budget = budget

    def run(self, state: SearchState) -> bool:
        open_slots = list(range(len(self.slots)))
        return self._solve(open_slots, state)

    def _most_constrained(self, open_slots: List[int], state: SearchState):
        best_pos, best = -1, None
        for pos, idx in enumerate(open_slots):
            candidates = self.cf.eligible(self.slots[idx], state, self.level)
            if best is None or len(candidates) < len(best):
                best_pos, best = pos, candidates
                if not candidates:
                    break
        return best_pos, best

    def _forward_ok(self, open_slots: List[int], state: SearchState) -> bool:
        return all(self.cf.count(self.slots[idx], state, self.level) for idx in open_slots)

    def _solve(self, open_slots: List[int], state: SearchState) -> bool:
        if not open_slots:
            return True
        state.expansions += 1
        if state.expansions > self.budget:
            raise SearchBudgetExceeded(f"level {self.level.name}: more than {self.budget} expansions")

        pos, candidates = self._most_constrained(open_slots, state)
        idx = open_slots.pop(pos)
        slot = self.slots[idx]
        for person in self.rank(candidates, slot, state):
            state.assign(slot, person)
            if self._forward_ok(open_slots, state) and self._solve(open_slots, state):
                return True
            state.unassign(slot, person)
        open_slots.insert(pos, idx)
        return False


@dataclass
class ScheduleResult:
    schedule: Schedule
    errors: List[Dict] = field(default_factory=list)
    level: Optional[RelaxLevel] = None
    expansions: int = 0

    @property
    def complete(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict:
        return {
            "schedule": self.schedule,
            "errors": self.errors,
            "relaxLevel": None if self.level is None else int(self.level),
            "expansions": self.expansions,
        }


def generate_schedule(
    weeks: List[List[Mapping[str, str]]],
    week_plans: Optional[Mapping],
    availability: Optional[Mapping],
    config,
    *,
    overrides: Optional[dict] = None,
    history: Optional[Mapping[str, int]] = None,
    logger: Optional[DecisionLogger] = None,
) -> ScheduleResult:
    """Solve one month.

    ``config`` is a roster dict in the saved-app shape (or a ``Roster``);
    ``overrides`` tweaks the solver knobs of ``config.DEFAULT_CONFIG``;
    ``history`` maps people to assignments from earlier months.
    """
    cfg = build_config(overrides)
    roster = config if isinstance(config, Roster) else Roster.from_config(config)
    avail = normalize_availability_record(availability)
    history = dict(history or {}) if cfg["USE_HISTORY"] else {}

    slots, skeleton = enumerate_slots(weeks, week_plans, roster)
    counts = eligibility_counts(slots, roster, avail)
    cf = ConstraintFilter(roster, avail)
    rank = partial(_rank, roster=roster, counts=counts)

    total = 0
    for level in cfg["RELAX_LEVELS"]:
        level = RelaxLevel(level)
        state = SearchState(skeleton, roster.people, history)
        search = BacktrackingSearch(slots, cf, rank, level, cfg["SEARCH_BUDGET"])
        try:
            solved = search.run(state)
        except SearchBudgetExceeded:
            solved = False
            status = "Budget exceeded"
        else:
            status = "Solved" if solved else "Exhausted"
        total += state.expansions
        if logger:
            logger.log("search", None, "", status, f"level={level.name} slots={len(slots)} expansions={state.expansions}")
        if solved:
            return ScheduleResult(schedule=state.schedule, errors=[], level=level, expansions=total)

    fallback_level = RelaxLevel(cfg["FALLBACK_RELAX_LEVEL"])
    state, errors = greedy_fill(slots, skeleton, cf, rank, roster.people, fallback_level, history, logger)
    return ScheduleResult(schedule=state.schedule, errors=errors, level=None, expansions=total)


def _rank(candidates, slot, state, *, roster, counts):
    return rank_candidates(candidates, slot, state, roster, counts)

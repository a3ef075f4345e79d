from __future__ import annotations

import pytest

from availability import normalize_availability_record
from constraints import ConstraintFilter, RelaxLevel
from roster import Roster
from slots import enumerate_slots
from solver import BacktrackingSearch, SearchBudgetExceeded
from state import SearchState
from tests.utils import one_week, roster_config, single_day_plan

TUE = "2026-03-10"


class RecordingRank:
    """Keeps approval order and remembers which scenario was decided at each step."""

    def __init__(self):
        self.calls = []

    def __call__(self, candidates, slot, state):
        self.calls.append(slot.scenario)
        return list(candidates)


def _morning_search(approvals, scenarios, budget=50_000):
    people = sorted({p for ps in approvals.values() for p in ps})
    roster = Roster.from_config(roster_config(people=people, approvals=approvals, slot_scenarios={"slot1": scenarios}))
    slots, skeleton = enumerate_slots([one_week()], single_day_plan(), roster)
    morning = [s for s in slots if s.shift == "morning"]
    cf = ConstraintFilter(roster, normalize_availability_record({TUE: {p: "am" for p in people}}))
    rank = RecordingRank()
    search = BacktrackingSearch(morning, cf, rank, RelaxLevel.STRICT, budget)
    return search, SearchState(skeleton, people), rank


def test_most_constrained_slot_is_decided_first() -> None:
    search, state, rank = _morning_search({"X": ["A", "B"], "Y": ["A"]}, ["X", "Y"])
    assert search.run(state)
    assert rank.calls == ["Y", "X"]
    assert state.schedule["week0"]["slot1"]["morning"] == {"X": "B", "Y": "A"}
    assert state.expansions == 2


def test_ties_keep_earliest_slot_and_forward_check_prunes() -> None:
    search, state, rank = _morning_search({"X": ["A"], "Y": ["A"]}, ["X", "Y"])
    assert not search.run(state)
    # X wins the tie; giving it A leaves Y empty, so the search never descends.
    assert rank.calls == ["X"]
    assert state.expansions == 1
    assert state.schedule["week0"]["slot1"]["morning"] == {"X": None, "Y": None}
    assert state.usage == {"A": 0}


def test_dead_end_is_undone_and_slot_order_restored() -> None:
    abc = ["A", "B", "C"]
    search, state, rank = _morning_search({"X": abc, "Y": abc, "Z": abc, "W": ["A", "D"]}, ["X", "Y", "Z", "W"])
    assert search.run(state)
    # W=A passes the forward check but leaves three slots for two people;
    # both X choices fail, X goes back in front of Y and W moves on to D.
    assert rank.calls == ["W", "X", "Y", "Y", "X", "Y", "Z"]
    assert state.expansions == 7
    assert state.schedule["week0"]["slot1"]["morning"] == {"X": "A", "Y": "B", "Z": "C", "W": "D"}
    assert state.usage == {"A": 1, "B": 1, "C": 1, "D": 1}


def test_budget_is_enforced_inside_the_search() -> None:
    abc = ["A", "B", "C"]
    search, state, _ = _morning_search({"X": abc, "Y": abc, "Z": abc, "W": ["A", "D"]}, ["X", "Y", "Z", "W"], budget=3)
    with pytest.raises(SearchBudgetExceeded):
        search.run(state)
    assert state.expansions == 4

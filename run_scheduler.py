#!/usr/bin/env python3
"""Solve one month from a JSON request and write the result.

The request carries the calendar (``year``/``month`` or explicit ``weeks``),
optional ``weekPlans``, the ``availability`` grid and, optionally, an embedded
roster ``config``, solver ``overrides`` and manual ``cellOverrides`` (cell edits
applied after solving). Files passed on the command line take precedence over
the embedded copies.
"""

from __future__ import annotations

import argparse
import calendar
import json
import sys
from pathlib import Path
from typing import Dict, List, Tuple

from config import build_roster_config, load_json
from decision_log import DecisionLogger
from roster import Roster
from slots import apply_overrides
from share_text import format_schedule_text
from solver import generate_schedule
from week_plans import weeks_in_month


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Assign actors to scenarios for one month", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("--input", required=True, type=Path, help="Request JSON (calendar, week plans, availability)")
    ap.add_argument("--config", default=None, type=Path, help="Roster JSON; replaces the request's embedded config")
    ap.add_argument("--overrides", default=None, type=Path, help="JSON with solver knob overrides (SEARCH_BUDGET, RELAX_LEVELS, ...)")
    ap.add_argument("--history", default=None, type=Path, help="JSON mapping person -> shifts from earlier months")
    ap.add_argument("--cell-overrides", default=None, type=Path, help="JSON of manual cell edits (\"week0|slot1|morning|Mania\" -> person); replaces the request's cellOverrides")
    ap.add_argument("--out", default=Path("schedule.json"), type=Path, help="Where to write the schedule + errors JSON")
    ap.add_argument("--decision-log", default=Path("decision_log.csv"), type=Path, help="Decision trail CSV (set to '-' to skip)")
    ap.add_argument("--text-out", default=None, type=Path, help="Optional plain-text schedule for sharing")
    return ap.parse_args()


def request_weeks(request: Dict) -> List[List[Dict[str, str]]]:
    if request.get("weeks") is not None:
        return request["weeks"]
    if request.get("year") is None or request.get("month") is None:
        raise SystemExit("Request needs either 'weeks' or 'year' and 'month'")
    return weeks_in_month(int(request["year"]), int(request["month"]))


def apply_cell_overrides(result, cell_overrides, logger: DecisionLogger | None = None):
    """Apply manual cell edits on top of a solved month.

    Diagnostic records whose cell now holds a person are dropped; a cleared cell
    keeps no record because the gap was chosen by hand.
    """
    if not cell_overrides:
        return result
    result.schedule = apply_overrides(result.schedule, cell_overrides)
    kept = []
    for err in result.errors:
        day = (result.schedule.get(err["week_key"]) or {}).get(err["day_slot"]) or {}
        if not (day.get(err["shift"]) or {}).get(err["scenario"]):
            kept.append(err)
    result.errors = kept
    if logger:
        for key, person in cell_overrides.items():
            logger.log("manual", None, person or "", "Override", key)
    return result


def load_request(args: argparse.Namespace) -> Tuple[Dict, List, Dict, Dict]:
    """Return ``(request, weeks, roster_cfg, overrides)`` with CLI files applied."""
    request = load_json(args.input)
    weeks = request_weeks(request)
    roster_cfg = load_json(args.config) if args.config else (request.get("config") or {})
    overrides = dict(request.get("overrides") or {})
    if args.overrides:
        overrides.update(load_json(args.overrides))
    return request, weeks, build_roster_config(roster_cfg), overrides


def main() -> None:
    args = parse_args()
    request, weeks, roster_cfg, overrides = load_request(args)
    history = load_json(args.history) if args.history else request.get("history")

    try:
        roster = Roster.from_config(roster_cfg)
        logger = DecisionLogger()
        result = generate_schedule(
            weeks,
            request.get("weekPlans"),
            request.get("availability"),
            roster,
            overrides=overrides,
            history=history,
            logger=logger,
        )
        cell_overrides = load_json(args.cell_overrides) if args.cell_overrides else request.get("cellOverrides")
        apply_cell_overrides(result, cell_overrides, logger)
    except ValueError as e:
        raise SystemExit(f"Invalid configuration: {e}")

    args.out.parent.mkdir(parents=True, exist_ok=True)
    args.out.write_text(json.dumps(result.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    print(f"Wrote: {args.out}")

    if str(args.decision_log) != "-":
        args.decision_log.parent.mkdir(parents=True, exist_ok=True)
        logger.write_csv(args.decision_log)
        print(f"Wrote: {args.decision_log}")

    if args.text_out:
        month = request.get("month")
        month_name = calendar.month_name[int(month)] if month else request.get("monthName", "")
        text = format_schedule_text(result.schedule, roster, month_name, request.get("year", ""))
        args.text_out.parent.mkdir(parents=True, exist_ok=True)
        args.text_out.write_text(text + "\n", encoding="utf-8")
        print(f"Wrote: {args.text_out}")

    if not result.complete:
        print(f"[warn] {len(result.errors)} slot(s) left unfilled; see 'errors' in {args.out}", file=sys.stderr)
    elif result.level is None:
        print("[info] Complete schedule from the greedy fill (no relax level finished)", file=sys.stderr)
    else:
        print(f"[info] Complete schedule at relax level {int(result.level)} ({result.expansions} expansions)", file=sys.stderr)


if __name__ == "__main__":
    main()

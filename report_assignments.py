#!/usr/bin/env python3
"""Summarize a solved month.

Reads the JSON written by run_scheduler.py and emits a per-person CSV plus a
plaintext summary: how many shifts each actor got, the morning/evening split,
which scenarios they played, and which slots stayed empty and why.
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from config import build_roster_config, load_json
from slots import person_stats

REPORT_FIELDS = ["Person", "TotalShifts", "Morning", "Evening", "EveningShare", "Scenarios"]


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Generate a per-person assignment report", formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    ap.add_argument("--result", default="schedule.json", type=Path, help="JSON produced by run_scheduler.py")
    ap.add_argument("--config", default=None, type=Path, help="Roster JSON (people with no shifts are listed too)")
    ap.add_argument("--out", default=Path("reports") / "assignment_report.csv", type=Path, help="Where to write the per-person CSV report")
    ap.add_argument("--summary", default=Path("reports") / "assignment_report.txt", type=Path, help="Optional plaintext summary (set to '-' to skip)")
    ap.add_argument("--plot", default="", type=str, help="Optional PNG with per-person load bars")
    return ap.parse_args()


def format_scenarios(counts: Dict[str, int]) -> str:
    return " | ".join(f"{sc} x{n}" if n > 1 else sc for sc, n in sorted(counts.items()))


def build_report(schedule: Dict, people: Sequence[str] = ()) -> List[Dict[str, object]]:
    stats = person_stats(schedule, people)
    report: List[Dict[str, object]] = []
    for person in sorted(stats):
        s = stats[person]
        total = s["total"]
        share = (s["evening"] / total) if total else 0.0
        report.append(
            {
                "Person": person,
                "TotalShifts": total,
                "Morning": s["morning"],
                "Evening": s["evening"],
                "EveningShare": f"{share:.2f}",
                "Scenarios": format_scenarios(s["scenarios"]),
            }
        )
    return report


def write_report(rows: List[Dict[str, object]], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8", newline="") as handle:
        writer = csv.DictWriter(handle, fieldnames=REPORT_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row)


def write_summary(rows: List[Dict[str, object]], errors: List[Dict], path: Path) -> None:
    if str(path) == "-":
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = ["Assignment report"]
    assigned = [row for row in rows if int(row["TotalShifts"]) > 0]
    if not assigned:
        lines.append("No assignments found.")
    else:
        total = sum(int(row["TotalShifts"]) for row in assigned)
        loads = [int(row["TotalShifts"]) for row in rows]
        lines.append(f"People with assignments: {len(assigned)} (total shifts={total})")
        lines.append(f"Load spread: min={min(loads)} max={max(loads)}")
        top = max(loads)
        low = min(loads)
        lines.append("Most loaded: " + ", ".join(str(r["Person"]) for r in rows if int(r["TotalShifts"]) == top))
        lines.append("Least loaded: " + ", ".join(str(r["Person"]) for r in rows if int(r["TotalShifts"]) == low))
        idle = [str(r["Person"]) for r in rows if int(r["TotalShifts"]) == 0]
        if idle:
            lines.append("Without shifts: " + ", ".join(idle))

    if errors:
        lines.append(f"Unfilled slots: {len(errors)}")
        for err in errors:
            lines.append(f"  {err.get('slot', '')} {err.get('scenario', '')}: {err.get('suggestion', '')}")
    else:
        lines.append("Unfilled slots: 0")

    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def bar_edge_colors(people: Sequence[str], colors: Mapping[str, str] | None) -> List[str]:
    """Outline colour per bar: the actor's own colour tag, grey when unset."""
    return [(colors or {}).get(p) or "#2f2f2f" for p in people]


def plot_load_bars(rows: List[Dict[str, object]], path: Path, colors: Mapping[str, str] | None = None) -> None:
    try:
        import matplotlib
        matplotlib.use("Agg")
        import matplotlib.pyplot as plt
        ordered = sorted(rows, key=lambda r: (int(r["TotalShifts"]), str(r["Person"])))
        people = [str(r["Person"]) for r in ordered]
        morning = [int(r["Morning"]) for r in ordered]
        evening = [int(r["Evening"]) for r in ordered]
        edges = bar_edge_colors(people, colors)
        plt.figure(figsize=(12, 5))
        plt.bar(people, morning, label="Morning", edgecolor=edges, linewidth=2)
        plt.bar(people, evening, bottom=morning, label="Evening", edgecolor=edges, linewidth=2)
        plt.xticks(rotation=60, ha='right')
        plt.ylabel("Shifts")
        plt.title("Per-person load, ascending, layered by shift")
        plt.legend()
        plt.tight_layout()
        plt.savefig(path, dpi=160)
        plt.close('all')
        print(f"Wrote plot → {path}", file=sys.stderr)
    except Exception as e:
        print(f"[warn] Could not produce plots: {e}", file=sys.stderr)


def main() -> None:
    args = parse_args()
    result = load_json(args.result)
    people: Sequence[str] = ()
    colors: Dict[str, str] = {}
    if args.config:
        roster_cfg = build_roster_config(load_json(args.config))
        people = roster_cfg.get("actors") or ()
        colors = roster_cfg.get("actorColors") or {}
    rows = build_report(result.get("schedule") or {}, people)
    write_report(rows, args.out)
    write_summary(rows, result.get("errors") or [], args.summary)
    if args.plot:
        plot_load_bars(rows, Path(args.plot), colors)
    print(f"Wrote report to {args.out}")
    if str(args.summary) != "-":
        print(f"Summary saved to {args.summary}")


if __name__ == "__main__":
    main()

"""Decision trail kept while solving and written out by the CLI."""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Optional

from slots import Slot

DECISION_FIELDS = ["Step", "Phase", "Slot", "Scenario", "AssignedTo", "Status", "Note"]


class DecisionLogger:
    def __init__(self):
        self.step = 0
        self.rows = []

    def log(self, phase: str, slot: Optional[Slot], assigned_to: str, status: str, note: str = ""):
        self.step += 1
        self.rows.append({
            "Step": self.step, "Phase": phase,
            "Slot": (slot.label if slot else ""),
            "Scenario": (slot.scenario if slot else ""),
            "AssignedTo": assigned_to or "", "Status": status, "Note": note,
        })

    def write_csv(self, out: Path):
        with Path(out).open("w", newline="", encoding="utf-8") as f:
            w = csv.DictWriter(f, fieldnames=DECISION_FIELDS)
            w.writeheader()
            for r in self.rows:
                w.writerow({k: r.get(k, "") for k in DECISION_FIELDS})

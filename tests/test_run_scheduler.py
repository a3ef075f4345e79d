from __future__ import annotations

import csv
import json
import subprocess
import sys
from pathlib import Path

from tests.utils import WEEK_DATES, availability_for, one_week, roster_config, single_day_plan, write_json

ROOT = Path(__file__).resolve().parents[1]
PEOPLE = ["P1", "P2", "P3", "P4"]


def _request(**extra) -> dict:
    payload = {
        "year": 2026,
        "month": 3,
        "weeks": [one_week()],
        "weekPlans": single_day_plan(),
        "availability": availability_for(WEEK_DATES, PEOPLE),
        "config": roster_config(people=PEOPLE, approvals={"X": PEOPLE, "Y": PEOPLE}, slot_scenarios={"slot1": ["X", "Y"]}),
    }
    payload.update(extra)
    return payload


def _run(tmp_path: Path, *extra: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(ROOT / "run_scheduler.py"), *extra],
        cwd=tmp_path,
        capture_output=True,
        text=True,
    )


def test_cli_writes_schedule_log_and_text(tmp_path: Path) -> None:
    request = write_json(tmp_path / "request.json", _request())
    out = tmp_path / "out" / "schedule.json"
    log = tmp_path / "out" / "decision_log.csv"
    text = tmp_path / "out" / "schedule.txt"

    proc = _run(tmp_path, "--input", str(request), "--out", str(out), "--decision-log", str(log), "--text-out", str(text))
    assert proc.returncode == 0, proc.stderr
    assert f"Wrote: {out}" in proc.stdout

    result = json.loads(out.read_text(encoding="utf-8"))
    assert result["errors"] == []
    assert result["relaxLevel"] == 0
    day = result["schedule"]["week0"]["slot1"]
    assert set(day["morning"].values()) <= set(PEOPLE)

    with log.open(encoding="utf-8", newline="") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["Phase"] == "search" and rows[0]["Status"] == "Solved"
    assert "MARCH 2026" in text.read_text(encoding="utf-8")


def test_cli_config_file_and_overrides_take_precedence(tmp_path: Path) -> None:
    request = write_json(tmp_path / "request.json", _request())
    roster = write_json(
        tmp_path / "roster.json",
        roster_config(people=PEOPLE, approvals={"X": PEOPLE, "Y": []}, slot_scenarios={"slot1": ["X", "Y"]}),
    )
    tuning = write_json(tmp_path / "tuning.json", {"RELAX_LEVELS": [0]})
    out = tmp_path / "schedule.json"

    proc = _run(tmp_path, "--input", str(request), "--config", str(roster), "--overrides", str(tuning), "--out", str(out), "--decision-log", "-")
    assert proc.returncode == 0, proc.stderr
    assert "[warn] 2 slot(s) left unfilled" in proc.stderr

    result = json.loads(out.read_text(encoding="utf-8"))
    assert result["relaxLevel"] is None
    assert {e["scenario"] for e in result["errors"]} == {"Y"}
    assert not (tmp_path / "decision_log.csv").exists()


def test_cli_applies_cell_overrides_after_solving(tmp_path: Path) -> None:
    config = roster_config(people=PEOPLE, approvals={"X": PEOPLE, "Y": []}, slot_scenarios={"slot1": ["X", "Y"]})
    edits = {"week0|slot1|morning|Y": "P4", "week0|slot9|morning|Y": "P1"}
    request = write_json(tmp_path / "request.json", _request(config=config, overrides={"RELAX_LEVELS": [0]}, cellOverrides=edits))
    out = tmp_path / "schedule.json"
    log = tmp_path / "decision_log.csv"

    proc = _run(tmp_path, "--input", str(request), "--out", str(out), "--decision-log", str(log))
    assert proc.returncode == 0, proc.stderr
    assert "[warn] 1 slot(s) left unfilled" in proc.stderr

    result = json.loads(out.read_text(encoding="utf-8"))
    day = result["schedule"]["week0"]["slot1"]
    assert day["morning"]["Y"] == "P4"
    assert day["evening"]["Y"] is None
    assert [(e["shift"], e["scenario"]) for e in result["errors"]] == [("evening", "Y")]

    with log.open(encoding="utf-8", newline="") as handle:
        manual = [r for r in csv.DictReader(handle) if r["Phase"] == "manual"]
    assert [(r["AssignedTo"], r["Note"]) for r in manual] == [("P4", "week0|slot1|morning|Y"), ("P1", "week0|slot9|morning|Y")]


def test_cell_overrides_file_replaces_request_edits(tmp_path: Path) -> None:
    request = write_json(tmp_path / "request.json", _request(cellOverrides={"week0|slot1|morning|X": "P1"}))
    edits = write_json(tmp_path / "edits.json", {"week0|slot1|evening|X": None})
    out = tmp_path / "schedule.json"

    proc = _run(tmp_path, "--input", str(request), "--cell-overrides", str(edits), "--out", str(out), "--decision-log", "-")
    assert proc.returncode == 0, proc.stderr
    result = json.loads(out.read_text(encoding="utf-8"))
    day = result["schedule"]["week0"]["slot1"]
    assert day["evening"]["X"] is None
    assert day["morning"]["X"] in PEOPLE
    assert result["errors"] == []

def test_cli_derives_weeks_from_month(tmp_path: Path) -> None:
    payload = _request()
    del payload["weeks"]
    payload["weekPlans"] = {}
    payload["availability"] = {}
    request = write_json(tmp_path / "request.json", payload)
    out = tmp_path / "schedule.json"

    proc = _run(tmp_path, "--input", str(request), "--out", str(out))
    assert proc.returncode == 0, proc.stderr
    schedule = json.loads(out.read_text(encoding="utf-8"))["schedule"]
    assert sorted(schedule) == [f"week{i}" for i in range(5)]
    # Default days: Tuesday 2026-03-03 is the first training day.
    assert schedule["week0"]["slot1"]["date"] == "2026-03-03"


def test_cli_rejects_bad_config(tmp_path: Path) -> None:
    request = write_json(tmp_path / "request.json", _request(overrides={"SEARCH_BUDGET": -1}))
    proc = _run(tmp_path, "--input", str(request))
    assert proc.returncode != 0
    assert "Invalid configuration" in proc.stderr


def test_cli_missing_input(tmp_path: Path) -> None:
    proc = _run(tmp_path, "--input", str(tmp_path / "nope.json"))
    assert proc.returncode != 0
    assert "Missing file" in proc.stderr

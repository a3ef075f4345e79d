#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Solver tuning and the default actor roster.

``DEFAULT_CONFIG`` holds the knobs that shape a solve (search budget, which
relax levels to try, the fallback level). ``DEFAULT_ROSTER`` is the roster the
app ships with; callers normally replace it with their saved configuration.
"""

from __future__ import annotations
import copy, json
from pathlib import Path
from typing import Dict

SCRIPT_DIR = Path(__file__).resolve().parent

# =============== CONFIG (search knobs) ================================
DEFAULT_CONFIG = {
    # Node expansions allowed per relax-level attempt before giving up on it.
    "SEARCH_BUDGET": 50_000,

    # Relax levels tried in order; the first complete schedule wins.
    #   0 = strict, 1 = ignore evening cap, 2 = +ignore allowed days,
    #   3 = +ignore conflict rules. One-role-per-shift is never relaxed.
    "RELAX_LEVELS": [0, 1, 2, 3],

    # Level used by the greedy fallback when no level produced a full schedule.
    "FALLBACK_RELAX_LEVEL": 0,

    # Add historical usage counts (when supplied) to the load-balancing key.
    "USE_HISTORY": True,
}

# =============== ROSTER (app defaults) ================================
DEFAULT_ROSTER = {
    "actors": ["Decatur", "Sat Charn", "Mara", "Rumi", "Rich", "Antonia", "Doc", "Qurrat", "Nicole", "Edwin", "Chris"],
    "actorColors": {
        "Decatur": "#FF6B6B", "Sat Charn": "#4ECDC4", "Mara": "#45B7D1", "Rumi": "#F7DC6F",
        "Rich": "#82E0AA", "Antonia": "#F1948A", "Doc": "#85C1E9", "Qurrat": "#D7BDE2",
        "Nicole": "#A3E4D7", "Edwin": "#F8C471", "Chris": "#E59866",
    },
    "scenarioActors": {
        "Mania": ["Sat Charn", "Doc", "Antonia", "Mara"],
        "Psychosis": ["Rumi", "Nicole", "Sat Charn", "Qurrat", "Mara"],
        "Depression": ["Decatur", "Rich", "Doc", "Edwin", "Nicole"],
        "PTSD": ["Sat Charn", "Antonia", "Mara", "Decatur", "Rumi"],
        "Jumper": ["Decatur", "Rich", "Doc", "Edwin", "Rumi"],
        "Borderline": ["Antonia", "Rumi", "Sat Charn", "Qurrat", "Mara", "Decatur", "Edwin"],
        "Suicidal MOS": ["Chris", "Antonia", "Sat Charn", "Nicole"],
        "Dementia": ["Decatur", "Doc", "Rumi", "Qurrat"],
        "Autism": ["Rich", "Edwin", "Rumi", "Nicole"],
    },
    "scenarioIcons": {
        "Mania": "⚡", "Psychosis": "🌀", "Depression": "🌧", "PTSD": "🛡",
        "Jumper": "🚨", "Borderline": "🔄", "Suicidal MOS": "💙", "Dementia": "🧠", "Autism": "🧩",
    },
    "slotScenarios": {
        "slot1": ["Mania", "Psychosis", "Depression"],
        "slot2": ["PTSD", "Jumper", "Borderline"],
        "slot3": ["Suicidal MOS", "Dementia", "Autism"],
    },
    "slotNames": {"slot1": "Day 1", "slot2": "Day 2", "slot3": "Day 3"},
    "defaultDays": {"slot1": "Tuesday", "slot2": "Wednesday", "slot3": "Thursday"},
    "conflicts": [{"actor_cannot_play": ["Jumper", "Depression"], "scope": "same_shift"}],
    "shiftTimes": {"morning": "Noon", "evening": "8 PM"},
    "actorConstraints": {},
}


def deep_update(dst: dict, src: dict) -> dict:
    """Recursively merge ``src`` into ``dst`` (in-place)."""

    for key, value in (src or {}).items():
        if isinstance(value, dict) and isinstance(dst.get(key), dict):
            deep_update(dst[key], value)
        else:
            dst[key] = copy.deepcopy(value)
    return dst


def _validate(cfg: dict) -> None:
    budget = cfg.get("SEARCH_BUDGET")
    if not isinstance(budget, int) or isinstance(budget, bool) or budget <= 0:
        raise ValueError(f"SEARCH_BUDGET must be a positive integer, got {budget!r}")
    levels = cfg.get("RELAX_LEVELS") or []
    for level in list(levels) + [cfg.get("FALLBACK_RELAX_LEVEL")]:
        if level not in (0, 1, 2, 3):
            raise ValueError(f"Unknown relax level {level!r} (expected 0..3)")
    if list(levels) != sorted(levels):
        raise ValueError("RELAX_LEVELS must be listed from strictest to most relaxed")


def build_config(overrides: dict | None = None) -> dict:
    cfg = copy.deepcopy(DEFAULT_CONFIG)
    if overrides:
        deep_update(cfg, overrides)
    _validate(cfg)
    return cfg


def build_roster_config(overrides: dict | None = None) -> dict:
    """Return a roster dict: the defaults, replaced key-by-key by ``overrides``.

    Roster sections are whole objects (e.g. a new ``scenarioActors`` table), so
    they replace rather than merge.
    """
    roster = copy.deepcopy(DEFAULT_ROSTER)
    for key, value in (overrides or {}).items():
        roster[key] = copy.deepcopy(value)
    return roster


def resolve_data_path(path: Path) -> Path:
    """Locate a data file relative to CWD or the script directory."""

    if path.exists():
        return path
    if not path.is_absolute():
        alt = SCRIPT_DIR / path
        if alt.exists():
            return alt
    return path


def load_json(path: Path) -> Dict:
    path = resolve_data_path(Path(path))
    if not path.exists():
        raise SystemExit(f"Missing file: {path}")
    return json.loads(path.read_text(encoding="utf-8-sig"))

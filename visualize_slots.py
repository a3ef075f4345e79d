#!/usr/bin/env python3
"""Produce graphs that show which slots compete for the same actors."""
from __future__ import annotations

import argparse
import statistics
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib import colors as mpl_colors
from matplotlib.lines import Line2D
import networkx as nx

from availability import normalize_availability_record
from config import build_roster_config, load_json
from constraints import ConstraintFilter, RelaxLevel
from roster import Roster
from run_scheduler import request_weeks
from slots import Slot, assigned_person, enumerate_slots
from state import SearchState
from week_plans import WEEKDAYS


@dataclass
class CandidateColoring:
    cmap: matplotlib.colors.Colormap
    norm: mpl_colors.Normalize

LAYOUT_CHOICES = ("grid", "spring", "component")


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Visualize slot contention")
    ap.add_argument("--input", required=True, type=Path, help="Request JSON (as for run_scheduler.py)")
    ap.add_argument("--config", default=None, type=Path, help="Roster JSON; replaces the request's embedded config")
    ap.add_argument("--result", default=None, type=Path, help="Solved schedule JSON; unfilled slots are drawn larger")
    ap.add_argument("--out-dir", default=Path("slot_graphs"), type=Path, help="Directory for generated graph files")
    ap.add_argument("--out-prefix", default="slots_graph", type=str, help="Base filename prefix for graph images")
    ap.add_argument(
        "--layouts",
        nargs="+",
        default=list(LAYOUT_CHOICES),
        choices=LAYOUT_CHOICES,
        help="One or more layout names to render",
    )
    ap.add_argument("--dpi", type=int, default=200, help="Output DPI")
    ap.add_argument("--skip-analysis", action="store_true", help="Skip the candidate histogram")
    return ap.parse_args()


def node_id(slot: Slot) -> str:
    return f"{slot.week_key}|{slot.day_slot}|{slot.shift}|{slot.scenario}"


def slot_candidates(slots: Iterable[Slot], cf: ConstraintFilter) -> Dict[str, Set[str]]:
    """Strict-level candidates of each slot on an empty schedule."""
    empty = SearchState({}, cf.roster.people)
    return {node_id(s): set(cf.eligible(s, empty, RelaxLevel.STRICT)) for s in slots}


def build_contention(slots: List[Slot], candidates: Mapping[str, Set[str]]) -> List[Tuple[str, str, Dict[str, object]]]:
    """Edges between slots of the same week and shift that share a candidate."""
    by_week_shift: Dict[Tuple[int, str], List[Slot]] = defaultdict(list)
    for slot in slots:
        by_week_shift[(slot.week, slot.shift)].append(slot)

    edges: List[Tuple[str, str, Dict[str, object]]] = []
    for (week, shift), group in by_week_shift.items():
        for i in range(len(group)):
            a = node_id(group[i])
            for j in range(i + 1, len(group)):
                b = node_id(group[j])
                shared = candidates.get(a, set()) & candidates.get(b, set())
                if shared:
                    edges.append((a, b, {"week": week, "shift": shift, "shared": len(shared)}))
    return edges


def build_graph(
    slots: List[Slot],
    edges: List[Tuple[str, str, Dict[str, object]]],
    candidates: Mapping[str, Set[str]],
    unfilled: Optional[Set[str]] = None,
) -> nx.Graph:
    graph = nx.Graph()
    unfilled = unfilled or set()
    for slot in slots:
        nid = node_id(slot)
        graph.add_node(
            nid,
            label=f"{slot.scenario}\n{slot.label}",
            day=slot.weekday,
            week=slot.week,
            shift=slot.shift,
            cand_count=len(candidates.get(nid, ())),
            unfilled=nid in unfilled,
        )
    for src, dst, meta in edges:
        if src in graph and dst in graph:
            graph.add_edge(src, dst, **meta)
    if not graph.nodes:
        raise RuntimeError("No slots to visualize")
    return graph


def _layout_grid(graph: nx.Graph) -> Dict[str, Tuple[float, float]]:
    day_index = {day: idx for idx, day in enumerate(WEEKDAYS)}
    positions: Dict[str, Tuple[float, float]] = {}
    per_cell: Dict[Tuple[int, str, str], int] = defaultdict(int)
    for nid in graph.nodes:
        node = graph.nodes[nid]
        cell = (node["week"], node["day"], node["shift"])
        per_cell[cell] += 1
        x = node["week"] + (per_cell[cell] - 1) * 0.15
        y = day_index.get(node["day"], len(WEEKDAYS)) + (0.4 if node["shift"] == "evening" else 0.0)
        positions[nid] = (x, y)
    return positions


def _layout_spring(graph: nx.Graph) -> Dict[str, Tuple[float, float]]:
    if len(graph.nodes) == 1:
        return {next(iter(graph.nodes)): (0.0, 0.0)}
    return nx.spring_layout(graph, seed=42)


def _layout_components(graph: nx.Graph) -> Dict[str, Tuple[float, float]]:
    positions: Dict[str, Tuple[float, float]] = {}
    comps = list(nx.connected_components(graph))
    x_cursor = 0.0
    for comp_nodes in sorted(comps, key=lambda c: (-len(c), min(c))):
        for idx, node in enumerate(sorted(comp_nodes)):
            positions[node] = (x_cursor, -idx)
        x_cursor += 4.0
    return positions


LAYOUT_FNS = {
    "grid": _layout_grid,
    "spring": _layout_spring,
    "component": _layout_components,
}


def _candidate_coloring(graph: nx.Graph) -> CandidateColoring:
    counts = [graph.nodes[n].get("cand_count", 0) for n in graph.nodes]
    vmin, vmax = min(counts), max(counts)
    if vmin == vmax:
        vmax = vmin + 1
    return CandidateColoring(cmap=plt.get_cmap("plasma"), norm=mpl_colors.Normalize(vmin=vmin, vmax=vmax))


def _day_palette(graph: nx.Graph) -> Dict[str, str]:
    days = [d for d in WEEKDAYS if any(graph.nodes[n]["day"] == d for n in graph.nodes)]
    cmap = plt.get_cmap("tab10", max(3, len(days)))
    return {day: matplotlib.colors.rgb2hex(cmap(idx)) for idx, day in enumerate(days)}


def draw_graph_variants(graph: nx.Graph, out_dir: Path, out_prefix: str, *, layouts: List[str], dpi: int) -> List[Path]:
    palette = _day_palette(graph)
    coloring = _candidate_coloring(graph)
    out_dir.mkdir(parents=True, exist_ok=True)
    prefix = Path(out_prefix).stem or "slots_graph"
    generated: List[Path] = []
    for layout in layouts:
        out_path = out_dir / f"{prefix}_{layout}.png"
        _render_graph(graph, LAYOUT_FNS[layout](graph), out_path, palette, coloring, dpi=dpi, layout_name=layout)
        generated.append(out_path)
    return generated


def _render_graph(
    graph: nx.Graph,
    positions: Dict[str, Tuple[float, float]],
    out_path: Path,
    palette: Dict[str, str],
    coloring: CandidateColoring,
    *,
    dpi: int,
    layout_name: str,
) -> None:
    fig, ax = plt.subplots(figsize=(13, 9))
    node_sizes = [1100 if graph.nodes[n]["unfilled"] else 650 for n in graph.nodes]
    node_colors = [coloring.cmap(coloring.norm(graph.nodes[n]["cand_count"])) for n in graph.nodes]
    border_colors = [palette.get(graph.nodes[n]["day"], "#2f2f2f") for n in graph.nodes]
    nx.draw_networkx_nodes(
        graph,
        positions,
        node_color=node_colors,
        node_size=node_sizes,
        alpha=0.92,
        ax=ax,
        linewidths=1.4,
        edgecolors=border_colors,
    )
    labels = {n: graph.nodes[n]["label"].split("\n", 1)[0] for n in graph.nodes}
    nx.draw_networkx_labels(graph, positions, labels=labels, font_size=7, ax=ax)
    if graph.edges:
        widths = [0.6 + 0.4 * graph.edges[e]["shared"] for e in graph.edges]
        nx.draw_networkx_edges(graph, positions, width=widths, alpha=0.35, ax=ax, edge_color="#555555")

    handles = [
        Line2D([0], [0], marker="o", linestyle="", markerfacecolor="#ffffff",
               markeredgecolor=color, markeredgewidth=1.5, label=day)
        for day, color in palette.items()
    ]
    if handles:
        ax.legend(handles=handles, loc="upper right", fontsize=8, title="Day (border color)")
    sm = plt.cm.ScalarMappable(norm=coloring.norm, cmap=coloring.cmap)
    sm.set_array([])
    fig.colorbar(sm, ax=ax, fraction=0.046, pad=0.04).set_label("Eligible candidates (strict)")

    ax.set_title(f"Slot contention ({layout_name} layout)")
    ax.set_axis_off()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path, dpi=dpi)
    plt.close(fig)


def plot_candidate_hist(counts: List[int], out_path: Path, *, dpi: int) -> None:
    if not counts:
        return
    fig, ax = plt.subplots(figsize=(10, 4))
    ax.hist(counts, bins=range(0, max(counts) + 2), color="#6baed6", edgecolor="#1f1f1f", alpha=0.85)
    ax.set_xlabel("Eligible candidates per slot")
    ax.set_ylabel("Slot count")
    ax.set_title("Candidate availability distribution")
    ax.axvline(statistics.median(counts), color="#cb181d", linestyle="--", linewidth=1, label="median")
    ax.legend(loc="upper right", fontsize=8)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(out_path, dpi=dpi)
    plt.close(fig)


def unfilled_nodes(slots: Iterable[Slot], schedule: Mapping) -> Set[str]:
    return {node_id(s) for s in slots if assigned_person(schedule, s) is None}


def main() -> None:
    args = parse_args()
    request = load_json(args.input)
    roster_cfg = load_json(args.config) if args.config else (request.get("config") or {})
    roster = Roster.from_config(build_roster_config(roster_cfg))
    slots, _ = enumerate_slots(request_weeks(request), request.get("weekPlans"), roster)
    cf = ConstraintFilter(roster, normalize_availability_record(request.get("availability")))
    candidates = slot_candidates(slots, cf)
    unfilled = None
    if args.result:
        unfilled = unfilled_nodes(slots, load_json(args.result).get("schedule") or {})
    graph = build_graph(slots, build_contention(slots, candidates), candidates, unfilled)

    for path in draw_graph_variants(graph, args.out_dir, args.out_prefix, layouts=args.layouts, dpi=args.dpi):
        print(f"Wrote graph to {path}")
    if not args.skip_analysis:
        hist_path = args.out_dir / f"{Path(args.out_prefix).stem}_candidate_hist.png"
        plot_candidate_hist([graph.nodes[n]["cand_count"] for n in graph.nodes], hist_path, dpi=args.dpi)
        print(f"Wrote analysis chart to {hist_path}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""Compute a note graph layout headlessly.

This script:
1. Loads notes from a JSON export (a list of note records, or {"notes": [...]})
2. Builds the graph for the chosen render mode and performance mode
3. Runs the force simulation until it settles
4. Prints graph statistics and optionally writes an SVG and a positions file

Usage:
    python scripts/compute_layout.py notes.json
    python scripts/compute_layout.py notes.json --mode hybrid --svg graph.svg
    python scripts/compute_layout.py notes.json --positions layout.json --max-ticks 500
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from tqdm import tqdm

from notegraph.engine import GraphEngine
from notegraph.models import RENDER_MODES, Note, PerformanceMode, RenderMode
from notegraph.storage import InMemoryNoteStore

logging.basicConfig(
    level=logging.WARNING,  # Reduce noise during progress bar
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def load_notes(path: Path) -> list[Note]:
    """Read note records from a JSON file."""
    data = json.loads(path.read_text(encoding="utf-8"))
    records = data.get("notes", []) if isinstance(data, dict) else data
    return [Note.from_dict(record) for record in records]


def run_layout(engine: GraphEngine, max_ticks: int) -> int:
    """Tick until idle or max_ticks, with a progress bar."""
    ticks = 0
    with tqdm(total=max_ticks, desc="Layout", unit="tick") as progress:
        while ticks < max_ticks and engine.step():
            ticks += 1
            progress.update(1)
            progress.set_postfix(alpha=f"{engine.simulator.alpha:.3f}")
    return ticks


def print_summary(engine: GraphEngine, ticks: int) -> None:
    stats = engine.stats()
    result = engine.result
    info = RENDER_MODES[engine.render_mode]

    print("\n" + "=" * 60)
    print(f"LAYOUT: {info.name}")
    print("=" * 60)
    print(f"  Notes:              {len(engine.notes)}")
    print(f"  Visible nodes:      {stats.node_count}/{result.total_nodes}")
    print(f"  Visible links:      {stats.link_count}/{result.total_links}")
    print(f"  Optimization level: {result.level.value} ({result.mode.value})")
    print(f"  Avg connections:    {stats.average_connections:.2f}")
    print(f"  Orphans:            {stats.orphan_count}")
    if stats.most_connected_id:
        print(
            f"  Most connected:     {stats.most_connected_title} "
            f"({stats.most_connected_degree} links)"
        )
    for link_type, count in sorted(stats.links_by_type.items()):
        print(f"    {link_type:<14} {count}")
    print(f"  Ticks:              {ticks} (alpha={engine.simulator.alpha:.4f})")

    positions = engine.simulator.positions()
    if positions:
        xs = [p[0] for p in positions.values()]
        ys = [p[1] for p in positions.values()]
        print(f"  Bounding box:       x=[{min(xs):.1f}, {max(xs):.1f}], y=[{min(ys):.1f}, {max(ys):.1f}]")

    report = engine.performance()
    print(f"  Performance:        {report.score:.0f} ({report.status})")
    for recommendation in report.recommendations:
        print(f"    - {recommendation}")


def main() -> bool:
    parser = argparse.ArgumentParser(
        description="Compute a force-directed layout for a note export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("notes", type=Path, help="JSON file with note records")
    parser.add_argument(
        "--mode",
        default=RenderMode.INTERNAL.value,
        choices=[mode.value for mode in RenderMode],
        help="Link strategy (default: internal)",
    )
    parser.add_argument(
        "--performance",
        default=PerformanceMode.AUTO.value,
        choices=[mode.value for mode in PerformanceMode],
        help="Performance mode (default: auto)",
    )
    parser.add_argument("--max-ticks", type=int, default=300, help="Tick limit (default: 300)")
    parser.add_argument("--svg", type=Path, help="Write the final frame as SVG")
    parser.add_argument("--positions", type=Path, help="Write node positions as JSON")

    args = parser.parse_args()

    if not args.notes.exists():
        print(f"Error: File not found: {args.notes}")
        return False

    try:
        notes = load_notes(args.notes)
    except (OSError, ValueError, KeyError) as e:
        logger.exception(f"Could not read notes: {e}")
        return False
    print(f"Loaded {len(notes)} notes from {args.notes}")

    engine = GraphEngine(note_store=InMemoryNoteStore(notes))
    engine.render_mode = RenderMode.parse(args.mode)
    engine.performance_mode = PerformanceMode.parse(args.performance)
    engine.load_notes()

    ticks = run_layout(engine, args.max_ticks)
    print_summary(engine, ticks)

    if args.svg:
        svg = engine.render()
        if svg is None:
            print(f"Error: Render failed: {engine.boundary.error}")
            return False
        args.svg.write_text(svg, encoding="utf-8")
        print(f"\nSVG written to {args.svg}")

    if args.positions:
        positions = {
            node_id: {"x": x, "y": y} for node_id, (x, y) in engine.simulator.positions().items()
        }
        args.positions.write_text(json.dumps(positions, indent=2), encoding="utf-8")
        print(f"Positions written to {args.positions}")

    return True


if __name__ == "__main__":
    sys.exit(0 if main() else 1)
